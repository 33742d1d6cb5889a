"""Unit tests for privileged role detection"""

from rbac_tools.rbac.models import RoleSystem
from rbac_tools.rbac.privileged import get_privileged_roles, is_privileged_role


class TestPrivilegedRoles:
    """Test suite for privileged role lists"""

    def test_azure_owner_is_privileged(self, make_role):
        assert is_privileged_role(make_role("Owner", actions=["*"])) is True

    def test_narrow_azure_role_is_not_privileged(self, make_role):
        assert is_privileged_role(make_role("Reader", actions=["*/read"])) is False

    def test_lookup_uses_the_roles_own_system(self, make_role):
        """An Azure role named like an Entra ID role is not flagged"""
        assert is_privileged_role(make_role("Global Administrator")) is False
        assert is_privileged_role(make_role("Global Administrator", system=RoleSystem.ENTRA_ID)) is True

    def test_match_is_exact(self, make_role):
        assert is_privileged_role(make_role("owner")) is False

    def test_get_privileged_roles(self, azure_roles):
        assert [role.name for role in get_privileged_roles(azure_roles)] == ["Owner", "Contributor"]
