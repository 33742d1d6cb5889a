"""Unit tests for role definition adapters"""

import pytest

from rbac_tools.core.exceptions import RoleDefinitionError
from rbac_tools.rbac.adapters import ADAPTERS, adapt_azure_role, adapt_entra_role
from rbac_tools.rbac.models import RoleSystem, RoleType


AZURE_READER = {
    "id": "/providers/Microsoft.Authorization/roleDefinitions/acdd72a7-3385-48ef-bd42-f606fba81ae7",
    "name": "acdd72a7-3385-48ef-bd42-f606fba81ae7",
    "type": "Microsoft.Authorization/roleDefinitions",
    "roleName": "Reader",
    "roleType": "BuiltInRole",
    "description": "View all resources, but does not allow you to make any changes.",
    "permissions": [
        {"actions": ["*/read"], "notActions": [], "dataActions": [], "notDataActions": []}
    ],
    "assignableScopes": ["/"],
}

ENTRA_PASSWORD_ADMIN = {
    "id": "966707d0-3269-4727-9be2-8c3a10f19b9d",
    "displayName": "Password Administrator",
    "description": "Can reset passwords for non-administrators and Password Administrators.",
    "isBuiltIn": True,
    "isEnabled": True,
    "resourceScopes": ["/"],
    "rolePermissions": [
        {
            "allowedResourceActions": ["microsoft.directory/users/password/update"],
            "excludedResourceActions": [],
            "condition": None,
        }
    ],
}


class TestAzureAdapter:
    """Test suite for adapt_azure_role()"""

    def test_translates_fields(self):
        role = adapt_azure_role(AZURE_READER)

        assert role.id == AZURE_READER["id"]
        assert role.name == "Reader"
        assert role.role_type == RoleType.BUILT_IN
        assert role.system == RoleSystem.AZURE
        assert role.permissions[0].actions == ("*/read",)
        assert role.assignable_scopes == ("/",)

    def test_custom_role_type(self):
        role = adapt_azure_role({**AZURE_READER, "roleType": "CustomRole"})

        assert role.role_type == RoleType.CUSTOM

    def test_missing_and_null_buckets_are_empty(self):
        raw = {
            **AZURE_READER,
            "permissions": [{"actions": ["A/B/read"], "notActions": None}],
        }

        block = adapt_azure_role(raw).permissions[0]

        assert block.not_actions == ()
        assert block.data_actions == ()
        assert block.not_data_actions == ()

    def test_falls_back_to_name_for_id(self):
        raw = {key: value for key, value in AZURE_READER.items() if key != "id"}

        assert adapt_azure_role(raw).id == AZURE_READER["name"]

    def test_missing_role_name_rejected(self):
        raw = {key: value for key, value in AZURE_READER.items() if key != "roleName"}

        with pytest.raises(RoleDefinitionError) as exc_info:
            adapt_azure_role(raw)

        assert exc_info.value.role_id == AZURE_READER["id"]
        assert any(error["field"] == "roleName" for error in exc_info.value.errors)

    def test_missing_identifier_rejected(self):
        raw = {"roleName": "Nameless", "permissions": []}

        with pytest.raises(RoleDefinitionError):
            adapt_azure_role(raw)

    def test_non_object_rejected(self):
        with pytest.raises(RoleDefinitionError):
            adapt_azure_role(["not", "a", "role"])


class TestEntraAdapter:
    """Test suite for adapt_entra_role()"""

    def test_translates_fields(self):
        role = adapt_entra_role(ENTRA_PASSWORD_ADMIN)

        assert role.id == ENTRA_PASSWORD_ADMIN["id"]
        assert role.name == "Password Administrator"
        assert role.system == RoleSystem.ENTRA_ID
        assert role.role_type == RoleType.BUILT_IN
        assert role.is_enabled is True
        assert role.permissions[0].actions == ("microsoft.directory/users/password/update",)

    def test_excluded_actions_become_not_actions(self):
        raw = {
            **ENTRA_PASSWORD_ADMIN,
            "rolePermissions": [
                {
                    "allowedResourceActions": ["microsoft.directory/*"],
                    "excludedResourceActions": ["microsoft.directory/users/delete"],
                }
            ],
        }

        block = adapt_entra_role(raw).permissions[0]

        assert block.not_actions == ("microsoft.directory/users/delete",)
        assert block.data_actions == ()

    def test_custom_and_disabled(self):
        role = adapt_entra_role({**ENTRA_PASSWORD_ADMIN, "isBuiltIn": False, "isEnabled": False})

        assert role.role_type == RoleType.CUSTOM
        assert role.is_enabled is False

    def test_missing_display_name_rejected(self):
        raw = {key: value for key, value in ENTRA_PASSWORD_ADMIN.items() if key != "displayName"}

        with pytest.raises(RoleDefinitionError):
            adapt_entra_role(raw)


def test_adapter_registry_covers_every_system():
    assert set(ADAPTERS) == set(RoleSystem)
