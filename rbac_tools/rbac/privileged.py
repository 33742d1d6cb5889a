"""Highly privileged built-in roles

Roles in these lists grant wide-ranging access (role assignment, tenant-wide
directory writes, security policy changes). Results that point at one of
them are flagged so callers can warn before the role is assigned.

See https://learn.microsoft.com/en-us/azure/role-based-access-control/built-in-roles
and https://learn.microsoft.com/en-us/entra/identity/role-based-access-control/permissions-reference
"""

from typing import Dict, FrozenSet, Iterable, List

from rbac_tools.rbac.models import Role, RoleSystem


PRIVILEGED_AZURE_ROLES: FrozenSet[str] = frozenset({
    # Top-tier
    "Owner",
    "Contributor",
    "User Access Administrator",
    "Role Based Access Control Administrator",
    # Security
    "Security Admin",
    "Security Manager (Legacy)",
    "SQL Security Manager",
})

PRIVILEGED_ENTRA_ID_ROLES: FrozenSet[str] = frozenset({
    # Tenant-wide
    "Global Administrator",
    "Privileged Role Administrator",
    "Privileged Authentication Administrator",
    # Security and compliance
    "Security Administrator",
    "Compliance Administrator",
    "Security Operator",
    # Identity
    "User Administrator",
    "Authentication Administrator",
    "Password Administrator",
    "Helpdesk Administrator",
    # Applications
    "Application Administrator",
    "Cloud Application Administrator",
    # Workloads
    "Exchange Administrator",
    "SharePoint Administrator",
    "Teams Administrator",
    "Intune Administrator",
    "Azure AD Joined Device Local Administrator",
    # Directory
    "Directory Writers",
    "Domain Name Administrator",
    "Hybrid Identity Administrator",
})

PRIVILEGED_ROLES: Dict[RoleSystem, FrozenSet[str]] = {
    RoleSystem.AZURE: PRIVILEGED_AZURE_ROLES,
    RoleSystem.ENTRA_ID: PRIVILEGED_ENTRA_ID_ROLES,
}


def is_privileged_role(role: Role) -> bool:
    """Check a role against the privileged list of its own role system (exact name)"""
    return role.name in PRIVILEGED_ROLES.get(role.system, frozenset())


def get_privileged_roles(roles: Iterable[Role]) -> List[Role]:
    """Keep only the privileged roles"""
    return [role for role in roles if is_privileged_role(role)]
