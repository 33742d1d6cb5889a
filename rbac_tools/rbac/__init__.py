"""Least-privilege RBAC engine"""

from rbac_tools.rbac.models import (
    RoleSystem,
    RoleType,
    PermissionType,
    PermissionSet,
    Role,
    FlattenedPermission,
    FlattenedPermissions,
    EffectiveGrants,
    LeastPrivilegeResult,
    Operation
)
from rbac_tools.rbac.matcher import matches
from rbac_tools.rbac.permissions import (
    iter_permissions,
    flatten_permissions,
    effective_grants,
    count_permissions,
    is_granted
)
from rbac_tools.rbac.scoring import ScoringWeights, score_role
from rbac_tools.rbac.calculator import calculate_least_privilege, evaluate_role
from rbac_tools.rbac.search import (
    search_roles,
    list_namespaces,
    search_operations,
    list_operations,
    filter_roles_by_namespace
)
from rbac_tools.rbac.operations import build_operation_index
from rbac_tools.rbac.catalog import (
    CatalogSnapshot,
    CatalogStore,
    CatalogRegistry,
    JsonRoleFileLoader
)

__all__ = [
    "RoleSystem",
    "RoleType",
    "PermissionType",
    "PermissionSet",
    "Role",
    "FlattenedPermission",
    "FlattenedPermissions",
    "EffectiveGrants",
    "LeastPrivilegeResult",
    "Operation",
    "matches",
    "iter_permissions",
    "flatten_permissions",
    "effective_grants",
    "count_permissions",
    "is_granted",
    "ScoringWeights",
    "score_role",
    "calculate_least_privilege",
    "evaluate_role",
    "search_roles",
    "list_namespaces",
    "search_operations",
    "list_operations",
    "filter_roles_by_namespace",
    "build_operation_index",
    "CatalogSnapshot",
    "CatalogStore",
    "CatalogRegistry",
    "JsonRoleFileLoader",
]
