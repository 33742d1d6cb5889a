"""Permission extraction for roles

Flattens a role's grant blocks into its four permission buckets. Nothing in
this module expands wildcards; coverage is decided at match time by
``rbac_tools.rbac.matcher``.
"""

from typing import Iterable, Iterator

from rbac_tools.rbac.matcher import matches
from rbac_tools.rbac.models import (
    EffectiveGrants,
    FlattenedPermission,
    FlattenedPermissions,
    PermissionType,
    Role,
)


def iter_permissions(role: Role) -> Iterator[FlattenedPermission]:
    """
    Yield every permission entry of a role, block by block.

    Useful for streaming large permission sets without building lists.

    Example:
        for entry in iter_permissions(role):
            print(f"{entry.type.value}: {entry.permission}")
    """
    for block in role.permissions:
        for action in block.actions:
            yield FlattenedPermission(PermissionType.ACTION, action)
        for not_action in block.not_actions:
            yield FlattenedPermission(PermissionType.NOT_ACTION, not_action)
        for data_action in block.data_actions:
            yield FlattenedPermission(PermissionType.DATA_ACTION, data_action)
        for not_data_action in block.not_data_actions:
            yield FlattenedPermission(PermissionType.NOT_DATA_ACTION, not_data_action)


def flatten_permissions(role: Role) -> FlattenedPermissions:
    """Eager counterpart of iter_permissions, grouped by bucket"""
    result = FlattenedPermissions()
    buckets = {
        PermissionType.ACTION: result.actions,
        PermissionType.NOT_ACTION: result.not_actions,
        PermissionType.DATA_ACTION: result.data_actions,
        PermissionType.NOT_DATA_ACTION: result.not_data_actions,
    }
    for entry in iter_permissions(role):
        buckets[entry.type].append(entry.permission)
    return result


def effective_grants(role: Role) -> EffectiveGrants:
    """
    Union of a role's grant blocks as raw pattern sets.

    Exclusions are returned alongside the grants and are not applied here:
    they have to be checked against each required action individually.
    """
    flattened = flatten_permissions(role)
    return EffectiveGrants(
        actions=frozenset(flattened.actions),
        not_actions=frozenset(flattened.not_actions),
        data_actions=frozenset(flattened.data_actions),
        not_data_actions=frozenset(flattened.not_data_actions),
    )


def count_permissions(role: Role) -> int:
    """Total number of permission entries across all four buckets"""
    return sum(
        len(block.actions)
        + len(block.not_actions)
        + len(block.data_actions)
        + len(block.not_data_actions)
        for block in role.permissions
    )


def is_granted(patterns: Iterable[str], exclusions: Iterable[str], action: str) -> bool:
    """
    Check coverage of one permission.

    The action is covered iff some pattern matches it and no exclusion does.
    """
    if not any(matches(pattern, action) for pattern in patterns):
        return False
    return not any(matches(excluded, action) for excluded in exclusions)


def grants_action(grants: EffectiveGrants, action: str) -> bool:
    """Control-plane coverage check"""
    return is_granted(grants.actions, grants.not_actions, action)


def grants_data_action(grants: EffectiveGrants, data_action: str) -> bool:
    """Data-plane coverage check"""
    return is_granted(grants.data_actions, grants.not_data_actions, data_action)
