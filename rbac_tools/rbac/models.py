"""Domain types for the least-privilege RBAC engine

The engine works on one generic role shape. Azure ARM role definitions and
Entra ID directory role definitions are translated into it by
``rbac_tools.rbac.adapters`` before they reach the engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Tuple


class RoleSystem(str, Enum):
    """Role systems served by the engine"""
    AZURE = "azure"
    ENTRA_ID = "entraid"


class RoleType(str, Enum):
    """Origin of a role definition"""
    BUILT_IN = "BuiltIn"
    CUSTOM = "Custom"


class PermissionType(str, Enum):
    """The four permission buckets of a grant block"""
    ACTION = "Action"
    NOT_ACTION = "Not Action"
    DATA_ACTION = "Data Action"
    NOT_DATA_ACTION = "Not Data Action"


@dataclass(frozen=True)
class PermissionSet:
    """
    One grant block of a role.

    ``not_actions`` and ``not_data_actions`` only subtract from what the
    positive list of the same plane grants; they never grant anything.
    """
    actions: Tuple[str, ...] = ()
    not_actions: Tuple[str, ...] = ()
    data_actions: Tuple[str, ...] = ()
    not_data_actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Role:
    """A role definition, independent of the role system it came from"""
    id: str
    name: str
    role_type: RoleType = RoleType.BUILT_IN
    description: str = ""
    permissions: Tuple[PermissionSet, ...] = ()
    assignable_scopes: Tuple[str, ...] = ()
    is_enabled: bool = True
    system: RoleSystem = RoleSystem.AZURE


@dataclass(frozen=True)
class FlattenedPermission:
    """A single permission entry tagged with its bucket"""
    type: PermissionType
    permission: str


@dataclass
class FlattenedPermissions:
    """All permission entries of a role grouped by bucket"""
    actions: List[str] = field(default_factory=list)
    not_actions: List[str] = field(default_factory=list)
    data_actions: List[str] = field(default_factory=list)
    not_data_actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EffectiveGrants:
    """
    Raw grant patterns of a role, unioned across blocks.

    Wildcards are kept as strings. Exclusions are carried alongside rather
    than applied, since an exclusion can itself be a wildcard that removes
    only part of a granted wildcard's coverage.
    """
    actions: FrozenSet[str] = frozenset()
    not_actions: FrozenSet[str] = frozenset()
    data_actions: FrozenSet[str] = frozenset()
    not_data_actions: FrozenSet[str] = frozenset()

    @property
    def positive(self) -> FrozenSet[str]:
        """Control-plane and data-plane grants together"""
        return self.actions | self.data_actions


@dataclass(frozen=True)
class LeastPrivilegeResult:
    """A role that covers every required permission, with ranking data"""
    role: Role
    matching_actions: Tuple[str, ...]
    matching_data_actions: Tuple[str, ...]
    permission_count: int
    is_exact_match: bool
    score: int
    is_privileged: bool = False


@dataclass(frozen=True)
class Operation:
    """A concrete permission known to the catalog"""
    name: str
    provider: str
    is_data_action: bool = False
    role_count: int = 0
