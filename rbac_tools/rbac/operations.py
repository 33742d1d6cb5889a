"""Operation index built from a role catalog

An operation is a concrete, wildcard-free permission that appears explicitly
in at least one role. Each operation records how many roles grant it, either
explicitly or through a same-plane wildcard that the role does not exclude.
"""

from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Set

from rbac_tools.rbac.matcher import WILDCARD, has_wildcard, namespace_of, split_segments
from rbac_tools.rbac.models import Operation, Role
from rbac_tools.rbac.permissions import effective_grants, grants_action, grants_data_action


def _canonical_spelling(variants: Counter) -> str:
    # Most frequent spelling wins, first seen on a tie
    return variants.most_common(1)[0][0]


def build_operation_index(roles: Iterable[Role]) -> List[Operation]:
    """
    Collect every explicit operation in the catalog with its role count.

    Args:
        roles: Catalog roles; disabled roles are ignored

    Returns:
        Operations sorted case-insensitively by name
    """
    roles = [role for role in roles if role.is_enabled]

    spellings: Dict[str, Counter] = defaultdict(Counter)
    control_plane: Set[str] = set()
    data_plane: Set[str] = set()
    granting_roles: Dict[str, Set[int]] = defaultdict(set)
    explicit: List[Set[str]] = []

    for role in roles:
        keys: Set[str] = set()
        for block in role.permissions:
            for action in block.actions:
                if has_wildcard(action):
                    continue
                key = action.lower()
                spellings[key][action] += 1
                control_plane.add(key)
                keys.add(key)
            for data_action in block.data_actions:
                if has_wildcard(data_action):
                    continue
                key = data_action.lower()
                spellings[key][data_action] += 1
                data_plane.add(key)
                keys.add(key)
        explicit.append(keys)

    by_namespace: Dict[str, List[str]] = defaultdict(list)
    for key in spellings:
        by_namespace[namespace_of(key)].append(key)

    for index, role in enumerate(roles):
        grants = effective_grants(role)
        wildcard_patterns = [pattern for pattern in grants.positive if has_wildcard(pattern)]

        candidates: Iterable[str]
        if not wildcard_patterns:
            candidates = explicit[index]
        elif any(split_segments(pattern)[0] == WILDCARD for pattern in wildcard_patterns):
            candidates = spellings.keys()
        else:
            namespaces = {namespace_of(pattern) for pattern in wildcard_patterns}
            candidates = explicit[index].union(
                key for namespace in namespaces for key in by_namespace.get(namespace, [])
            )

        for key in candidates:
            if (
                (key in control_plane and grants_action(grants, key))
                or (key in data_plane and grants_data_action(grants, key))
            ):
                granting_roles[key].add(index)

    operations = []
    for key, variants in spellings.items():
        name = _canonical_spelling(variants)
        operations.append(Operation(
            name=name,
            provider=name.split("/", 1)[0],
            is_data_action=key not in control_plane,
            role_count=len(granting_roles[key]),
        ))

    operations.sort(key=lambda operation: operation.name.lower())
    return operations
