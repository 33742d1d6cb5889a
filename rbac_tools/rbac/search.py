"""Read-only lookups over a role catalog

Role search, namespace listing and operation search. Nothing here mutates
the catalog, so results can be computed from any snapshot concurrently.
"""

import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence

from rbac_tools.rbac.matcher import WILDCARD, namespace_of
from rbac_tools.rbac.models import Operation, Role
from rbac_tools.rbac.permissions import effective_grants


DEFAULT_SEARCH_LIMIT = 50
MAX_SEARCH_LIMIT = 100

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def clamp_limit(
    limit: Optional[int],
    default: int = DEFAULT_SEARCH_LIMIT,
    maximum: int = MAX_SEARCH_LIMIT
) -> int:
    """Bound a caller-supplied limit to [1, maximum]"""
    if limit is None:
        limit = default
    return max(1, min(limit, maximum))


@lru_cache(maxsize=4096)
def normalize_search_text(text: str) -> str:
    """
    Normalize text for fuzzy matching.

    Splits camelCase and drops everything but letters and digits, so
    "virtualMachines" and "Virtual Machine" meet on "virtualmachine".
    """
    return _NON_ALPHANUMERIC.sub("", _CAMEL_BOUNDARY.sub(r"\1 \2", text).lower())


def matches_search_term(target: str, query: str) -> bool:
    """Case-insensitive substring match with a normalized fallback"""
    if not target or not query:
        return False
    if query.lower() in target.lower():
        return True
    normalized_query = normalize_search_text(query)
    return bool(normalized_query) and normalized_query in normalize_search_text(target)


def _role_rank(role: Role, query: str):
    name = role.name.lower()
    if name == query:
        bucket, position = 0, 0
    elif name.startswith(query):
        bucket, position = 1, 0
    elif query in name:
        bucket, position = 2, name.index(query)
    elif matches_search_term(role.name, query):
        bucket, position = 3, 0
    else:
        bucket, position = 4, 0
    return (bucket, position, len(role.name), name, role.id)


def search_roles(roles: Iterable[Role], query: str, limit: Optional[int] = None) -> List[Role]:
    """
    Free-text role search over names and descriptions.

    Ranking: exact name, name prefix, name containing the query (earlier
    position first), fuzzy name match, description match. Ties go to the
    shorter name, then alphabetical order. A blank query lists roles
    alphabetically.
    """
    limit = clamp_limit(limit)
    query = (query or "").strip()

    if not query:
        return sorted(roles, key=lambda role: (role.name.lower(), role.id))[:limit]

    matched = [
        role for role in roles
        if matches_search_term(role.name, query) or matches_search_term(role.description, query)
    ]
    matched.sort(key=lambda role: _role_rank(role, query.lower()))
    return matched[:limit]


def _preferred_spelling(current: str, candidate: str) -> str:
    # PascalCase ("Microsoft.Storage") wins over other spellings
    if not current[:1].isupper() and candidate[:1].isupper():
        return candidate
    return current


def list_namespaces(roles: Iterable[Role]) -> List[str]:
    """
    Distinct top-level namespaces granted anywhere in the catalog.

    Exclusion lists are not consulted. Namespaces containing a wildcard are
    skipped.
    """
    spellings: Dict[str, str] = {}
    for role in roles:
        for pattern in effective_grants(role).positive:
            namespace = pattern.split("/", 1)[0].strip()
            if not namespace or WILDCARD in namespace:
                continue
            key = namespace.lower()
            if key in spellings:
                spellings[key] = _preferred_spelling(spellings[key], namespace)
            else:
                spellings[key] = namespace

    return sorted(spellings.values(), key=str.lower)


def filter_roles_by_namespace(roles: Iterable[Role], namespace: str) -> List[Role]:
    """Roles with at least one explicit grant in the namespace, sorted by name"""
    key = namespace.strip().lower()
    if not key:
        return []
    return sorted(
        (
            role for role in roles
            if any(namespace_of(pattern) == key for pattern in effective_grants(role).positive)
        ),
        key=lambda role: (role.name.lower(), role.id)
    )


def search_operations(
    operations: Sequence[Operation],
    query: str,
    limit: Optional[int] = None
) -> List[Operation]:
    """
    Substring search over operation names.

    Operations starting with the query come first, each group in name order.
    """
    limit = clamp_limit(limit)
    query = (query or "").strip().lower()

    if not query:
        return sorted(operations, key=lambda operation: operation.name.lower())[:limit]

    matched = [operation for operation in operations if query in operation.name.lower()]
    matched.sort(key=lambda operation: (
        not operation.name.lower().startswith(query),
        operation.name.lower(),
    ))
    return matched[:limit]


def list_operations(operations: Iterable[Operation], namespace: str) -> List[Operation]:
    """All operations under one namespace, sorted by name"""
    key = namespace.strip().lower()
    return sorted(
        (operation for operation in operations if operation.provider.lower() == key),
        key=lambda operation: operation.name.lower()
    )
