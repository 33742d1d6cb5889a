"""Least-privilege role calculation

Coverage is a hard filter: a role is returned only if it grants every
required action and every required data action. Qualifying roles are then
ranked so the most specific one comes first.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from rbac_tools.core.exceptions import InvalidRequirementsError
from rbac_tools.core.logging_config import get_logger
from rbac_tools.rbac.models import LeastPrivilegeResult, Role
from rbac_tools.rbac.permissions import (
    count_permissions,
    effective_grants,
    grants_action,
    grants_data_action,
)
from rbac_tools.rbac.privileged import is_privileged_role
from rbac_tools.rbac.scoring import ScoringWeights, score_role


logger = get_logger(__name__)


def normalize_required(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """
    Clean up a list of required permissions.

    Entries are stripped, blanks are dropped and duplicates are removed
    case-insensitively, keeping the first spelling seen.
    """
    if not values:
        return ()

    seen = set()
    normalized = []
    for value in values:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if not value:
            continue
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        normalized.append(value)
    return tuple(normalized)


def evaluate_role(
    role: Role,
    required_actions: Sequence[str],
    required_data_actions: Sequence[str],
    weights: Optional[ScoringWeights] = None
) -> Optional[LeastPrivilegeResult]:
    """
    Evaluate one role against normalized requirements.

    Returns:
        LeastPrivilegeResult if the role covers everything, None otherwise
    """
    grants = effective_grants(role)

    for action in required_actions:
        if not grants_action(grants, action):
            return None
    for data_action in required_data_actions:
        if not grants_data_action(grants, data_action):
            return None

    granted = {pattern.lower() for pattern in grants.positive}
    required = {item.lower() for item in (*required_actions, *required_data_actions)}

    return LeastPrivilegeResult(
        role=role,
        matching_actions=tuple(required_actions),
        matching_data_actions=tuple(required_data_actions),
        permission_count=count_permissions(role),
        is_exact_match=granted == required,
        score=score_role(role, [*required_actions, *required_data_actions], weights),
        is_privileged=is_privileged_role(role),
    )


def ranking_key(result: LeastPrivilegeResult) -> Tuple[bool, int, int, str, str]:
    """Sort key: exact matches, then score, then fewest permissions, then name"""
    return (
        not result.is_exact_match,
        -result.score,
        result.permission_count,
        result.role.name.lower(),
        result.role.id,
    )


def calculate_least_privilege(
    required_actions: Optional[Iterable[str]],
    required_data_actions: Optional[Iterable[str]],
    catalog: Iterable[Role],
    weights: Optional[ScoringWeights] = None
) -> List[LeastPrivilegeResult]:
    """
    Find the roles that grant all required permissions, least privileged first.

    Args:
        required_actions: Control-plane permissions
        required_data_actions: Data-plane permissions
        catalog: Roles to consider
        weights: Ranking constants

    Returns:
        Ranked results; an empty list when no role qualifies

    Raises:
        InvalidRequirementsError: If both requirement lists are empty
    """
    actions = normalize_required(required_actions)
    data_actions = normalize_required(required_data_actions)

    if not actions and not data_actions:
        raise InvalidRequirementsError(
            "At least one required action or data action must be provided",
            context="calculate_least_privilege"
        )

    evaluated = 0
    results = []
    for role in catalog:
        if not role.is_enabled:
            continue
        evaluated += 1
        result = evaluate_role(role, actions, data_actions, weights)
        if result is not None:
            results.append(result)

    results.sort(key=ranking_key)

    logger.info(
        "least_privilege_calculated",
        required_actions=len(actions),
        required_data_actions=len(data_actions),
        roles_evaluated=evaluated,
        matches=len(results),
        exact_matches=sum(1 for result in results if result.is_exact_match)
    )

    return results
