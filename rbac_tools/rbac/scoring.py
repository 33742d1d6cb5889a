"""Relevance scoring for qualifying roles

The score only orders roles that already cover every required permission;
it never decides coverage. Narrow, domain-specific roles (for example
"Virtual Machine Contributor" for Microsoft.Compute actions) are pushed above
broad roles such as Reader or Contributor.

Scoring:
- Every (broad grant, required action) pair: minus ``broad_wildcard_penalty``
- Every other grant in a required namespace: plus ``namespace_match_bonus``
- Role name containing a required resource type: plus
  ``role_name_match_bonus``, at most once per role
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from rbac_tools.rbac.matcher import WILDCARD, namespace_of, split_segments
from rbac_tools.rbac.models import Role
from rbac_tools.rbac.permissions import effective_grants


@dataclass(frozen=True)
class ScoringWeights:
    """Named ranking constants"""
    namespace_match_bonus: int = 100
    broad_wildcard_penalty: int = 50
    role_name_match_bonus: int = 200
    # Shorter resource-type tokens are too generic to match on role names
    min_name_token_length: int = 4


DEFAULT_SCORING_WEIGHTS = ScoringWeights()


def is_broad_wildcard(pattern: str) -> bool:
    """
    True for grants rooted at a wildcard.

    Covers ``*``, ``*/read`` and the ``*/`` spelling used by some Entra ID
    definitions.
    """
    return bool(pattern) and split_segments(pattern)[0] == WILDCARD


def resource_type_of(permission: str) -> Optional[str]:
    """
    Second segment of a permission, lower-cased.

    Example: "microsoft.directory/users/password/update" -> "users"
    """
    segments = split_segments(permission)
    if len(segments) < 2:
        return None
    return segments[1]


def score_role(
    role: Role,
    required_actions: Sequence[str],
    weights: Optional[ScoringWeights] = None
) -> int:
    """
    Compute the relevance score of a role for a set of required permissions.

    Args:
        role: Role to score
        required_actions: Required control-plane and data-plane permissions
        weights: Ranking constants (defaults to DEFAULT_SCORING_WEIGHTS)

    Returns:
        Integer score, higher is more specific
    """
    weights = weights or DEFAULT_SCORING_WEIGHTS
    required = [action for action in required_actions if action]

    required_namespaces = {
        namespace_of(action)
        for action in required
        if not action.startswith(WILDCARD)
    }

    score = 0
    for pattern in effective_grants(role).positive:
        if is_broad_wildcard(pattern):
            score -= weights.broad_wildcard_penalty * len(required)
            continue
        if namespace_of(pattern) in required_namespaces:
            score += weights.namespace_match_bonus

    role_name = role.name.lower()
    for action in required:
        token = resource_type_of(action)
        if not token or token == WILDCARD or len(token) < weights.min_name_token_length:
            continue
        if token in role_name:
            score += weights.role_name_match_bonus
            break

    return score
