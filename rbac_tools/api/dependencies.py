"""Common API dependencies"""

from fastapi import Depends, Request

from rbac_tools.core.config import settings
from rbac_tools.rbac.catalog import CatalogRegistry, CatalogSnapshot
from rbac_tools.rbac.models import RoleSystem
from rbac_tools.rbac.scoring import ScoringWeights


def get_catalog_registry(request: Request) -> CatalogRegistry:
    """Catalog registry created by the application lifespan"""
    return request.app.state.catalogs


async def get_catalog(
    system: RoleSystem,
    registry: CatalogRegistry = Depends(get_catalog_registry)
) -> CatalogSnapshot:
    """
    Current catalog snapshot for the role system in the request path.

    Raises:
        CatalogUnavailableError: If the catalog was never loaded
    """
    return await registry.get(system)


def get_scoring_weights() -> ScoringWeights:
    """Ranking constants from the settings"""
    return ScoringWeights(
        namespace_match_bonus=settings.RBAC_NAMESPACE_MATCH_BONUS,
        broad_wildcard_penalty=settings.RBAC_BROAD_WILDCARD_PENALTY,
        role_name_match_bonus=settings.RBAC_ROLE_NAME_MATCH_BONUS,
        min_name_token_length=settings.RBAC_MIN_NAME_TOKEN_LENGTH,
    )
