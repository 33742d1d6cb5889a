"""Least-privilege RBAC API Endpoints"""

import time
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request

from rbac_tools.api.dependencies import get_catalog, get_scoring_weights
from rbac_tools.api.middleware import limiter
from rbac_tools.core.config import settings
from rbac_tools.core.exceptions import InvalidRequirementsError
from rbac_tools.core.monitoring import MetricsCollector
from rbac_tools.rbac.calculator import calculate_least_privilege, normalize_required
from rbac_tools.rbac.catalog import CatalogSnapshot
from rbac_tools.rbac.models import RoleSystem
from rbac_tools.rbac.scoring import ScoringWeights
from rbac_tools.rbac.search import clamp_limit, list_operations, search_operations, search_roles
from rbac_tools.schemas.rbac import (
    CalculateRequest,
    CalculateResponse,
    CalculationResult,
    NamespaceListResponse,
    OperationListResponse,
    OperationSchema,
    RoleDetail,
    RoleDetailResponse,
    RoleSearchResponse,
    RoleSummary,
)


router = APIRouter(prefix="/rbac/{system}", tags=["rbac"])


def _search_limit(limit: Optional[int]) -> int:
    return clamp_limit(limit, default=settings.SEARCH_DEFAULT_LIMIT, maximum=settings.SEARCH_MAX_LIMIT)


@router.post("/calculate", response_model=CalculateResponse)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def calculate(
    request: Request,
    system: RoleSystem,
    body: CalculateRequest,
    catalog: CatalogSnapshot = Depends(get_catalog),
    weights: ScoringWeights = Depends(get_scoring_weights)
):
    """
    Find the least privileged roles that grant every required permission.

    Args:
        request: FastAPI request object (for rate limiting)
        system: Role system to search (azure or entraid)
        body: Required actions and data actions

    Returns:
        Ranked results, most specific role first. No qualifying role is an
        empty list, not an error.

    Raises:
        InvalidRequirementsError: If no required permission was supplied (400)
        CatalogUnavailableError: If the catalog could not be loaded (503)
    """
    started = time.perf_counter()

    required = [
        *normalize_required(body.required_actions),
        *normalize_required(body.required_data_actions),
    ]

    try:
        results = calculate_least_privilege(
            body.required_actions,
            body.required_data_actions,
            catalog.candidates_for(required),
            weights
        )
    except InvalidRequirementsError:
        MetricsCollector.record_calculation(system.value, "invalid")
        raise

    MetricsCollector.record_calculation(
        system.value,
        "matched" if results else "no_match",
        time.perf_counter() - started
    )

    return CalculateResponse(results=[CalculationResult.from_result(result) for result in results])


@router.get("/roles", response_model=Union[RoleDetailResponse, RoleSearchResponse])
async def get_roles(
    system: RoleSystem,
    role_id: Optional[str] = Query(None, alias="id", description="Return one role with its full permissions"),
    query: str = Query("", max_length=200, description="Free-text search over names and descriptions"),
    limit: Optional[int] = Query(None, description="Maximum number of roles to return"),
    catalog: CatalogSnapshot = Depends(get_catalog)
):
    """
    Search roles, or fetch one role by id.

    Raises:
        RoleNotFoundError: If ``id`` is given and unknown (404)
    """
    if role_id is not None:
        MetricsCollector.record_search(system.value, "role_detail")
        return RoleDetailResponse(role=RoleDetail.from_role(catalog.get_role(role_id)))

    MetricsCollector.record_search(system.value, "roles")
    roles = search_roles(catalog.roles, query, _search_limit(limit))
    return RoleSearchResponse(roles=[RoleSummary.from_role(role) for role in roles])


@router.get("/namespaces", response_model=NamespaceListResponse)
async def get_namespaces(
    system: RoleSystem,
    catalog: CatalogSnapshot = Depends(get_catalog)
):
    """List every top-level namespace granted in the catalog"""
    MetricsCollector.record_search(system.value, "namespaces")
    return NamespaceListResponse(namespaces=list(catalog.namespaces))


@router.get("/namespaces/{namespace}/operations", response_model=OperationListResponse)
async def get_namespace_operations(
    system: RoleSystem,
    namespace: str,
    catalog: CatalogSnapshot = Depends(get_catalog)
):
    """List the operations of one namespace, e.g. Microsoft.Storage"""
    MetricsCollector.record_search(system.value, "namespace_operations")
    operations = list_operations(catalog.operations, namespace)
    return OperationListResponse(
        namespace=namespace,
        operations=[OperationSchema.from_operation(operation) for operation in operations]
    )


@router.get("/operations", response_model=OperationListResponse)
async def get_operations(
    system: RoleSystem,
    query: str = Query("", max_length=200, description="Substring of the operation name"),
    limit: Optional[int] = Query(None, description="Maximum number of operations to return"),
    catalog: CatalogSnapshot = Depends(get_catalog)
):
    """Search operations by name, prefix matches first"""
    MetricsCollector.record_search(system.value, "operations")
    operations = search_operations(catalog.operations, query, _search_limit(limit))
    return OperationListResponse(
        operations=[OperationSchema.from_operation(operation) for operation in operations]
    )
