"""Pydantic schemas for API request/response validation"""

from rbac_tools.schemas.rbac import (
    CalculateRequest,
    CalculateResponse,
    CalculationResult,
    RoleSummary,
    RoleDetail,
    RoleSearchResponse,
    RoleDetailResponse,
    NamespaceListResponse,
    OperationSchema,
    OperationListResponse
)

__all__ = [
    "CalculateRequest",
    "CalculateResponse",
    "CalculationResult",
    "RoleSummary",
    "RoleDetail",
    "RoleSearchResponse",
    "RoleDetailResponse",
    "NamespaceListResponse",
    "OperationSchema",
    "OperationListResponse",
]
