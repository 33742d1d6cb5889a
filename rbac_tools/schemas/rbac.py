"""Pydantic schemas for the RBAC API

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from rbac_tools.rbac.models import LeastPrivilegeResult, Operation, Role, RoleSystem, RoleType
from rbac_tools.rbac.permissions import count_permissions
from rbac_tools.rbac.privileged import is_privileged_role


# Upper bound on permissions per request
MAX_REQUIRED_PERMISSIONS = 200


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalculateRequest(CamelModel):
    """Schema for a least-privilege calculation request"""
    required_actions: List[str] = Field(
        default_factory=list,
        max_length=MAX_REQUIRED_PERMISSIONS,
        description="Control-plane permissions, e.g. Microsoft.Compute/virtualMachines/read"
    )
    required_data_actions: List[str] = Field(
        default_factory=list,
        max_length=MAX_REQUIRED_PERMISSIONS,
        description="Data-plane permissions"
    )

    @field_validator('required_actions', 'required_data_actions')
    @classmethod
    def validate_permission_length(cls, v: List[str]) -> List[str]:
        """Reject absurdly long permission strings"""
        for item in v:
            if len(item) > 512:
                raise ValueError('Permission strings must be at most 512 characters')
        return v


class PermissionBlock(CamelModel):
    """One grant block of a role"""
    actions: List[str] = Field(default_factory=list)
    not_actions: List[str] = Field(default_factory=list)
    data_actions: List[str] = Field(default_factory=list)
    not_data_actions: List[str] = Field(default_factory=list)


class RoleSummary(CamelModel):
    """Role identity as returned in results and search listings"""
    id: str
    name: str
    role_type: RoleType
    description: str = ""
    is_privileged: bool = False

    @classmethod
    def from_role(cls, role: Role) -> "RoleSummary":
        return cls(
            id=role.id,
            name=role.name,
            role_type=role.role_type,
            description=role.description,
            is_privileged=is_privileged_role(role),
        )


class RoleDetail(RoleSummary):
    """Role with its full permission blocks"""
    system: RoleSystem
    is_enabled: bool = True
    permission_count: int = Field(..., ge=0)
    permissions: List[PermissionBlock] = Field(default_factory=list)
    assignable_scopes: List[str] = Field(default_factory=list)

    @classmethod
    def from_role(cls, role: Role) -> "RoleDetail":
        return cls(
            id=role.id,
            name=role.name,
            role_type=role.role_type,
            description=role.description,
            is_privileged=is_privileged_role(role),
            system=role.system,
            is_enabled=role.is_enabled,
            permission_count=count_permissions(role),
            permissions=[
                PermissionBlock(
                    actions=list(block.actions),
                    not_actions=list(block.not_actions),
                    data_actions=list(block.data_actions),
                    not_data_actions=list(block.not_data_actions),
                )
                for block in role.permissions
            ],
            assignable_scopes=list(role.assignable_scopes),
        )


class CalculationResult(CamelModel):
    """One qualifying role"""
    role: RoleSummary
    matching_actions: List[str]
    matching_data_actions: List[str]
    permission_count: int = Field(..., ge=0)
    is_exact_match: bool
    score: int

    @classmethod
    def from_result(cls, result: LeastPrivilegeResult) -> "CalculationResult":
        summary = RoleSummary.from_role(result.role)
        return cls(
            role=summary.model_copy(update={"is_privileged": result.is_privileged}),
            matching_actions=list(result.matching_actions),
            matching_data_actions=list(result.matching_data_actions),
            permission_count=result.permission_count,
            is_exact_match=result.is_exact_match,
            score=result.score,
        )


class CalculateResponse(CamelModel):
    """Ranked calculation results, least privileged first"""
    results: List[CalculationResult] = Field(default_factory=list)


class RoleSearchResponse(CamelModel):
    roles: List[RoleSummary] = Field(default_factory=list)


class RoleDetailResponse(CamelModel):
    role: RoleDetail


class NamespaceListResponse(CamelModel):
    namespaces: List[str] = Field(default_factory=list)


class OperationSchema(CamelModel):
    """A concrete permission known to the catalog"""
    name: str
    provider: str
    is_data_action: bool = False
    role_count: int = Field(default=0, ge=0)

    @classmethod
    def from_operation(cls, operation: Operation) -> "OperationSchema":
        return cls(
            name=operation.name,
            provider=operation.provider,
            is_data_action=operation.is_data_action,
            role_count=operation.role_count,
        )


class OperationListResponse(CamelModel):
    operations: List[OperationSchema] = Field(default_factory=list)
    namespace: Optional[str] = None
