"""Translate raw role definition JSON into the generic Role shape

Azure ARM role definitions and Entra ID directory role definitions carry the
same information under different field names. Each shape is validated with
its own pydantic model and converted into ``Role`` here, so the engine only
ever sees one shape.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rbac_tools.core.exceptions import RoleDefinitionError
from rbac_tools.rbac.models import PermissionSet, Role, RoleSystem, RoleType


def _none_to_empty(value: Any) -> Any:
    return [] if value is None else value


class AzurePermissionBlock(BaseModel):
    """One entry of an Azure role's ``permissions`` array"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    actions: List[str] = Field(default_factory=list)
    not_actions: List[str] = Field(default_factory=list, alias="notActions")
    data_actions: List[str] = Field(default_factory=list, alias="dataActions")
    not_data_actions: List[str] = Field(default_factory=list, alias="notDataActions")

    @field_validator("actions", "not_actions", "data_actions", "not_data_actions", mode="before")
    @classmethod
    def default_missing_bucket(cls, v: Any) -> Any:
        """Missing buckets are empty lists"""
        return _none_to_empty(v)


class AzureRoleDefinition(BaseModel):
    """Azure ARM role definition as published by ``az role definition list``"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    role_name: str = Field(..., min_length=1, alias="roleName")
    role_type: str = Field(default="BuiltInRole", alias="roleType")
    description: Optional[str] = None
    permissions: List[AzurePermissionBlock] = Field(default_factory=list)
    assignable_scopes: List[str] = Field(default_factory=list, alias="assignableScopes")

    @field_validator("permissions", "assignable_scopes", mode="before")
    @classmethod
    def default_missing_list(cls, v: Any) -> Any:
        return _none_to_empty(v)


class EntraRolePermissionBlock(BaseModel):
    """One entry of an Entra ID role's ``rolePermissions`` array"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    allowed_resource_actions: List[str] = Field(default_factory=list, alias="allowedResourceActions")
    excluded_resource_actions: List[str] = Field(default_factory=list, alias="excludedResourceActions")
    condition: Optional[str] = None

    @field_validator("allowed_resource_actions", "excluded_resource_actions", mode="before")
    @classmethod
    def default_missing_bucket(cls, v: Any) -> Any:
        """Missing buckets are empty lists"""
        return _none_to_empty(v)


class EntraRoleDefinition(BaseModel):
    """Entra ID directory role definition from Microsoft Graph"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1, alias="displayName")
    description: Optional[str] = None
    is_built_in: bool = Field(default=True, alias="isBuiltIn")
    is_enabled: bool = Field(default=True, alias="isEnabled")
    template_id: Optional[str] = Field(None, alias="templateId")
    role_permissions: List[EntraRolePermissionBlock] = Field(default_factory=list, alias="rolePermissions")
    resource_scopes: List[str] = Field(default_factory=list, alias="resourceScopes")

    @field_validator("role_permissions", "resource_scopes", mode="before")
    @classmethod
    def default_missing_list(cls, v: Any) -> Any:
        return _none_to_empty(v)


def _record_id(raw: Any) -> Optional[str]:
    if isinstance(raw, dict):
        value = raw.get("id") or raw.get("name")
        return str(value) if value else None
    return None


def _validation_failure(raw: Any, error: ValidationError, system: RoleSystem) -> RoleDefinitionError:
    return RoleDefinitionError(
        f"Invalid {system.value} role definition",
        role_id=_record_id(raw),
        errors=[
            {"field": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
            for item in error.errors()
        ]
    )


def adapt_azure_role(raw: Dict[str, Any]) -> Role:
    """
    Translate one Azure role definition.

    Raises:
        RoleDefinitionError: If the record does not look like a role definition
    """
    try:
        definition = AzureRoleDefinition.model_validate(raw)
    except ValidationError as e:
        raise _validation_failure(raw, e, RoleSystem.AZURE) from e

    role_id = definition.id or definition.name
    if not role_id:
        raise RoleDefinitionError("Azure role definition has no id", role_id=None)

    return Role(
        id=role_id,
        name=definition.role_name,
        role_type=RoleType.CUSTOM if definition.role_type == "CustomRole" else RoleType.BUILT_IN,
        description=definition.description or "",
        permissions=tuple(
            PermissionSet(
                actions=tuple(block.actions),
                not_actions=tuple(block.not_actions),
                data_actions=tuple(block.data_actions),
                not_data_actions=tuple(block.not_data_actions),
            )
            for block in definition.permissions
        ),
        assignable_scopes=tuple(definition.assignable_scopes),
        system=RoleSystem.AZURE,
    )


def adapt_entra_role(raw: Dict[str, Any]) -> Role:
    """
    Translate one Entra ID role definition.

    Directory roles have no data plane: allowed resource actions become
    actions and excluded resource actions become not-actions.

    Raises:
        RoleDefinitionError: If the record does not look like a role definition
    """
    try:
        definition = EntraRoleDefinition.model_validate(raw)
    except ValidationError as e:
        raise _validation_failure(raw, e, RoleSystem.ENTRA_ID) from e

    return Role(
        id=definition.id,
        name=definition.display_name,
        role_type=RoleType.BUILT_IN if definition.is_built_in else RoleType.CUSTOM,
        description=definition.description or "",
        permissions=tuple(
            PermissionSet(
                actions=tuple(block.allowed_resource_actions),
                not_actions=tuple(block.excluded_resource_actions),
            )
            for block in definition.role_permissions
        ),
        assignable_scopes=tuple(definition.resource_scopes),
        is_enabled=definition.is_enabled,
        system=RoleSystem.ENTRA_ID,
    )


ADAPTERS: Dict[RoleSystem, Callable[[Dict[str, Any]], Role]] = {
    RoleSystem.AZURE: adapt_azure_role,
    RoleSystem.ENTRA_ID: adapt_entra_role,
}
