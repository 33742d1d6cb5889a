"""Shared test fixtures for all tests"""

from typing import Iterable, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from rbac_tools.api.dependencies import get_catalog_registry
from rbac_tools.api.middleware import limiter
from rbac_tools.main import app
from rbac_tools.rbac.catalog import CatalogRegistry, CatalogStore
from rbac_tools.rbac.models import PermissionSet, Role, RoleSystem, RoleType


def build_role(
    name: str,
    actions: Sequence[str] = (),
    not_actions: Sequence[str] = (),
    data_actions: Sequence[str] = (),
    not_data_actions: Sequence[str] = (),
    role_id: Optional[str] = None,
    system: RoleSystem = RoleSystem.AZURE,
    role_type: RoleType = RoleType.BUILT_IN,
    is_enabled: bool = True,
    description: str = ""
) -> Role:
    """Role with a single grant block"""
    return Role(
        id=role_id or name.lower().replace(" ", "-"),
        name=name,
        role_type=role_type,
        description=description,
        permissions=(
            PermissionSet(
                actions=tuple(actions),
                not_actions=tuple(not_actions),
                data_actions=tuple(data_actions),
                not_data_actions=tuple(not_data_actions),
            ),
        ),
        assignable_scopes=("/",),
        is_enabled=is_enabled,
        system=system,
    )


def static_loader(roles: Iterable[Role]):
    """Loader returning a fixed list of roles"""
    roles = list(roles)

    async def load() -> List[Role]:
        return list(roles)

    return load


# ============================================================================
# Role Fixtures
# ============================================================================

@pytest.fixture
def make_role():
    """Factory for single-block roles"""
    return build_role


@pytest.fixture
def azure_roles() -> List[Role]:
    """A small Azure catalog with broad and narrow roles"""
    return [
        build_role("Owner", actions=["*"], role_id="owner"),
        build_role(
            "Contributor",
            actions=["*"],
            not_actions=[
                "Microsoft.Authorization/*/Delete",
                "Microsoft.Authorization/*/Write",
                "Microsoft.Authorization/elevateAccess/Action",
            ],
            role_id="contributor",
        ),
        build_role("Reader", actions=["*/read"], role_id="reader", description="View all resources"),
        build_role(
            "Virtual Machine Contributor",
            actions=[
                "Microsoft.Compute/virtualMachines/*",
                "Microsoft.Compute/disks/read",
                "Microsoft.Network/networkInterfaces/*",
            ],
            role_id="vm-contributor",
            description="Create and manage virtual machines",
        ),
        build_role(
            "Storage Account Contributor",
            actions=["Microsoft.Storage/storageAccounts/*", "Microsoft.Support/*"],
            role_id="storage-account-contributor",
        ),
        build_role(
            "Storage Blob Data Reader",
            actions=["Microsoft.Storage/storageAccounts/blobServices/containers/read"],
            data_actions=["Microsoft.Storage/storageAccounts/blobServices/containers/blobs/read"],
            role_id="storage-blob-data-reader",
            description="Read and list Azure Storage containers and blobs",
        ),
        build_role(
            "Storage Blob Data Contributor",
            actions=[
                "Microsoft.Storage/storageAccounts/blobServices/containers/read",
                "Microsoft.Storage/storageAccounts/blobServices/containers/write",
            ],
            data_actions=["Microsoft.Storage/storageAccounts/blobServices/containers/blobs/*"],
            not_data_actions=["Microsoft.Storage/storageAccounts/blobServices/containers/blobs/delete"],
            role_id="storage-blob-data-contributor",
        ),
    ]


@pytest.fixture
def entra_roles() -> List[Role]:
    """A small Entra ID catalog including one disabled role"""
    return [
        build_role(
            "Global Administrator",
            actions=["microsoft.directory/*"],
            role_id="62e90394-69f5-4237-9190-012177145e10",
            system=RoleSystem.ENTRA_ID,
        ),
        build_role(
            "User Administrator",
            actions=[
                "microsoft.directory/users/create",
                "microsoft.directory/users/delete",
                "microsoft.directory/users/password/update",
                "microsoft.directory/groups/create",
            ],
            role_id="fe930be7-5e62-47db-91af-98c3a49a38b1",
            system=RoleSystem.ENTRA_ID,
        ),
        build_role(
            "Password Administrator",
            actions=["microsoft.directory/users/password/update"],
            role_id="966707d0-3269-4727-9be2-8c3a10f19b9d",
            system=RoleSystem.ENTRA_ID,
        ),
        build_role(
            "Legacy Password Reset",
            actions=["microsoft.directory/users/password/update"],
            role_id="legacy-password-reset",
            system=RoleSystem.ENTRA_ID,
            role_type=RoleType.CUSTOM,
            is_enabled=False,
        ),
    ]


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def catalog_registry(azure_roles, entra_roles) -> CatalogRegistry:
    """Registry serving the fixture catalogs from memory"""
    return CatalogRegistry({
        RoleSystem.AZURE: CatalogStore(RoleSystem.AZURE, static_loader(azure_roles), ttl_seconds=3600),
        RoleSystem.ENTRA_ID: CatalogStore(RoleSystem.ENTRA_ID, static_loader(entra_roles), ttl_seconds=3600),
    })


@pytest.fixture
def client(catalog_registry):
    """Test client wired to the in-memory catalogs, rate limiting off"""
    app.dependency_overrides[get_catalog_registry] = lambda: catalog_registry
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True
