"""Integration tests for RBAC endpoints"""

from fastapi.testclient import TestClient

from rbac_tools.api.dependencies import get_catalog_registry
from rbac_tools.api.middleware import limiter
from rbac_tools.core.config import settings
from rbac_tools.core.exceptions import CatalogUnavailableError
from rbac_tools.main import app
from rbac_tools.rbac.catalog import CatalogRegistry, CatalogStore
from rbac_tools.rbac.models import RoleSystem


AZURE = "/api/v1/rbac/azure"
ENTRA = "/api/v1/rbac/entraid"


async def offline_loader():
    raise CatalogUnavailableError("source offline", system="azure", source="/srv/data/roles.json")


# ============================================================================
# Calculate
# ============================================================================

def test_calculate_ranks_specific_role_first(client: TestClient):
    """Test calculation returns qualifying roles, most specific first"""
    response = client.post(
        f"{AZURE}/calculate",
        json={"requiredActions": ["Microsoft.Compute/virtualMachines/read"]}
    )

    assert response.status_code == 200
    results = response.json()["results"]
    assert [result["role"]["name"] for result in results] == [
        "Virtual Machine Contributor",
        "Owner",
        "Contributor",
    ]

    first = results[0]
    assert first["matchingActions"] == ["Microsoft.Compute/virtualMachines/read"]
    assert first["matchingDataActions"] == []
    assert first["permissionCount"] == 3
    assert first["isExactMatch"] is False
    assert first["role"]["roleType"] == "BuiltIn"
    assert first["role"]["isPrivileged"] is False
    assert results[1]["role"]["isPrivileged"] is True


def test_calculate_exact_match(client: TestClient):
    """Test a role granting exactly the request is flagged and ranked first"""
    response = client.post(
        f"{ENTRA}/calculate",
        json={"requiredActions": ["microsoft.directory/users/password/update"]}
    )

    assert response.status_code == 200
    results = response.json()["results"]
    assert results[0]["role"]["name"] == "Password Administrator"
    assert results[0]["isExactMatch"] is True
    assert "Legacy Password Reset" not in [result["role"]["name"] for result in results]


def test_calculate_data_actions(client: TestClient):
    """Test data actions are matched against data-plane grants only"""
    response = client.post(
        f"{AZURE}/calculate",
        json={
            "requiredActions": [],
            "requiredDataActions": ["Microsoft.Storage/storageAccounts/blobServices/containers/blobs/read"]
        }
    )

    assert response.status_code == 200
    assert {result["role"]["name"] for result in response.json()["results"]} == {
        "Storage Blob Data Reader",
        "Storage Blob Data Contributor",
    }


def test_calculate_no_match_is_empty(client: TestClient):
    """Test an unmatched requirement returns an empty list, not an error"""
    response = client.post(f"{ENTRA}/calculate", json={"requiredActions": ["Z/Y/write"]})

    assert response.status_code == 200
    assert response.json() == {"results": []}


def test_calculate_empty_requirements_rejected(client: TestClient):
    """Test an empty requirement set is a 400"""
    response = client.post(f"{AZURE}/calculate", json={"requiredActions": [" "], "requiredDataActions": []})

    assert response.status_code == 400
    assert response.json()["type"] == "invalid_requirements"


def test_calculate_invalid_body(client: TestClient):
    """Test request validation errors are 422 with field details"""
    response = client.post(f"{AZURE}/calculate", json={"requiredActions": "Microsoft.Compute/*"})

    assert response.status_code == 422
    data = response.json()
    assert data["type"] == "validation_error"
    assert any("requiredActions" in error["field"] for error in data["errors"])


def test_unknown_role_system(client: TestClient):
    """Test only azure and entraid are accepted"""
    response = client.post("/api/v1/rbac/gcp/calculate", json={"requiredActions": ["A/B/read"]})

    assert response.status_code == 422


def test_catalog_unavailable_is_503(client: TestClient):
    """Test a catalog that cannot be loaded yields 503 without leaking the source path"""
    registry = CatalogRegistry({
        RoleSystem.AZURE: CatalogStore(RoleSystem.AZURE, offline_loader, ttl_seconds=60),
    })
    app.dependency_overrides[get_catalog_registry] = lambda: registry

    response = client.post(f"{AZURE}/calculate", json={"requiredActions": ["A/B/read"]})

    assert response.status_code == 503
    data = response.json()
    assert data["type"] == "catalog_unavailable"
    assert "/srv/data" not in response.text


def test_calculate_rate_limited(client: TestClient):
    """Test the calculate endpoint enforces the per-client rate limit"""
    limiter.enabled = True
    limiter.reset()

    statuses = [
        client.post(f"{AZURE}/calculate", json={"requiredActions": ["A/B/read"]}).status_code
        for _ in range(settings.RATE_LIMIT_PER_MINUTE + 1)
    ]

    limiter.reset()
    assert statuses[:-1] == [200] * settings.RATE_LIMIT_PER_MINUTE
    assert statuses[-1] == 429


# ============================================================================
# Roles
# ============================================================================

def test_search_roles(client: TestClient):
    """Test role search ranks exact names first and honours the limit"""
    response = client.get(f"{AZURE}/roles", params={"query": "contributor", "limit": 2})

    assert response.status_code == 200
    roles = response.json()["roles"]
    assert [role["name"] for role in roles] == ["Contributor", "Storage Account Contributor"]


def test_get_role_by_id(client: TestClient):
    """Test fetching one role returns its full permissions"""
    response = client.get(f"{AZURE}/roles", params={"id": "storage-blob-data-contributor"})

    assert response.status_code == 200
    role = response.json()["role"]
    assert role["name"] == "Storage Blob Data Contributor"
    assert role["system"] == "azure"
    assert role["permissionCount"] == 4
    assert role["permissions"][0]["notDataActions"] == [
        "Microsoft.Storage/storageAccounts/blobServices/containers/blobs/delete"
    ]


def test_get_unknown_role(client: TestClient):
    """Test an unknown role id is a 404"""
    response = client.get(f"{AZURE}/roles", params={"id": "does-not-exist"})

    assert response.status_code == 404
    assert response.json()["type"] == "role_not_found"


# ============================================================================
# Namespaces and operations
# ============================================================================

def test_list_namespaces(client: TestClient):
    response = client.get(f"{AZURE}/namespaces")

    assert response.status_code == 200
    assert response.json()["namespaces"] == [
        "Microsoft.Compute",
        "Microsoft.Network",
        "Microsoft.Storage",
        "Microsoft.Support",
    ]


def test_list_namespace_operations(client: TestClient):
    response = client.get(f"{AZURE}/namespaces/Microsoft.Compute/operations")

    assert response.status_code == 200
    data = response.json()
    assert data["namespace"] == "Microsoft.Compute"
    assert [operation["name"] for operation in data["operations"]] == ["Microsoft.Compute/disks/read"]
    assert data["operations"][0]["roleCount"] == 3
    assert data["operations"][0]["isDataAction"] is False


def test_search_operations(client: TestClient):
    response = client.get(f"{AZURE}/operations", params={"query": "blobs/read"})

    assert response.status_code == 200
    operations = response.json()["operations"]
    assert [operation["name"] for operation in operations] == [
        "Microsoft.Storage/storageAccounts/blobServices/containers/blobs/read"
    ]
    assert operations[0]["isDataAction"] is True


def test_request_id_header(client: TestClient):
    """Test every response carries a request ID"""
    response = client.get(f"{AZURE}/namespaces", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
