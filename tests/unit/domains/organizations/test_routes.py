"""
Tests for organization admin and organization-scoped endpoints.
"""

from fastapi.testclient import TestClient

from tenantgate.domains.auth.context import SessionRegistry
from tests.fixtures.gateway_fixtures import ACME_ID

ADMIN_URL = "/api/v1/admin/organizations"


class TestOrganizationAdminEndpoints:
    """Test the platform admin organization list."""

    def test_list_active_organizations(self, client: TestClient, auth_headers):
        response = client.get(ADMIN_URL, headers=auth_headers("root@co.com"))

        assert response.status_code == 200
        assert [o["slug"] for o in response.json()] == ["acme"]

    def test_list_all_organizations(self, client: TestClient, auth_headers):
        response = client.get(
            ADMIN_URL,
            params={"active_only": False},
            headers=auth_headers("root@co.com"),
        )
        assert [o["slug"] for o in response.json()] == ["acme", "gamma"]

    def test_members_cannot_list_organizations(self, client: TestClient, auth_headers):
        response = client.get(ADMIN_URL, headers=auth_headers("alice@co.com"))

        assert response.status_code == 403
        assert response.json()["detail"] == "Platform administrator access required"

    def test_create_organization(self, client: TestClient, auth_headers):
        response = client.post(
            ADMIN_URL,
            json={"name": "  Beta Tours ", "slug": "Beta-Tours"},
            headers=auth_headers("root@co.com"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Beta Tours"
        assert data["slug"] == "beta-tours"
        assert data["status"] == "active"

    def test_duplicate_slug_conflicts(self, client: TestClient, auth_headers):
        response = client.post(
            ADMIN_URL,
            json={"name": "Acme Again", "slug": "acme"},
            headers=auth_headers("root@co.com"),
        )
        assert response.status_code == 409

    def test_invalid_slug_rejected(self, client: TestClient, auth_headers):
        response = client.post(
            ADMIN_URL,
            json={"name": "Bad", "slug": "bad slug!"},
            headers=auth_headers("root@co.com"),
        )
        assert response.status_code == 422


class TestOrganizationScopedRoutes:
    """Test entering an organization through its slug."""

    def test_admin_enters_known_slug(
        self, client: TestClient, auth_headers, registry: SessionRegistry
    ):
        response = client.get("/api/v1/org/acme", headers=auth_headers("root@co.com"))

        assert response.status_code == 200
        data = response.json()
        assert data["organization"]["slug"] == "acme"
        assert data["effective_organization_id"] == ACME_ID
        assert data["modules"] == ["crm"]
        assert data["active_partners"] == 1
        assert registry.get("root@co.com").admin_selected_org.id == ACME_ID

    def test_unknown_slug_redirects_to_organization_list(
        self, client: TestClient, auth_headers, registry: SessionRegistry
    ):
        response = client.get(
            "/api/v1/org/beta",
            headers=auth_headers("root@co.com"),
            follow_redirects=False,
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/admin/organizations"
        assert registry.get("root@co.com").admin_selected_org is None

    def test_non_admin_redirected_home(self, client: TestClient, auth_headers):
        response = client.get(
            "/api/v1/org/acme",
            headers=auth_headers("alice@co.com"),
            follow_redirects=False,
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/"

    def test_members_of_entered_organization(self, client: TestClient, auth_headers):
        response = client.get(
            "/api/v1/org/acme/members", headers=auth_headers("root@co.com")
        )

        assert response.status_code == 200
        members = response.json()
        assert len(members) == 1
        assert members[0]["email"] == "alice@co.com"
        assert members[0]["position_name"] == "Admin"
