"""
Integration tests for the admin API endpoints.
"""
import pytest
from httpx import AsyncClient

ADMIN = "/api/admin"


async def create_page(client: AsyncClient, name: str, **fields) -> dict:
    response = await client.post(f"{ADMIN}/documents", json={"document_type": "TextPage", "name": name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.integration
class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_detailed_health_check(self, client: AsyncClient):
        response = await client.get("/api/health/detailed")

        assert response.status_code == 200
        assert response.json()["checks"]["database"]["status"] == "healthy"


@pytest.mark.integration
class TestDocumentEndpoints:
    """Test document tree endpoints."""

    async def test_create_document(self, client: AsyncClient, event_handler):
        data = await create_page(client, "Home")

        assert data["url_segment"] == "home"
        assert data["display_order"] == 0
        assert data["document_type"] == "TextPage"
        assert data["published"] is False
        assert event_handler.names() == ["added"]

    async def test_create_child_document(self, client: AsyncClient):
        parent = await create_page(client, "Test Page")
        child = await create_page(client, "Nested Page", parent_id=parent["id"])

        assert child["parent_id"] == parent["id"]
        assert child["url_segment"] == "test-page/nested-page"

    async def test_create_with_unknown_type(self, client: AsyncClient):
        response = await client.post(f"{ADMIN}/documents", json={"document_type": "Missing", "name": "X"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_create_with_taken_url(self, client: AsyncClient):
        await create_page(client, "About")

        response = await client.post(
            f"{ADMIN}/documents",
            json={"document_type": "TextPage", "name": "About 2", "url_segment": "about"}
        )

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_ERROR"

    async def test_create_with_missing_parent(self, client: AsyncClient):
        response = await client.post(
            f"{ADMIN}/documents",
            json={"document_type": "TextPage", "name": "Orphan", "parent_id": 9999}
        )

        assert response.status_code == 404

    async def test_get_document(self, client: AsyncClient):
        created = await create_page(client, "Home")

        response = await client.get(f"{ADMIN}/documents/{created['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Home"

    async def test_get_document_returns_body_content(self, client: AsyncClient):
        created = await create_page(client, "Home", body_content="<p>Welcome</p>")

        response = await client.get(f"{ADMIN}/documents/{created['id']}")

        assert response.status_code == 200
        assert response.json()["body_content"] == "<p>Welcome</p>"

    async def test_get_missing_document(self, client: AsyncClient):
        response = await client.get(f"{ADMIN}/documents/9999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Document 9999 not found", "code": "NOT_FOUND"}

    async def test_unknown_site(self, client: AsyncClient):
        response = await client.get(f"{ADMIN}/webpages/home", headers={"X-Site-Id": "999"})

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_invalid_site_header(self, client: AsyncClient):
        response = await client.get(f"{ADMIN}/webpages/home", headers={"X-Site-Id": "abc"})

        assert response.status_code == 400

    async def test_delete_document(self, client: AsyncClient, event_handler):
        created = await create_page(client, "Home")

        response = await client.delete(f"{ADMIN}/documents/{created['id']}")

        assert response.status_code == 204
        assert (await client.get(f"{ADMIN}/documents/{created['id']}")).status_code == 404
        assert event_handler.names() == ["added", "deleted"]

    async def test_delete_document_with_children(self, client: AsyncClient):
        parent = await create_page(client, "Parent")
        await create_page(client, "Child", parent_id=parent["id"])

        response = await client.delete(f"{ADMIN}/documents/{parent['id']}")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_get_parents(self, client: AsyncClient):
        root = await create_page(client, "Root")
        child = await create_page(client, "Child", parent_id=root["id"])

        response = await client.get(f"{ADMIN}/documents/{child['id']}/parents")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [child["id"], root["id"]]

    async def test_set_tags(self, client: AsyncClient):
        created = await create_page(client, "Home")

        response = await client.put(f"{ADMIN}/documents/{created['id']}/tags", json={"tags": "a,,b, "})

        assert response.status_code == 200
        assert response.json()["tags"] == ["a", "b"]

        response = await client.put(f"{ADMIN}/documents/{created['id']}/tags", json={"tags": "a"})
        assert response.json()["tags"] == ["a"]

    async def test_set_parent(self, client: AsyncClient):
        first = await create_page(client, "First")
        second = await create_page(client, "Second")

        response = await client.put(f"{ADMIN}/documents/{second['id']}/parent", json={"parent_id": first["id"]})

        assert response.status_code == 200
        assert response.json()["parent_id"] == first["id"]

    async def test_sort_documents(self, client: AsyncClient):
        first = await create_page(client, "First")
        second = await create_page(client, "Second")

        response = await client.post(
            f"{ADMIN}/documents/sort",
            json=[{"id": first["id"], "order": 1}, {"id": second["id"], "order": 0}]
        )

        assert response.status_code == 204
        assert (await client.get(f"{ADMIN}/documents/{first['id']}")).json()["display_order"] == 1

    async def test_sort_unknown_document(self, client: AsyncClient):
        response = await client.post(f"{ADMIN}/documents/sort", json=[{"id": 9999, "order": 0}])

        assert response.status_code == 404

    async def test_hide_unknown_widget_is_noop(self, client: AsyncClient):
        created = await create_page(client, "Home")

        response = await client.post(f"{ADMIN}/documents/{created['id']}/widgets/9999/hide")

        assert response.status_code == 200
        assert response.json()["hidden_widget_ids"] == []


@pytest.mark.integration
class TestWebpageEndpoints:
    """Test publishing and URL endpoints."""

    async def test_publish_and_home_page(self, client: AsyncClient):
        created = await create_page(client, "Home")
        assert (await client.get(f"{ADMIN}/webpages/home")).status_code == 404

        response = await client.post(f"{ADMIN}/webpages/{created['id']}/publish")
        assert response.status_code == 200
        assert response.json()["published"] is True

        response = await client.get(f"{ADMIN}/webpages/home")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    async def test_unpublish(self, client: AsyncClient, event_handler):
        created = await create_page(client, "Home")
        await client.post(f"{ADMIN}/webpages/{created['id']}/publish")

        response = await client.post(f"{ADMIN}/webpages/{created['id']}/unpublish")

        assert response.status_code == 200
        assert response.json()["publish_on"] is None
        assert event_handler.names()[-1] == "unpublished"

    async def test_suggest_url(self, client: AsyncClient):
        parent = await create_page(client, "Test Page")

        response = await client.get(
            f"{ADMIN}/webpages/suggest-url",
            params={"page_name": "Nested Page", "parent_id": parent["id"], "use_hierarchy": "true"}
        )

        assert response.status_code == 200
        assert response.json()["url"] == "test-page/nested-page"

    async def test_url_is_valid(self, client: AsyncClient):
        created = await create_page(client, "About")

        taken = await client.get(f"{ADMIN}/webpages/url-is-valid", params={"url": "about"})
        own = await client.get(
            f"{ADMIN}/webpages/url-is-valid",
            params={"url": "about", "document_id": created["id"]}
        )

        assert taken.json()["valid"] is False
        assert own.json()["valid"] is True


@pytest.mark.integration
class TestVersionAndImportEndpoints:
    """Test versioning and import endpoints."""

    async def test_record_and_revert_version(self, client: AsyncClient):
        created = await create_page(client, "Original")

        response = await client.post(f"{ADMIN}/documents/{created['id']}/versions")
        assert response.status_code == 201
        version = response.json()
        assert version["data"]["name"] == "Original"

        await client.put(f"{ADMIN}/documents/{created['id']}/tags", json={"tags": "kept"})
        response = await client.post(f"{ADMIN}/versions/{version['id']}/revert")

        assert response.status_code == 200
        assert response.json()["name"] == "Original"
        assert response.json()["tags"] == ["kept"]

    async def test_revert_missing_version(self, client: AsyncClient):
        response = await client.post(f"{ADMIN}/versions/9999/revert")

        assert response.status_code == 404

    async def test_import(self, client: AsyncClient):
        payload = {
            "documents": [
                {"document_type": "TextPage", "url_segment": "parent", "name": "Parent", "tags": ["news"]},
                {
                    "document_type": "TextPage",
                    "url_segment": "parent/child",
                    "parent_url": "parent",
                    "name": "Child",
                    "url_history": ["old-child"]
                },
            ]
        }

        response = await client.post(f"{ADMIN}/import", json=payload)

        assert response.status_code == 200
        assert response.json()["imported"] == 2

        valid = await client.get(f"{ADMIN}/webpages/url-is-valid", params={"url": "old-child"})
        assert valid.json()["valid"] is False
