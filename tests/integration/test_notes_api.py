from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.conftest import get_auth_headers


class TestNotesAPI:
    """Test note API endpoints."""

    async def test_create_and_get_note(self, client: AsyncClient, sample_user):
        """Test creating a note, then reading it counts a view."""
        headers = get_auth_headers(sample_user.id)
        note_data = {
            "title": "Ohm's law",
            "content": "V = I * R",
            "category": "Physics",
            "note_type": "formula",
            "tags": ["electronics"],
        }

        response = await client.post("/api/v1/notes/", json=note_data, headers=headers)

        assert response.status_code == 201
        created = response.json()
        assert created["version"] == 1
        assert created["view_count"] == 0
        assert created["note_type"] == "formula"

        response = await client.get(f"/api/v1/notes/{created['uuid']}", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["view_count"] == 1
        assert data["links"] == {
            "skill": None,
            "project": None,
            "event": None,
            "task": None,
        }

    async def test_get_note_for_editing_does_not_count_view(
        self, client: AsyncClient, sample_note, sample_user
    ):
        headers = get_auth_headers(sample_user.id)

        response = await client.get(
            f"/api/v1/notes/{sample_note.uuid}", params={"edit": True}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["view_count"] == 0

    async def test_update_creates_versions(
        self, client: AsyncClient, sample_note, sample_user
    ):
        """Test editing twice keeps both previous states."""
        headers = get_auth_headers(sample_user.id)
        url = f"/api/v1/notes/{sample_note.uuid}"

        response = await client.put(url, json={"content": "2"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["version"] == 2

        response = await client.put(url, json={"content": "3"}, headers=headers)
        assert response.json()["version"] == 3

        response = await client.get(f"{url}/versions", headers=headers)
        assert response.status_code == 200
        versions = response.json()
        assert [v["version_number"] for v in versions] == [2, 1]
        assert [v["content"] for v in versions] == ["2", "1"]

    async def test_stale_update_returns_conflict(
        self, client: AsyncClient, sample_note, sample_user
    ):
        headers = get_auth_headers(sample_user.id)
        url = f"/api/v1/notes/{sample_note.uuid}"
        await client.put(url, json={"content": "2"}, headers=headers)

        response = await client.put(
            url, json={"content": "3", "expected_version": 1}, headers=headers
        )

        assert response.status_code == 409

    async def test_update_blank_title_is_rejected(
        self, client: AsyncClient, sample_note, sample_user
    ):
        headers = get_auth_headers(sample_user.id)

        response = await client.put(
            f"/api/v1/notes/{sample_note.uuid}", json={"title": "   "}, headers=headers
        )

        assert response.status_code == 400

    async def test_update_with_unknown_link_is_rejected(
        self, client: AsyncClient, sample_note, sample_user
    ):
        headers = get_auth_headers(sample_user.id)

        response = await client.put(
            f"/api/v1/notes/{sample_note.uuid}",
            json={"content": "2", "skill_id": 999999},
            headers=headers,
        )

        assert response.status_code == 400
        assert "skill_id" in response.json()["detail"]

        response = await client.get(
            f"/api/v1/notes/{sample_note.uuid}/versions", headers=headers
        )
        assert response.json() == []

    async def test_update_missing_note(self, client: AsyncClient, sample_user):
        headers = get_auth_headers(sample_user.id)

        response = await client.put(
            f"/api/v1/notes/{uuid4()}", json={"content": "x"}, headers=headers
        )

        assert response.status_code == 404

    async def test_delete_note(self, client: AsyncClient, sample_note, sample_user):
        headers = get_auth_headers(sample_user.id)
        url = f"/api/v1/notes/{sample_note.uuid}"
        await client.put(url, json={"content": "2"}, headers=headers)

        response = await client.delete(url, headers=headers)
        assert response.status_code == 204

        response = await client.get(f"{url}/versions", headers=headers)
        assert response.status_code == 404

    async def test_pin_and_favorite(self, client: AsyncClient, sample_note, sample_user):
        headers = get_auth_headers(sample_user.id)
        url = f"/api/v1/notes/{sample_note.uuid}"

        response = await client.post(f"{url}/pin", headers=headers)
        assert response.json()["is_pinned"] is True

        response = await client.post(f"{url}/favorite", headers=headers)
        data = response.json()
        assert data["is_favorite"] is True
        assert data["version"] == 1

    async def test_list_notes_with_filters(self, client: AsyncClient, sample_user):
        headers = get_auth_headers(sample_user.id)
        for title, category, tags in [
            ("Arduino pins", "Hardware", ["arduino"]),
            ("Flask routing", "Web", ["python", "flask"]),
            ("Pandas merge", "Data", ["python"]),
        ]:
            await client.post(
                "/api/v1/notes/",
                json={"title": title, "content": "...", "category": category, "tags": tags},
                headers=headers,
            )

        response = await client.get(
            "/api/v1/notes/", params={"tag": "python"}, headers=headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["filtered_total"] == 2
        assert data["stats"]["top_tags"][0] == {"tag": "python", "count": 2}
        assert data["filter_options"]["category"] == ["Data", "Hardware", "Web"]

        response = await client.get(
            "/api/v1/notes/", params={"search": "ARDUINO"}, headers=headers
        )
        assert [n["title"] for n in response.json()["items"]] == ["Arduino pins"]

    async def test_notes_are_private(
        self, client: AsyncClient, sample_note, other_user
    ):
        response = await client.get(
            f"/api/v1/notes/{sample_note.uuid}", headers=get_auth_headers(other_user.id)
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer abc"}])
    async def test_requires_authentication(self, client: AsyncClient, headers):
        response = await client.get("/api/v1/notes/", headers=headers)

        assert response.status_code == 401
