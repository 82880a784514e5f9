from datetime import datetime, timedelta, timezone

from httpx import AsyncClient

from tests.conftest import get_auth_headers


class TestTasksAPI:
    """Test task API endpoints."""

    async def test_create_task(self, client: AsyncClient, sample_user):
        headers = get_auth_headers(sample_user.id)
        task_data = {
            "title": "Submit report",
            "priority": "urgent",
            "due_date": str(datetime.now(timezone.utc).date()),
            "subtasks": [{"title": "Draft"}, {"title": "Review"}],
        }

        response = await client.post("/api/v1/tasks/", json=task_data, headers=headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "not-started"
        assert [s["title"] for s in data["subtasks"]] == ["Draft", "Review"]
        assert data["completed_subtasks"] == 0

    async def test_create_recurring_task_without_pattern(
        self, client: AsyncClient, sample_user
    ):
        response = await client.post(
            "/api/v1/tasks/",
            json={"title": "Gym", "is_recurring": True},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 422

    async def test_status_patch(self, client: AsyncClient, sample_task, sample_user):
        response = await client.patch(
            f"/api/v1/tasks/{sample_task.uuid}/status",
            json={"status": "done"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "done"
        assert data["progress"] == 100
        assert data["completed_at"] is not None

    async def test_list_tasks_timeline(self, client: AsyncClient, sample_user):
        headers = get_auth_headers(sample_user.id)
        today = datetime.now(timezone.utc).date()
        for title, due in [
            ("yesterday", today - timedelta(days=1)),
            ("today", today),
            ("next year", today + timedelta(days=400)),
        ]:
            await client.post(
                "/api/v1/tasks/",
                json={"title": title, "due_date": str(due)},
                headers=headers,
            )

        response = await client.get(
            "/api/v1/tasks/", params={"timeline": "today"}, headers=headers
        )
        assert [t["title"] for t in response.json()["items"]] == ["today"]

        response = await client.get(
            "/api/v1/tasks/", params={"timeline": "overdue"}, headers=headers
        )
        data = response.json()
        assert [t["title"] for t in data["items"]] == ["yesterday"]
        assert data["stats"]["overdue"] == 1
        assert data["total"] == 3

    async def test_list_tasks_by_status(self, client: AsyncClient, sample_task, sample_user):
        response = await client.get(
            "/api/v1/tasks/",
            params={"status": "done"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 200
        assert response.json()["filtered_total"] == 0

    async def test_invalid_timeline(self, client: AsyncClient, sample_user):
        response = await client.get(
            "/api/v1/tasks/",
            params={"timeline": "fortnight"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 422

    async def test_delete_task(self, client: AsyncClient, sample_task, sample_user):
        headers = get_auth_headers(sample_user.id)

        response = await client.delete(f"/api/v1/tasks/{sample_task.uuid}", headers=headers)
        assert response.status_code == 204

        response = await client.get(f"/api/v1/tasks/{sample_task.uuid}", headers=headers)
        assert response.status_code == 404
