from datetime import datetime, timedelta, timezone

from httpx import AsyncClient

from tests.conftest import get_auth_headers


class TestSkillsAPI:
    async def test_create_and_list_skills(self, client: AsyncClient, sample_user):
        headers = get_auth_headers(sample_user.id)
        for name, level, hours in [("Rust", "beginner", 3), ("Python", "expert", 500)]:
            response = await client.post(
                "/api/v1/skills/",
                json={"name": name, "level": level, "practice_hours": hours},
                headers=headers,
            )
            assert response.status_code == 201

        response = await client.get(
            "/api/v1/skills/", params={"level": "expert"}, headers=headers
        )

        data = response.json()
        assert [s["name"] for s in data["items"]] == ["Python"]
        assert data["stats"]["expert_count"] == 1
        assert data["stats"]["total_hours"] == 503

    async def test_invalid_icon_url(self, client: AsyncClient, sample_user):
        response = await client.post(
            "/api/v1/skills/",
            json={"name": "Go", "icon_url": "ftp://icons/go.png"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 400


class TestProjectsAPI:
    async def test_filter_by_tech(self, client: AsyncClient, sample_project, sample_user):
        headers = get_auth_headers(sample_user.id)
        await client.post(
            "/api/v1/projects/",
            json={"title": "Portfolio", "tech_stack": ["React"]},
            headers=headers,
        )

        response = await client.get(
            "/api/v1/projects/", params={"tech": "MQTT"}, headers=headers
        )

        data = response.json()
        assert [p["title"] for p in data["items"]] == ["Home Automation"]
        assert data["filter_options"]["tech_stack"] == ["MQTT", "Python", "React"]

    async def test_complete_project(self, client: AsyncClient, sample_project, sample_user):
        response = await client.put(
            f"/api/v1/projects/{sample_project.uuid}",
            json={"status": "completed"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 200
        assert response.json()["completed_at"] is not None

    async def test_status_filter(self, client: AsyncClient, sample_project, sample_user):
        response = await client.get(
            "/api/v1/projects/",
            params={"status": "in-progress"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.json()["filtered_total"] == 1


class TestEventsAPI:
    async def test_today_timeline(self, client: AsyncClient, sample_event, sample_user):
        headers = get_auth_headers(sample_user.id)
        yesterday = datetime.now(timezone.utc).date() - timedelta(days=1)
        await client.post(
            "/api/v1/events/",
            json={"name": "Yesterday's meetup", "start_date": str(yesterday)},
            headers=headers,
        )

        response = await client.get(
            "/api/v1/events/", params={"timeline": "today"}, headers=headers
        )

        data = response.json()
        assert [e["name"] for e in data["items"]] == ["PyCon APAC"]
        assert data["total"] == 2

    async def test_overdue_is_not_supported(
        self, client: AsyncClient, sample_user
    ):
        response = await client.get(
            "/api/v1/events/",
            params={"timeline": "overdue"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 400

    async def test_year_filter_and_options(
        self, client: AsyncClient, sample_event, sample_user
    ):
        headers = get_auth_headers(sample_user.id)
        await client.post(
            "/api/v1/events/",
            json={"name": "Old conf", "start_date": "2019-03-01"},
            headers=headers,
        )

        response = await client.get(
            "/api/v1/events/", params={"year": 2019}, headers=headers
        )

        data = response.json()
        assert [e["name"] for e in data["items"]] == ["Old conf"]
        assert 2019 in data["filter_options"]["start_date"]

    async def test_attendees(
        self, client: AsyncClient, sample_event, sample_person, sample_user
    ):
        headers = get_auth_headers(sample_user.id)
        url = f"/api/v1/events/{sample_event.uuid}/attendees/{sample_person.uuid}"

        response = await client.post(url, headers=headers)
        assert response.status_code == 200
        assert response.json()["attendee_count"] == 1

        response = await client.delete(url, headers=headers)
        assert response.status_code == 200
        assert response.json()["attendee_count"] == 0

    async def test_end_before_start(self, client: AsyncClient, sample_user):
        response = await client.post(
            "/api/v1/events/",
            json={"name": "Backwards", "start_date": "2024-05-02", "end_date": "2024-05-01"},
            headers=get_auth_headers(sample_user.id),
        )

        assert response.status_code == 422


class TestNoteLinksAPI:
    async def test_note_resolves_links(
        self, client: AsyncClient, sample_user, sample_skill, sample_project
    ):
        headers = get_auth_headers(sample_user.id)
        response = await client.post(
            "/api/v1/notes/",
            json={
                "title": "MQTT topics",
                "content": "home/+/temperature",
                "category": "IoT",
                "skill_id": sample_skill.id,
                "project_id": sample_project.id,
            },
            headers=headers,
        )
        note_uuid = response.json()["uuid"]

        response = await client.get(f"/api/v1/notes/{note_uuid}", headers=headers)

        links = response.json()["links"]
        assert links["skill"]["name"] == "Python"
        assert links["project"]["title"] == "Home Automation"
        assert links["event"] is None
