"""Integration tests for developer endpoints."""

from __future__ import annotations

from uuid import uuid4

from fastapi import status
from httpx import AsyncClient

from taskflow.core.auth import Role
from tests.fakes import FakeFileStore, FakeNotificationSink
from tests.utils import API, auth_headers, developer_form

DEVELOPERS = f"{API}/developers"


async def create_developer(client: AsyncClient, **overrides) -> dict:
    response = await client.post(DEVELOPERS, data=developer_form(**overrides), headers=auth_headers())
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


class TestCreateDeveloper:
    async def test_admin_creates_developer_with_image(
        self,
        async_client: AsyncClient,
        files: FakeFileStore,
        notifications: FakeNotificationSink,
    ) -> None:
        response = await async_client.post(
            DEVELOPERS,
            data=developer_form(),
            files={"image": ("me.png", b"\x89PNG", "image/png")},
            headers=auth_headers(),
        )

        assert response.status_code == status.HTTP_201_CREATED, response.text
        body = response.json()
        assert body["full_name"] == "Jane Doe"
        assert body["job_level"] == "Senior"
        assert body["image_path"].endswith("_me.png")
        assert len(files.files) == 1
        assert notifications.events() == ["createdeveloper"]

    async def test_new_developer_can_log_in(self, async_client: AsyncClient) -> None:
        await create_developer(async_client)

        response = await async_client.post(
            f"{API}/authentication/login",
            json={"email": "jane@example.com", "password": "Passw0rd"},
        )

        assert response.status_code == status.HTTP_200_OK

    async def test_duplicate_is_conflict(self, async_client: AsyncClient) -> None:
        await create_developer(async_client)

        response = await async_client.post(
            DEVELOPERS,
            data=developer_form(email="twin@example.com"),
            headers=auth_headers(),
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"]["code"] == "Developer.DeveloperAlreadyExist"

    async def test_invalid_extension_is_rejected(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            DEVELOPERS,
            data=developer_form(),
            files={"image": ("run.exe", b"MZ", "application/octet-stream")},
            headers=auth_headers(),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"]["code"] == "File.InvalidExtension"

    async def test_manager_cannot_create(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            DEVELOPERS, data=developer_form(), headers=auth_headers(roles=[Role.MANAGER])
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_anonymous_is_unauthorized(self, async_client: AsyncClient) -> None:
        response = await async_client.post(DEVELOPERS, data=developer_form())

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestReadDevelopers:
    async def test_list_is_paged(self, async_client: AsyncClient) -> None:
        for index in range(3):
            await create_developer(
                async_client, email=f"dev{index}@example.com", full_name=f"Developer {index}"
            )

        response = await async_client.get(
            DEVELOPERS,
            params={"page_number": 2, "page_size": 2},
            headers=auth_headers(roles=[Role.DEVELOPER]),
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["total_count"] == 3
        assert body["total_pages"] == 2
        assert body["has_previous"] is True
        assert body["has_forward"] is False
        assert len(body["items"]) == 1

    async def test_get_by_id(self, async_client: AsyncClient) -> None:
        created = await create_developer(async_client)

        response = await async_client.get(f"{DEVELOPERS}/{created['id']}", headers=auth_headers())

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["assigned_tasks"] == []

    async def test_get_unknown(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{DEVELOPERS}/{uuid4()}", headers=auth_headers())

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"]["code"] == "Developer.NotFound"

    async def test_manager_cannot_list(self, async_client: AsyncClient) -> None:
        response = await async_client.get(DEVELOPERS, headers=auth_headers(roles=[Role.MANAGER]))

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestUpdateAndDeleteDeveloper:
    async def test_manager_updates_developer(self, async_client: AsyncClient) -> None:
        created = await create_developer(async_client)
        form = developer_form(full_name="Jane Smith", job_level="Lead")
        form["id"] = created["id"]

        response = await async_client.put(
            DEVELOPERS, data=form, headers=auth_headers(roles=[Role.MANAGER])
        )

        assert response.status_code == status.HTTP_200_OK, response.text
        assert response.json()["full_name"] == "Jane Smith"
        assert response.json()["job_level"] == "Lead"

    async def test_delete_then_not_found(
        self, async_client: AsyncClient, notifications: FakeNotificationSink
    ) -> None:
        created = await create_developer(async_client)

        deleted = await async_client.delete(f"{DEVELOPERS}/{created['id']}", headers=auth_headers())
        fetched = await async_client.get(f"{DEVELOPERS}/{created['id']}", headers=auth_headers())

        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert fetched.status_code == status.HTTP_404_NOT_FOUND
        assert notifications.events()[-1] == "deletedeveloper"

    async def test_developer_cannot_delete(self, async_client: AsyncClient) -> None:
        created = await create_developer(async_client)

        response = await async_client.delete(
            f"{DEVELOPERS}/{created['id']}", headers=auth_headers(roles=[Role.DEVELOPER])
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
