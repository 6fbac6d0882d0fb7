"""Integration tests for the todo order preference."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

ORDER = "/api/v1/preferences/todo-order"


class TestTodoOrderPreference:
    @pytest.mark.asyncio
    async def test_empty_before_first_save(self, authenticated_client: AsyncClient) -> None:
        response = await authenticated_client.get(ORDER)

        assert response.status_code == 200
        assert response.json() == {"todo_order": {}}

    @pytest.mark.asyncio
    async def test_save_replaces_whole_map(self, authenticated_client: AsyncClient) -> None:
        a, b, c = (str(uuid4()) for _ in range(3))
        folder = str(uuid4())

        await authenticated_client.put(ORDER, json={"todo_order": {"root": [a, b]}})
        response = await authenticated_client.put(
            ORDER, json={"todo_order": {"root": [b, a], folder: [c]}}
        )

        assert response.status_code == 200
        stored = (await authenticated_client.get(ORDER)).json()["todo_order"]
        assert stored == {"root": [b, a], folder: [c]}

    @pytest.mark.asyncio
    async def test_order_is_per_user(
        self, authenticated_client: AsyncClient, other_headers: dict[str, str]
    ) -> None:
        await authenticated_client.put(ORDER, json={"todo_order": {"root": [str(uuid4())]}})

        response = await authenticated_client.get(ORDER, headers=other_headers)

        assert response.json() == {"todo_order": {}}

    @pytest.mark.asyncio
    async def test_ids_must_be_uuids(self, authenticated_client: AsyncClient) -> None:
        response = await authenticated_client.put(ORDER, json={"todo_order": {"root": ["x"]}})

        assert response.status_code == 422
