"""Integration tests for team and membership endpoints."""

from typing import Any
from uuid import uuid4

import pytest
from httpx import AsyncClient

from infrastructure.auth.provider import TokenUser
from tests.conftest import ClientFactory


class TestCreateTeam:
    """Tests for POST /api/v1/teams."""

    @pytest.mark.asyncio
    async def test_creator_is_owner(
        self, authenticated_client: AsyncClient, team: dict[str, Any]
    ) -> None:
        assert team["role"] == "owner"
        assert team["member_count"] == 1
        assert len(team["invite_code"]) == 8

        response = await authenticated_client.get("/api/v1/teams")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [t["id"] for t in data] == [team["id"]]
        assert data[0]["role"] == "owner"

    @pytest.mark.asyncio
    async def test_rejects_bad_color(self, authenticated_client: AsyncClient) -> None:
        response = await authenticated_client.post(
            "/api/v1/teams", json={"name": "Youth Band", "color": "orange"}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestJoinByCode:
    """Tests for POST /api/v1/teams/join."""

    @pytest.mark.asyncio
    async def test_member_joins(
        self, other_client: AsyncClient, membership: dict[str, Any], team: dict[str, Any]
    ) -> None:
        assert membership["role"] == "member"
        assert membership["team_id"] == team["id"]

        response = await other_client.get("/api/v1/teams")
        assert response.json()["data"][0]["role"] == "member"

    @pytest.mark.asyncio
    async def test_code_is_case_insensitive(
        self, other_client: AsyncClient, team: dict[str, Any]
    ) -> None:
        response = await other_client.post(
            "/api/v1/teams/join", json={"invite_code": team["invite_code"].lower()}
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_joining_twice_conflicts(
        self, other_client: AsyncClient, team: dict[str, Any], membership: dict[str, Any]
    ) -> None:
        response = await other_client.post(
            "/api/v1/teams/join", json={"invite_code": team["invite_code"]}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_A_MEMBER"

    @pytest.mark.asyncio
    async def test_unknown_code(self, other_client: AsyncClient) -> None:
        response = await other_client.post("/api/v1/teams/join", json={"invite_code": "ZZZZ9999"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVALID_INVITE_CODE"

    @pytest.mark.asyncio
    async def test_regenerated_code_replaces_old(
        self,
        authenticated_client: AsyncClient,
        other_client: AsyncClient,
        team: dict[str, Any],
    ) -> None:
        response = await authenticated_client.post(f"/api/v1/teams/{team['id']}/invite-code")
        new_code = response.json()["invite_code"]

        assert new_code != team["invite_code"]
        stale = await other_client.post(
            "/api/v1/teams/join", json={"invite_code": team["invite_code"]}
        )
        assert stale.status_code == 404


class TestPermissions:
    """Capability checks on team endpoints."""

    @pytest.mark.asyncio
    async def test_member_capabilities(
        self, other_client: AsyncClient, team: dict[str, Any], membership: dict[str, Any]
    ) -> None:
        response = await other_client.get(f"/api/v1/teams/{team['id']}/capabilities")

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "member"
        assert body["capabilities"]["set_availability"] is True
        assert body["capabilities"]["manage_team"] is False
        assert body["capabilities"]["assign_members"] is False

    @pytest.mark.asyncio
    async def test_member_cannot_update_team(
        self, other_client: AsyncClient, team: dict[str, Any], membership: dict[str, Any]
    ) -> None:
        response = await other_client.patch(
            f"/api/v1/teams/{team['id']}", json={"name": "Hijacked"}
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_outsider_is_not_a_member(
        self, client_for: ClientFactory, team: dict[str, Any]
    ) -> None:
        outsider = await client_for(TokenUser(id=uuid4(), email="visitor@example.com"))

        response = await outsider.get(f"/api/v1/teams/{team['id']}")

        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_A_MEMBER"

    @pytest.mark.asyncio
    async def test_unknown_team(self, authenticated_client: AsyncClient) -> None:
        response = await authenticated_client.get(f"/api/v1/teams/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error_code"] == "TEAM_NOT_FOUND"


class TestMembers:
    """Tests for member management."""

    @pytest.mark.asyncio
    async def test_owner_promotes_member(
        self,
        authenticated_client: AsyncClient,
        other_client: AsyncClient,
        team: dict[str, Any],
        membership: dict[str, Any],
    ) -> None:
        response = await authenticated_client.patch(
            f"/api/v1/teams/{team['id']}/members/{membership['id']}/role",
            json={"role": "admin"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"
        caps = await other_client.get(f"/api/v1/teams/{team['id']}/capabilities")
        assert caps.json()["capabilities"]["assign_members"] is True

    @pytest.mark.asyncio
    async def test_list_members(
        self,
        authenticated_client: AsyncClient,
        team: dict[str, Any],
        membership: dict[str, Any],
    ) -> None:
        response = await authenticated_client.get(f"/api/v1/teams/{team['id']}/members")

        assert response.status_code == 200
        roles = sorted(m["role"] for m in response.json()["data"])
        assert roles == ["member", "owner"]

    @pytest.mark.asyncio
    async def test_nickname(
        self, other_client: AsyncClient, team: dict[str, Any], membership: dict[str, Any]
    ) -> None:
        response = await other_client.patch(
            f"/api/v1/teams/{team['id']}/members/me", json={"nickname": "Soprano 1"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["nickname"] == "Soprano 1"

    @pytest.mark.asyncio
    async def test_owner_cannot_leave(
        self, authenticated_client: AsyncClient, team: dict[str, Any]
    ) -> None:
        response = await authenticated_client.post(f"/api/v1/teams/{team['id']}/leave")

        assert response.status_code == 400
        assert response.json()["error_code"] == "OWNER_CANNOT_LEAVE"

    @pytest.mark.asyncio
    async def test_member_leaves(
        self, other_client: AsyncClient, team: dict[str, Any], membership: dict[str, Any]
    ) -> None:
        response = await other_client.post(f"/api/v1/teams/{team['id']}/leave")

        assert response.status_code == 204
        teams = await other_client.get("/api/v1/teams")
        assert teams.json()["data"] == []

    @pytest.mark.asyncio
    async def test_owner_removes_member(
        self,
        authenticated_client: AsyncClient,
        other_client: AsyncClient,
        team: dict[str, Any],
        membership: dict[str, Any],
    ) -> None:
        response = await authenticated_client.delete(
            f"/api/v1/teams/{team['id']}/members/{membership['id']}"
        )

        assert response.status_code == 204
        after = await other_client.get(f"/api/v1/teams/{team['id']}")
        assert after.status_code == 403


class TestOwnershipTransfer:
    """Tests for the two-step ownership transfer."""

    @pytest.mark.asyncio
    async def test_transfer_and_accept(
        self,
        authenticated_client: AsyncClient,
        other_client: AsyncClient,
        other_user: TokenUser,
        test_user: TokenUser,
        team: dict[str, Any],
        membership: dict[str, Any],
    ) -> None:
        response = await authenticated_client.post(
            f"/api/v1/teams/{team['id']}/transfer-ownership",
            json={"new_owner_id": str(other_user.id)},
        )
        assert response.status_code == 201
        transfer = response.json()["data"]
        assert transfer["status"] == "pending"

        accepted = await other_client.post(f"/api/v1/teams/transfers/{transfer['id']}/accept")
        assert accepted.status_code == 200
        assert accepted.json()["data"]["status"] == "completed"

        detail = await other_client.get(f"/api/v1/teams/{team['id']}")
        assert detail.json()["data"]["owner_id"] == str(other_user.id)
        caps = await authenticated_client.get(f"/api/v1/teams/{team['id']}/capabilities")
        assert caps.json()["role"] == "admin"

    @pytest.mark.asyncio
    async def test_second_pending_transfer_conflicts(
        self,
        authenticated_client: AsyncClient,
        other_user: TokenUser,
        team: dict[str, Any],
        membership: dict[str, Any],
    ) -> None:
        url = f"/api/v1/teams/{team['id']}/transfer-ownership"
        first = await authenticated_client.post(url, json={"new_owner_id": str(other_user.id)})
        second = await authenticated_client.post(url, json={"new_owner_id": str(other_user.id)})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error_code"] == "TRANSFER_ALREADY_PENDING"
