"""Unit tests for the members API endpoints."""

import pytest
from unittest.mock import AsyncMock

from setting_api.errors.exceptions import InternalServerError


BASE = "/api/setting/members"


class TestLoadMoreEndpoint:
    """Test GET /api/setting/members/load-more."""

    def test_first_page(self, memory_client):
        response = memory_client.get(f"{BASE}/load-more", params={"limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Members retrieved successfully"
        assert len(body["data"]) == 10
        assert body["data"][0]["name"] == "User 1"
        assert body["data"][-1]["name"] == "User 4"
        assert body["meta"] == {"nextCursor": 4, "hasMore": True, "limit": 10}

    def test_follow_cursor_to_last_page(self, memory_client):
        first = memory_client.get(f"{BASE}/load-more", params={"limit": 10}).json()
        second = memory_client.get(
            f"{BASE}/load-more", params={"limit": 10, "cursor": first["meta"]["nextCursor"]}
        ).json()

        assert [m["name"] for m in second["data"]] == ["User 5", "User 6", "User 7", "User 8", "User 9"]
        assert second["meta"] == {"nextCursor": None, "hasMore": False, "limit": 10}

    def test_default_limit(self, memory_client):
        body = memory_client.get(f"{BASE}/load-more").json()
        assert body["meta"]["limit"] == 10
        assert len(body["data"]) == 10

    def test_large_limit_accepted(self, memory_client):
        response = memory_client.get(f"{BASE}/load-more", params={"limit": 150})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 15
        assert body["meta"] == {"nextCursor": None, "hasMore": False, "limit": 150}

    def test_search(self, memory_client):
        body = memory_client.get(f"{BASE}/load-more", params={"limit": 3, "search": " User 1 "}).json()

        assert [m["name"] for m in body["data"]] == ["User 1", "User 10", "User 11"]
        assert body["meta"]["hasMore"] is True

    def test_empty_search_ignored(self, memory_client):
        body = memory_client.get(f"{BASE}/load-more", params={"limit": 20, "search": "   "}).json()
        assert len(body["data"]) == 15

    def test_stale_cursor_returns_empty_page(self, memory_client):
        response = memory_client.get(f"{BASE}/load-more", params={"limit": 5, "cursor": 999})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["meta"] == {"nextCursor": None, "hasMore": False, "limit": 5}

    @pytest.mark.parametrize("limit", ["invalid", "0", "-5", "2.5"])
    def test_invalid_limit(self, memory_client, limit):
        response = memory_client.get(f"{BASE}/load-more", params={"limit": limit})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert isinstance(body["errors"], list)
        assert body["errors"][0].startswith("limit:")

    def test_invalid_cursor(self, memory_client):
        response = memory_client.get(f"{BASE}/load-more", params={"cursor": "abc"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0].startswith("cursor:")

    def test_zero_cursor_returns_first_page(self, memory_client):
        response = memory_client.get(f"{BASE}/load-more", params={"cursor": 0, "limit": 3})

        assert response.status_code == 200
        body = response.json()
        assert [m["name"] for m in body["data"]] == ["User 1", "User 10", "User 11"]
        assert body["meta"] == {"nextCursor": 11, "hasMore": True, "limit": 3}

    @pytest.mark.parametrize("cursor", [-5, 2**40])
    def test_cursor_without_row_returns_empty_page(self, memory_client, cursor):
        response = memory_client.get(f"{BASE}/load-more", params={"cursor": cursor, "limit": 3})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["meta"] == {"nextCursor": None, "hasMore": False, "limit": 3}

    def test_limit_beyond_bigint_range(self, memory_client):
        response = memory_client.get(f"{BASE}/load-more", params={"limit": 2**63})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0].startswith("limit:")

    def test_storage_failure(self, client, mock_repository):
        mock_repository.load_more = AsyncMock(side_effect=InternalServerError("Database error: boom"))

        response = client.get(f"{BASE}/load-more")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert "boom" not in response.text


class TestListEndpoint:
    """Test GET /api/setting/members."""

    def test_list(self, client, mock_repository):
        response = client.get(BASE, params={"page": 1, "per_page": 5, "orderField": "name", "orderDir": "asc"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["pagination"] == {"currentPage": 1, "totalPages": 1, "totalItems": 1, "itemsPerPage": 5}

        query = mock_repository.find_all.call_args[0][0]
        assert query.limit == 5
        assert query.order_field == "name"
        assert query.order_dir == "asc"

    def test_snake_case_ordering_and_filters(self, client, mock_repository):
        client.get(BASE, params={"limit": 20, "order_field": "birthdate", "order_dir": "desc", "active": "active", "search": " budi "})

        query = mock_repository.find_all.call_args[0][0]
        assert query.limit == 20
        assert query.order_field == "birthdate"
        assert query.active == "active"
        assert query.search == "budi"

    def test_limit_over_maximum(self, client):
        response = client.get(BASE, params={"limit": 150})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_order_field(self, client):
        response = client.get(BASE, params={"orderField": "password", "orderDir": "asc"})

        assert response.status_code == 400
        assert response.json()["errors"][0].startswith("order_field: Order field must be one of")


class TestMemberCrudEndpoints:
    """Test single-member endpoints."""

    def test_get_member(self, client):
        response = client.get(f"{BASE}/1")

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["id"] == 1
        assert body["message"] == "Member retrieved successfully"

    def test_get_member_invalid_id(self, client):
        response = client.get(f"{BASE}/0")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid member ID"

    def test_get_member_non_numeric_id(self, client):
        assert client.get(f"{BASE}/abc").status_code == 400

    def test_get_member_not_found(self, client, mock_repository):
        mock_repository.find_by_id = AsyncMock(return_value=None)

        response = client.get(f"{BASE}/42")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Member not found", "errors": ["Member not found"]}

    def test_create_member(self, client, mock_repository, member_payload):
        response = client.post(BASE, json=member_payload, headers={"X-User-Id": "7"})

        assert response.status_code == 201
        assert response.json()["message"] == "Member created successfully"
        args, kwargs = mock_repository.create.call_args
        assert args[0].username == "budi_s"
        assert kwargs["created_by"] == 7

    def test_create_member_without_acting_user(self, client, mock_repository, member_payload):
        client.post(BASE, json=member_payload)
        assert mock_repository.create.call_args[1]["created_by"] == 0

    def test_create_duplicate_username(self, client, mock_repository, member_payload, sample_member):
        mock_repository.find_by_username = AsyncMock(return_value=sample_member)

        response = client.post(BASE, json=member_payload)

        assert response.status_code == 400
        assert response.json()["message"] == "This username is already taken"
        mock_repository.create.assert_not_called()

    def test_create_duplicate_user_id(self, client, mock_repository, member_payload, sample_member):
        mock_repository.find_by_user_id = AsyncMock(return_value=sample_member)

        response = client.post(BASE, json=member_payload)

        assert response.status_code == 400
        assert response.json()["message"] == "This user is already registered as a member"

    def test_create_validation_errors(self, client, member_payload):
        member_payload["gender"] = "Other"
        member_payload["username"] = "x"

        response = client.post(BASE, json=member_payload)

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert "gender: Gender must be either Male or Female" in errors
        assert any(error.startswith("username:") for error in errors)

    def test_update_keeps_photo(self, client, mock_repository, member_payload, sample_member):
        mock_repository.find_by_id = AsyncMock(
            return_value=sample_member.model_copy(update={"photo": "old.jpg"})
        )

        response = client.put(
            f"{BASE}/1",
            json={**member_payload, "photo": "new.jpg", "status_file": "0"},
            headers={"X-User-Id": "3"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Member updated successfully"
        kwargs = mock_repository.update.call_args[1]
        assert kwargs["photo"] == "old.jpg"
        assert kwargs["updated_by"] == 3

    def test_update_replaces_photo(self, client, mock_repository, member_payload):
        client.put(f"{BASE}/1", json={**member_payload, "photo": "new.jpg", "status_file": "1"})
        assert mock_repository.update.call_args[1]["photo"] == "new.jpg"

    def test_update_same_username_allowed(self, client, mock_repository, member_payload, sample_member):
        mock_repository.find_by_username = AsyncMock(return_value=sample_member)

        response = client.put(
            f"{BASE}/1",
            json={**member_payload, "username": sample_member.username, "status_file": "0"}
        )

        assert response.status_code == 200
        mock_repository.find_by_username.assert_not_called()

    def test_update_missing_status_file(self, client, member_payload):
        response = client.put(f"{BASE}/1", json=member_payload)
        assert response.status_code == 400

    def test_delete_member(self, client, mock_repository):
        response = client.delete(f"{BASE}/1")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Member deleted successfully"}
        mock_repository.delete.assert_called_once_with(1)

    def test_delete_missing_member(self, client, mock_repository):
        mock_repository.find_by_id = AsyncMock(return_value=None)

        response = client.delete(f"{BASE}/5")

        assert response.status_code == 404
        mock_repository.delete.assert_not_called()


def test_unknown_route(client):
    response = client.get("/api/setting/unknown")

    assert response.status_code == 404
    assert response.json()["message"] == "Route GET /api/setting/unknown not found"
