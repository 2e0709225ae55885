"""Tests for services/user_service.py: CRUD, pagination, email uniqueness, password hygiene."""
from unittest.mock import AsyncMock

import pytest

from app.security.password import verify_password
from app.services.user_service import EmailTakenError, UserNotFoundError, parse_sort_by


async def _seed(service, count: int, role: str = "USER"):
    users = []
    for i in range(count):
        users.append(await service.create_user(f"user{i}@example.com", "password1", f"User {i}", role))
    return users


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_returns_safe_dict(self, user_service):
        user = await user_service.create_user("a@example.com", "password1", "Alice", "ADMIN")
        assert user["id"] > 0
        assert user["email"] == "a@example.com"
        assert user["role"] == "ADMIN"
        assert user["is_email_verified"] is False
        assert user["created_at"] is not None
        assert "hashed_password" not in user
        assert "password" not in user

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, user_service):
        await user_service.create_user("a@example.com", "password1", "Alice")
        row = await user_service.get_user_by_email("a@example.com")
        assert row.hashed_password != "password1"
        assert verify_password("password1", row.hashed_password)

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, user_service):
        await user_service.create_user("a@example.com", "password1", "Alice")
        with pytest.raises(EmailTakenError) as exc_info:
            await user_service.create_user("a@example.com", "password2", "Other")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_unique_constraint_race_maps_to_email_taken(self, user_service, monkeypatch):
        await user_service.create_user("a@example.com", "password1", "Alice")
        # 模拟并发：预检查没看到已存在的邮箱，提交时撞上唯一约束
        monkeypatch.setattr(user_service, "_find_by_email", AsyncMock(return_value=None))
        with pytest.raises(EmailTakenError):
            await user_service.create_user("a@example.com", "password2", "Other")
        page = await user_service.query_users()
        assert page["total_results"] == 1


class TestRead:
    @pytest.mark.asyncio
    async def test_get_by_id(self, user_service):
        created = await user_service.create_user("a@example.com", "password1", "Alice")
        fetched = await user_service.get_user_by_id(created["id"])
        assert fetched["email"] == "a@example.com"
        assert "hashed_password" not in fetched

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, user_service):
        assert await user_service.get_user_by_id(999) is None
        assert await user_service.get_user_by_email("nobody@example.com") is None


class TestQuery:
    @pytest.mark.asyncio
    async def test_pagination(self, user_service):
        await _seed(user_service, 5)
        page = await user_service.query_users(limit=2, page=3)
        assert page["page"] == 3
        assert page["limit"] == 2
        assert page["total_results"] == 5
        assert page["total_pages"] == 3
        assert len(page["results"]) == 1

    @pytest.mark.asyncio
    async def test_filters(self, user_service):
        await _seed(user_service, 2)
        await user_service.create_user("boss@example.com", "password1", "Boss", "ADMIN")
        admins = await user_service.query_users(role="ADMIN")
        assert [u["email"] for u in admins["results"]] == ["boss@example.com"]
        named = await user_service.query_users(name="User 1")
        assert named["total_results"] == 1

    @pytest.mark.asyncio
    async def test_sort_by_email(self, user_service):
        await user_service.create_user("c@example.com", "password1", "C")
        await user_service.create_user("a@example.com", "password1", "A")
        await user_service.create_user("b@example.com", "password1", "B")
        asc = await user_service.query_users(sort_by="email:asc")
        assert [u["email"] for u in asc["results"]] == ["a@example.com", "b@example.com", "c@example.com"]
        desc = await user_service.query_users(sort_by="email:desc")
        assert [u["email"] for u in desc["results"]][0] == "c@example.com"

    @pytest.mark.asyncio
    async def test_empty_result(self, user_service):
        page = await user_service.query_users()
        assert page["results"] == []
        assert page["total_results"] == 0
        assert page["total_pages"] == 0


class TestParseSortBy:
    def test_rejects_unknown_or_private_fields(self):
        assert parse_sort_by("hashed_password:asc") is None
        assert parse_sort_by("email:sideways") is None
        assert parse_sort_by("email") is None
        assert parse_sort_by(None) is None

    def test_accepts_public_field(self):
        assert parse_sort_by("created_at:asc") is not None


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_fields(self, user_service):
        user = await user_service.create_user("a@example.com", "password1", "Alice")
        updated = await user_service.update_user_by_id(user["id"], name="Alicia", password="newpass99")
        assert updated["name"] == "Alicia"
        row = await user_service.get_user_by_email("a@example.com")
        assert verify_password("newpass99", row.hashed_password)

    @pytest.mark.asyncio
    async def test_update_to_taken_email_rejected(self, user_service):
        a = await user_service.create_user("a@example.com", "password1", "A")
        await user_service.create_user("b@example.com", "password1", "B")
        with pytest.raises(EmailTakenError):
            await user_service.update_user_by_id(a["id"], email="b@example.com")

    @pytest.mark.asyncio
    async def test_update_unique_constraint_race_maps_to_email_taken(self, user_service, monkeypatch):
        a = await user_service.create_user("a@example.com", "password1", "A")
        await user_service.create_user("b@example.com", "password1", "B")
        monkeypatch.setattr(user_service, "_find_by_email", AsyncMock(return_value=None))
        with pytest.raises(EmailTakenError):
            await user_service.update_user_by_id(a["id"], email="b@example.com")
        assert (await user_service.get_user_by_id(a["id"]))["email"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_update_to_own_email_allowed(self, user_service):
        a = await user_service.create_user("a@example.com", "password1", "A")
        updated = await user_service.update_user_by_id(a["id"], email="a@example.com", name="Same")
        assert updated["email"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_update_missing_user(self, user_service):
        with pytest.raises(UserNotFoundError) as exc_info:
            await user_service.update_user_by_id(42, name="x")
        assert exc_info.value.status_code == 404


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, user_service):
        user = await user_service.create_user("a@example.com", "password1", "Alice")
        await user_service.delete_user_by_id(user["id"])
        assert await user_service.get_user_by_id(user["id"]) is None

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, user_service):
        with pytest.raises(UserNotFoundError):
            await user_service.delete_user_by_id(42)
