"""Tests for users, admin checks, API keys and usage metering."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from dzyne.auth.admin import is_admin_email, require_admin
from dzyne.auth.api_keys import (
    KEY_PREFIX,
    ApiKeyRepository,
    generate_api_key,
    get_key_owner,
    hash_api_key,
    validate_api_key,
)
from dzyne.auth.usage_logger import log_tool_usage, tracked
from dzyne.auth.users import UserRepository
from dzyne.config import Config
from dzyne.errors import ApiKeyError, ValidationError


@pytest.fixture
def user_id(db_path):
    return UserRepository(db_path).create("Dev@Example.com", "Dev")


@pytest.fixture
def api_key(db_path, user_id):
    return ApiKeyRepository(db_path).create(user_id, name="CLI", rate_limit=3)


def _usage_rows(db_path):
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    rows = [dict(r) for r in conn.execute("SELECT * FROM usage_logs ORDER BY rowid")]
    conn.close()
    return rows


class TestUsers:
    def test_create_and_lookup(self, db_path, user_id):
        repo = UserRepository(db_path)

        assert repo.get(user_id)["email"] == "dev@example.com"
        assert repo.get_by_email(" DEV@example.com ")["id"] == user_id
        assert repo.resolve("dev@example.com")["id"] == user_id
        assert repo.resolve(user_id)["name"] == "Dev"

    def test_duplicate_and_invalid_email(self, db_path, user_id):
        repo = UserRepository(db_path)

        with pytest.raises(ValidationError, match="already exists"):
            repo.create("dev@example.com")
        with pytest.raises(ValidationError, match="Invalid email"):
            repo.create("nobody")

    def test_stripe_customer(self, db_path, user_id):
        repo = UserRepository(db_path)
        repo.set_stripe_customer(user_id, "cus_123")

        assert repo.get_by_stripe_customer("cus_123")["id"] == user_id


class TestAdmin:
    def test_allow_list(self):
        assert is_admin_email(" Admin@Dzyne.dev ")
        assert not is_admin_email("dev@example.com")
        assert not is_admin_email(None)

    def test_require_admin(self):
        admin = {"email": "admin@dzyne.dev"}
        assert require_admin(admin) is admin

        with pytest.raises(ApiKeyError) as exc:
            require_admin({"email": "dev@example.com"})
        assert exc.value.reason == "forbidden"


class TestApiKeys:
    def test_generated_key_shape(self):
        generated = generate_api_key()

        assert generated["key"].startswith(KEY_PREFIX)
        assert len(generated["key"]) == len(KEY_PREFIX) + 64
        assert generated["prefix"] == generated["key"][:12]
        assert generated["hash"] == hash_api_key(generated["key"])

    def test_only_hash_is_stored(self, db_path, user_id, api_key):
        listed = ApiKeyRepository(db_path).list(user_id)

        assert len(listed) == 1
        assert listed[0]["key_prefix"] == api_key["prefix"]
        assert "key_hash" not in listed[0]
        assert ApiKeyRepository(db_path).find_by_hash(hash_api_key(api_key["key"]))["id"] == api_key["id"]

    def test_validate_valid_key(self, db_path, user_id, api_key):
        result = validate_api_key(api_key["key"], db_path)

        assert result.valid
        assert result.user_id == user_id
        assert result.rate_limit == 3
        assert ApiKeyRepository(db_path).list(user_id)[0]["last_used_at"]

    def test_validate_rejections(self, db_path, user_id, api_key):
        assert validate_api_key(None, db_path).reason == "format"
        assert validate_api_key("sk_live_123", db_path).reason == "format"
        assert validate_api_key(KEY_PREFIX + "0" * 64, db_path).reason == "not_found"

        ApiKeyRepository(db_path).revoke(api_key["id"], user_id)
        result = validate_api_key(api_key["key"], db_path)
        assert not result.valid
        assert result.reason == "inactive"

    def test_expired_key(self, db_path, user_id):
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        created = ApiKeyRepository(db_path).create(user_id, expires_at=past)

        assert validate_api_key(created["key"], db_path).reason == "expired"

    def test_rate_limit(self, db_path, user_id, api_key):
        for _ in range(3):
            log_tool_usage(api_key["id"], "search_patterns", 12, "success", db_path=db_path)

        result = validate_api_key(api_key["key"], db_path)

        assert result.reason == "rate_limited"
        assert result.error == "Rate limit exceeded"

    def test_old_usage_outside_window(self, db_path, user_id, api_key):
        old = (datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat()
        conn = sqlite3.connect(db_path)
        for i in range(5):
            conn.execute(
                "INSERT INTO usage_logs (id, api_key_id, tool_name, status, created_at) VALUES (?, ?, 't', 'success', ?)",
                (f"old-{i}", api_key["id"], old)
            )
        conn.commit()
        conn.close()

        assert validate_api_key(api_key["key"], db_path).valid

    def test_revoke_requires_owner(self, db_path, user_id, api_key):
        assert not ApiKeyRepository(db_path).revoke(api_key["id"], "someone-else")
        assert ApiKeyRepository(db_path).revoke(api_key["id"], user_id)

    def test_get_key_owner(self, db_path, user_id, api_key):
        assert get_key_owner(api_key["key"], db_path) == user_id
        assert get_key_owner("", db_path) is None

        ApiKeyRepository(db_path).revoke(api_key["id"], user_id)
        assert get_key_owner(api_key["key"], db_path) is None


class TestUsageLogger:
    def test_log_tool_usage(self, db_path, api_key):
        log_id = log_tool_usage(
            api_key["id"], "pair_typography", 42, "success",
            input_params={"mood": "calm"}, response_size=120, db_path=db_path,
        )

        rows = _usage_rows(db_path)
        assert rows[0]["id"] == log_id
        assert rows[0]["input_params"] == '{"mood": "calm"}'
        assert rows[0]["latency_ms"] == 42

    def test_unknown_status(self, db_path):
        with pytest.raises(ValueError):
            log_tool_usage(None, "x", 0, "ok", db_path=db_path)

    def test_write_failure_returns_none(self, tmp_path):
        assert log_tool_usage(None, "x", 0, "success", db_path=tmp_path / "no_schema.db") is None

    def test_tracked_passthrough_without_key(self, db_path):
        @tracked("demo")
        def demo(value=1):
            return {"value": value}

        assert demo(value=2) == {"value": 2}
        assert _usage_rows(db_path) == []

    def test_tracked_logs_success_and_error(self, db_path, api_key, monkeypatch):
        monkeypatch.setattr(Config, "API_KEY", api_key["key"])

        @tracked("demo")
        def demo(fail=False):
            return {"error": "bad input"} if fail else {"ok": True}

        assert demo(fail=False) == {"ok": True}
        assert demo(fail=True) == {"error": "bad input"}

        rows = _usage_rows(db_path)
        assert [r["status"] for r in rows] == ["success", "error"]
        assert rows[1]["error_message"] == "bad input"
        assert rows[0]["response_size"] == len('{"ok": true}')
        assert demo.__name__ == "demo"

    def test_tracked_rejects_rate_limited(self, db_path, api_key, monkeypatch):
        monkeypatch.setattr(Config, "API_KEY", api_key["key"])
        for _ in range(3):
            log_tool_usage(api_key["id"], "demo", 1, "success", db_path=db_path)

        @tracked("demo")
        def demo():
            raise AssertionError("should not run")

        assert demo() == {"error": "Rate limit exceeded"}
        assert _usage_rows(db_path)[-1]["status"] == "rate_limited"

    def test_tracked_rejects_unknown_key(self, db_path, monkeypatch):
        monkeypatch.setattr(Config, "API_KEY", KEY_PREFIX + "f" * 64)

        @tracked("demo")
        def demo():
            return {"ok": True}

        assert demo() == {"error": "API key not found"}
        assert _usage_rows(db_path) == []
