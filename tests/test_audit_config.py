"""
Tests for audit logging, configuration and utilities.
"""

from datetime import timedelta

import pytest

from fedlogin import Config
from fedlogin.audit import FileAuditLogger, MemoryAuditLogger, create_audit_logger
from fedlogin.auth import (
    AttemptTimeout,
    BackendError,
    BusyError,
    NonceMismatch,
    ProviderCancelled,
    UnsupportedMethodError,
)
from fedlogin.core.types import AuditEvent, AuditEventType, ErrorKind, LoginMethod, utcnow
from fedlogin.util import (
    extract_jwt_claims,
    mask_sensitive_data,
    parse_duration_string,
    parse_optional_duration,
    secure_compare,
)

from helpers import make_identity_token


class TestAuditLoggers:
    """Test audit trail storage."""

    @pytest.mark.asyncio
    async def test_memory_filtering(self):
        """Events can be filtered by attempt, type and time."""
        audit = MemoryAuditLogger()
        started = AuditEvent(AuditEventType.ATTEMPT_STARTED, LoginMethod.GOOGLE, "attempt-1")
        failed = AuditEvent(AuditEventType.ATTEMPT_FAILED, LoginMethod.GOOGLE, "attempt-1", severity="warning")
        other = AuditEvent(AuditEventType.ATTEMPT_STARTED, LoginMethod.APPLE, "attempt-2")
        for event in (started, failed, other):
            await audit.log(event)

        assert await audit.get_events(attempt_id="attempt-1") == [started, failed]
        assert await audit.get_events(event_type=AuditEventType.ATTEMPT_STARTED) == [started, other]
        assert await audit.get_events(start_time=utcnow() + timedelta(minutes=1)) == []

    @pytest.mark.asyncio
    async def test_memory_bounded(self):
        """Only the newest entries are kept."""
        audit = MemoryAuditLogger(max_entries=2)
        for i in range(3):
            await audit.log(AuditEvent(AuditEventType.ATTEMPT_STARTED, attempt_id=f"attempt-{i}"))

        events = await audit.get_events()
        assert [event.attempt_id for event in events] == ["attempt-1", "attempt-2"]

    @pytest.mark.asyncio
    async def test_file_logger(self, tmp_path):
        """Events survive a round trip through the audit file."""
        path = tmp_path / "audit.log"
        audit = FileAuditLogger(str(path))
        event = AuditEvent(AuditEventType.NONCE_MISMATCH, LoginMethod.APPLE, "attempt-1",
                           severity="critical", details={"echoed": "different"})
        await audit.log(event)
        await audit.log(AuditEvent(AuditEventType.ATTEMPT_STARTED, LoginMethod.GOOGLE, "attempt-2"))
        with open(path, "a", encoding="utf-8") as f:
            f.write("not json\n")

        events = await audit.get_events(attempt_id="attempt-1")
        assert len(events) == 1
        assert events[0].event_id == event.event_id
        assert events[0].method is LoginMethod.APPLE
        assert events[0].details == {"echoed": "different"}

    @pytest.mark.asyncio
    async def test_file_logger_missing_file(self, tmp_path):
        """A missing audit file reads as empty."""
        audit = FileAuditLogger(str(tmp_path / "missing.log"))
        assert await audit.get_events() == []

    @pytest.mark.asyncio
    async def test_file_logger_write_failure(self, tmp_path):
        """An unwritable audit file does not raise into the caller."""
        audit = FileAuditLogger(str(tmp_path))
        await audit.log(AuditEvent(AuditEventType.ATTEMPT_STARTED, LoginMethod.GOOGLE, "attempt-1"))

    def test_factory(self, tmp_path):
        """The factory builds known logger types only."""
        assert isinstance(create_audit_logger("memory", max_entries=5), MemoryAuditLogger)
        assert isinstance(create_audit_logger("file", file_path=str(tmp_path / "a.log")), FileAuditLogger)
        with pytest.raises(ValueError):
            create_audit_logger("redis")


class TestConfig:
    """Test orchestrator configuration."""

    def test_defaults(self):
        """Defaults are valid and include scopes for every provider."""
        config = Config()
        assert config.validate()
        assert config.nonce_length == 32
        assert config.attempt_timeout == timedelta(seconds=120)
        assert config.scopes_for(LoginMethod.GITHUB) == ["read:user", "user:email"]
        assert config.scopes_for(LoginMethod.PASSWORD) == []

    def test_scope_override(self):
        """Overriding one provider's scopes keeps the others."""
        config = Config(provider_scopes={LoginMethod.GOOGLE: ["openid"]})
        assert config.scopes_for(LoginMethod.GOOGLE) == ["openid"]
        assert config.scopes_for(LoginMethod.APPLE) == ["full_name", "email"]

    @pytest.mark.parametrize("kwargs", [
        {"nonce_length": 0},
        {"attempt_timeout": timedelta(0)},
        {"history_size": -1},
        {"audit_max_entries": 0},
    ])
    def test_invalid(self, kwargs):
        """Invalid values are rejected."""
        with pytest.raises(ValueError):
            Config(**kwargs).validate()

    def test_from_env(self, monkeypatch):
        """Configuration is read from FEDLOGIN_* variables."""
        monkeypatch.setenv("FEDLOGIN_NONCE_LENGTH", "48")
        monkeypatch.setenv("FEDLOGIN_ATTEMPT_TIMEOUT", "5m")
        monkeypatch.setenv("FEDLOGIN_HISTORY_SIZE", "10")
        monkeypatch.setenv("FEDLOGIN_GITHUB_SCOPES", "repo, read:org")

        config = Config.from_env()

        assert config.nonce_length == 48
        assert config.attempt_timeout == timedelta(minutes=5)
        assert config.history_size == 10
        assert config.scopes_for(LoginMethod.GITHUB) == ["repo", "read:org"]
        assert config.scopes_for(LoginMethod.GOOGLE) == ["email", "profile"]

    def test_from_env_timeout_disabled(self, monkeypatch):
        """The attempt deadline can be switched off."""
        monkeypatch.setenv("FEDLOGIN_ATTEMPT_TIMEOUT", "off")
        assert Config.from_env().attempt_timeout is None

    def test_from_env_bad_int(self, monkeypatch):
        """Unparseable integers fall back to defaults."""
        monkeypatch.setenv("FEDLOGIN_HISTORY_SIZE", "many")
        assert Config.from_env().history_size == 50


class TestDurations:
    """Test duration parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("30s", timedelta(seconds=30)),
        ("90", timedelta(seconds=90)),
        ("5m", timedelta(minutes=5)),
        ("2h", timedelta(hours=2)),
        ("1d", timedelta(days=1)),
        ("1.5m", timedelta(seconds=90)),
    ])
    def test_parse(self, text, expected):
        """Supported units parse to timedeltas."""
        assert parse_duration_string(text) == expected

    def test_invalid(self):
        """Malformed durations are rejected."""
        with pytest.raises(ValueError):
            parse_duration_string("soon")

    def test_optional(self):
        """Disabled durations parse to None."""
        assert parse_optional_duration("never") is None
        assert parse_optional_duration(None) is None
        assert parse_optional_duration("10s") == timedelta(seconds=10)


class TestEncoding:
    """Test encoding helpers."""

    def test_extract_claims(self):
        """Claims are read without the signing key."""
        claims = extract_jwt_claims(make_identity_token(nonce="N1", subject="sub-1"))
        assert claims["nonce"] == "N1"
        assert claims["sub"] == "sub-1"

    def test_extract_claims_invalid(self):
        """Non-JWT strings yield None."""
        assert extract_jwt_claims("not.a.jwt") is None

    def test_secure_compare(self):
        """Only equal strings compare equal."""
        assert secure_compare("N1", "N1")
        assert not secure_compare("N1", "N2")
        assert not secure_compare(None, "N1")

    def test_mask(self):
        """Secrets are masked in the middle."""
        assert mask_sensitive_data("abcdefgh") == "ab****gh"
        assert mask_sensitive_data("abc") == "***"


class TestErrors:
    """Test the login error taxonomy."""

    def test_records(self):
        """Errors convert to records with kind, stage and code."""
        record = NonceMismatch(details={"echoed": "absent"}).to_record()
        assert record.kind is ErrorKind.NONCE_MISMATCH
        assert record.stage.value == "nonce-check"
        assert record.error_code == "NONCE_MISMATCH"
        assert record.message == "Sign-in request could not be verified."

    def test_to_dict(self):
        """Errors serialize to an OAuth-style error document."""
        data = BackendError("Network error", "NETWORK_REQUEST_FAILED").to_dict()
        assert data["error"] == "NETWORK_REQUEST_FAILED"
        assert data["error_description"] == "Network error"
        assert data["kind"] == "backend"

    def test_defaults(self):
        """Errors with fixed wording provide it by default."""
        assert BusyError().message == "A sign-in is already in progress."
        assert AttemptTimeout().error_code == "ATTEMPT_TIMEOUT"
        assert UnsupportedMethodError(LoginMethod.PASSWORD).message == "Unsupported login method: password"

    def test_retryable(self):
        """Login errors allow a fresh attempt."""
        assert ProviderCancelled("cancelled").is_retryable()
