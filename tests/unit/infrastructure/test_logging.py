"""Unit tests for structured logging configuration.

Tests the structlog configuration and the JSON output format.
"""

import json
import os
from unittest.mock import patch

import pytest
import structlog
from structlog.testing import capture_logs

from chatdao.application.services.account_service import AccountService
from chatdao.application.services.governance_service import GovernanceService
from chatdao.domain.services.identity_derivation import IdentityDeriver
from chatdao.infrastructure.observability.correlation import set_correlation_id
from chatdao.infrastructure.observability.logging import (
    REDACTED,
    configure_structlog,
    get_logger_for_service,
    hex_encode_bytes,
    redact_key_material,
)
from chatdao.infrastructure.stubs import InMemoryEntityStore
from tests.helpers.fake_time_authority import FakeTimeAuthority


def _has_processor(name: str) -> bool:
    processors = structlog.get_config().get("processors", [])
    return any(name in type(p).__name__ for p in processors)


class TestConfigureStructlog:
    """Tests for configure_structlog function."""

    def test_configure_production_mode(self) -> None:
        """Production mode renders JSON."""
        configure_structlog(environment="production")
        assert _has_processor("JSONRenderer")

    def test_configure_development_mode(self) -> None:
        """Development mode renders to the console."""
        configure_structlog(environment="development")
        assert _has_processor("ConsoleRenderer")

    def test_configure_defaults_to_production(self) -> None:
        configure_structlog()
        assert _has_processor("JSONRenderer")


class TestLogOutput:
    """Tests for actual log output format."""

    @pytest.fixture(autouse=True)
    def setup_production_logging(self) -> None:
        configure_structlog(environment="production")

    def test_json_output_structure(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Output is one JSON object per line with level, timestamp and correlation id."""
        set_correlation_id("test-json-output")

        structlog.get_logger().info("governance_event", event_type="vote_cast", choice=1)

        output = capsys.readouterr().out.strip()
        if output:
            log_entry = json.loads(output)
            assert log_entry["event"] == "governance_event"
            assert log_entry["level"] == "info"
            assert "T" in log_entry["timestamp"]
            assert log_entry["correlation_id"] == "test-json-output"
            assert log_entry["event_type"] == "vote_cast"
            assert log_entry["choice"] == 1

        set_correlation_id("")

    def test_no_correlation_id_when_unset(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_correlation_id("")

        structlog.get_logger().info("no_correlation")

        output = capsys.readouterr().out.strip()
        if output:
            assert "correlation_id" not in json.loads(output)


class TestLogLevelConfiguration:
    """Tests for log level configuration."""

    def test_debug_filtered_by_default(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {}, clear=True):
            configure_structlog(environment="production")
            structlog.get_logger().debug("debug_hidden")

        assert "debug_hidden" not in capsys.readouterr().out

    def test_log_level_from_environment(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=False):
            configure_structlog(environment="production")
            structlog.get_logger().debug("debug_shown")

        assert "debug_shown" in capsys.readouterr().out
        configure_structlog(environment="production")

    def test_explicit_level_overrides_environment(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=False):
            configure_structlog(environment="production", log_level="WARNING")
            structlog.get_logger().info("info_hidden")

        assert "info_hidden" not in capsys.readouterr().out
        configure_structlog(environment="production")


class TestGetLoggerForService:
    """Tests for get_logger_for_service helper."""

    def test_logger_bound_with_service_name(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_structlog(environment="production")

        get_logger_for_service("GovernanceService").info("service_test")

        output = capsys.readouterr().out.strip()
        if output:
            log_entry = json.loads(output)
            assert log_entry["service"] == "GovernanceService"
            assert log_entry["component"] == "governance"

    def test_logger_bound_with_custom_component(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_structlog(environment="production")

        get_logger_for_service("AccountService", component="identity").info("component_test")

        output = capsys.readouterr().out.strip()
        if output:
            assert json.loads(output)["component"] == "identity"


class TestKeyProcessors:
    """Identities render as hex; key material never renders."""

    def test_bytes_values_become_hex(self) -> None:
        identity = bytes(range(32))

        result = hex_encode_bytes(None, "info", {"event": "vote_cast", "voter": identity, "choice": 1})

        assert result == {"event": "vote_cast", "voter": identity.hex(), "choice": 1}

    def test_key_material_is_redacted(self) -> None:
        result = redact_key_material(
            None, "info", {"event": "deriver_ready", "secret": "s3cret", "seed": b"\x00" * 32}
        )

        assert result["secret"] == REDACTED
        assert result["seed"] == REDACTED
        assert result["event"] == "deriver_ready"

    def test_json_output_never_contains_secret(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_structlog(environment="production")
        actor = b"\x07" * 32

        structlog.get_logger().info("governance_event", actor=actor, derivation_secret="hunter2")

        output = capsys.readouterr().out.strip()
        if output:
            log_entry = json.loads(output)
            assert log_entry["actor"] == actor.hex()
            assert log_entry["derivation_secret"] == REDACTED
            assert "hunter2" not in output


class TestServiceLoggers:
    """Services obtain their loggers from get_logger_for_service."""

    def test_mixin_uses_service_logger_helper(self, deriver: IdentityDeriver) -> None:
        with patch(
            "chatdao.application.services.base.get_logger_for_service",
            wraps=get_logger_for_service,
        ) as helper:
            AccountService(InMemoryEntityStore(), FakeTimeAuthority(), deriver)

        helper.assert_called_once_with("AccountService", "identity")

    @pytest.mark.asyncio
    async def test_service_events_carry_service_and_component(self, admin: bytes) -> None:
        with capture_logs() as logs:
            service = GovernanceService(InMemoryEntityStore(), FakeTimeAuthority())
            await service.initialize(admin)

        events = [e for e in logs if e["event"] == "governance_event"]
        assert events
        assert events[0]["service"] == "GovernanceService"
        assert events[0]["component"] == "governance"
