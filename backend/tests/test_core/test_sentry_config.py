"""Tests for Sentry SDK configuration."""

from typing import Any
from unittest.mock import patch

from core.sentry_config import _before_send, _traces_sampler, init_sentry


class TestBeforeSend:
    """Tests for credential scrubbing in _before_send."""

    def test_scrubs_personal_fields_but_keeps_user_id(self) -> None:
        event: dict[str, Any] = {
            "user": {
                "id": "123",
                "email": "user@example.com",
                "username": "testuser",
                "ip_address": "192.168.1.100",
            }
        }
        result = _before_send(event, {})  # type: ignore[arg-type]
        assert result is not None
        assert result["user"] == {"id": "123"}

    def test_filters_authorization_header_and_cookies(self) -> None:
        event: dict[str, Any] = {
            "request": {
                "headers": {"Authorization": "Bearer secret", "Accept": "*/*"},
                "cookies": {"session": "abc"},
            }
        }
        result = _before_send(event, {})  # type: ignore[arg-type]
        assert result is not None
        assert result["request"]["headers"]["Authorization"] == "[Filtered]"
        assert result["request"]["headers"]["Accept"] == "*/*"
        assert "cookies" not in result["request"]


class TestTracesSampler:
    def test_health_checks_are_not_traced(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/api/health"}}) == 0.0

    def test_follows_sampled_parent(self) -> None:
        assert _traces_sampler({"parent_sampled": True}) == 1.0

    def test_uses_configured_rate(self) -> None:
        from models.config import settings

        rate = _traces_sampler({"asgi_scope": {"path": "/api/ideas/"}})
        assert rate == settings.SENTRY_TRACES_SAMPLE_RATE


class TestInitSentry:
    def test_disabled_without_dsn(self) -> None:
        with patch("core.sentry_config.settings") as mock_settings:
            mock_settings.SENTRY_DSN = ""
            assert init_sentry() is False

    def test_initializes_with_dsn(self) -> None:
        with patch("core.sentry_config.settings") as mock_settings, patch(
            "core.sentry_config.sentry_sdk.init"
        ) as mock_init:
            mock_settings.SENTRY_DSN = "https://key@sentry.example.com/1"
            mock_settings.ENVIRONMENT = "test"
            assert init_sentry() is True
            assert mock_init.call_args.kwargs["send_default_pii"] is False
