"""Integration tests for configuration module."""

import warnings

import pytest

from jobboard.config import (
    AppConfig,
    ConfigurationError,
    LogFormat,
    load_config,
    parse_config_dict,
)
from jobboard.config.duration import (
    DurationParseError,
    describe_seconds,
    parse_duration,
    validate_duration_range,
)
from jobboard.config.environment import DEFAULT_DATABASE_URL, load_environment_config
from jobboard.config.validators import check_for_warnings

VALID_CONFIG = """
server:
  host: 127.0.0.1
  port: 8080
  cors_origins:
    - "https://board.example.com"
    - "  "
auth:
  algorithm: hs512
  token_ttl: "12h"
feed:
  enabled: true
  source: "https://feed.example.com/jobs.json"
  interval: "PT15M"
  request_timeout: 10
logging:
  level: DEBUG
  format: json
"""


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_load_valid_config(self, tmp_path, mock_env_vars):
        app_config, env_config = load_config(write_config(tmp_path, VALID_CONFIG))

        assert app_config.server.host == "127.0.0.1"
        assert app_config.server.port == 8080
        assert app_config.server.cors_origins == ["https://board.example.com"]

        assert app_config.auth.algorithm == "HS512"
        assert app_config.auth.token_ttl_seconds == 12 * 3600

        assert app_config.feed.enabled is True
        assert app_config.feed.interval_seconds == 900
        assert app_config.feed.request_timeout == 10

        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"

        assert env_config.jwt_secret == "test-secret-0123456789"

    def test_defaults_without_file(self, tmp_path, monkeypatch, mock_env_vars):
        """With no file in the working directory the built-in defaults apply."""
        monkeypatch.chdir(tmp_path)
        app_config, _ = load_config()

        assert app_config.server.port == 3000
        assert app_config.auth.token_ttl_seconds == 7 * 86400
        assert app_config.feed.enabled is False
        assert app_config.logging.format == LogFormat.KEY_VALUE.value

    def test_default_location_is_picked_up(self, tmp_path, monkeypatch, mock_env_vars):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("server:\n  port: 9000\n")

        app_config, _ = load_config()

        assert app_config.server.port == 9000

    def test_empty_file_means_defaults(self, tmp_path, mock_env_vars):
        app_config, _ = load_config(write_config(tmp_path, ""))
        assert app_config == AppConfig()

    def test_config_file_not_found(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path / "nonexistent.yaml")

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_yaml_syntax(self, tmp_path, mock_env_vars):
        path = write_config(tmp_path, "server:\n  host: 'unterminated\n    port: 1")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert "parse" in str(exc_info.value).lower()

    def test_top_level_must_be_a_mapping(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(write_config(tmp_path, "- one\n- two\n"))


class TestConfigurationValidation:
    """Test configuration validation rules."""

    def test_enabled_feed_needs_source(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config_dict({"feed": {"enabled": True}})

        assert "feed.source is required" in str(exc_info.value)

    def test_blank_source_counts_as_missing(self):
        with pytest.raises(ConfigurationError):
            parse_config_dict({"feed": {"enabled": True, "source": "   "}})

    def test_feed_interval_too_short(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config_dict({"feed": {"interval": "30s"}})

        assert "too short" in str(exc_info.value)

    def test_unsupported_algorithm(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config_dict({"auth": {"algorithm": "RS256"}})

        assert "Unsupported algorithm" in str(exc_info.value)

    def test_bad_token_ttl(self):
        with pytest.raises(ConfigurationError):
            parse_config_dict({"auth": {"token_ttl": "forever"}})

    def test_port_out_of_range(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config_dict({"server": {"port": 70000}})

        assert "server -> port" in str(exc_info.value)

    def test_wrong_type_is_reported(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config_dict({"feed": {"enabled": "sometimes"}})

        assert "feed -> enabled" in str(exc_info.value)

    def test_errors_carry_suggestions(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config_dict({"logging": {"level": "LOUD"}})

        error = exc_info.value
        assert error.errors
        assert error.suggestions
        assert "Suggestions:" in str(error)


class TestConfigurationWarnings:
    """Valid but risky settings produce warnings, not errors."""

    def test_disabled_feed_with_source(self):
        messages = check_for_warnings({"feed": {"enabled": False, "source": "feed.json"}})
        assert any("will not run" in message for message in messages)

    def test_short_interval_and_long_ttl(self):
        messages = check_for_warnings({"feed": {"interval": "2m"}, "auth": {"token_ttl": "60d"}})
        assert len(messages) == 2

    def test_wildcard_cors(self):
        messages = check_for_warnings({"server": {"cors_origins": ["*"]}})
        assert messages == ["server.cors_origins contains '*'; any site may call the API"]

    def test_clean_config_has_no_warnings(self):
        assert check_for_warnings({}) == []

    def test_warnings_are_emitted_on_parse(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            parse_config_dict({"server": {"cors_origins": ["*"]}})

        assert any("cors_origins" in str(w.message) for w in caught)


class TestDurationParsing:
    """Test duration parsing utilities."""

    def test_parse_human_readable(self):
        assert parse_duration("30s") == 30
        assert parse_duration("15m") == 900
        assert parse_duration("2h") == 7200
        assert parse_duration("7d") == 604800

    def test_parse_human_readable_combined(self):
        assert parse_duration("1h30m") == 5400
        assert parse_duration("1d 12h") == 129600

    def test_parse_iso8601(self):
        assert parse_duration("PT15M") == 900
        assert parse_duration("PT1H30M") == 5400
        assert parse_duration("P1D") == 86400
        assert parse_duration("p1dt1h") == 90000

    @pytest.mark.parametrize("value", ["invalid", "15x", "m5", "", "   ", "0m", "PT", "P1H"])
    def test_parse_invalid(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_validate_duration_range(self):
        validate_duration_range(900, min_seconds=300, max_seconds=86400, label="Interval")

        with pytest.raises(DurationParseError, match="too short: 2 minutes"):
            validate_duration_range(120, min_seconds=300, max_seconds=86400, label="Interval")
        with pytest.raises(DurationParseError, match="too long: 2 days"):
            validate_duration_range(172800, min_seconds=300, max_seconds=86400, label="Interval")

    def test_describe_seconds(self):
        assert describe_seconds(1) == "1 second"
        assert describe_seconds(60) == "1 minute"
        assert describe_seconds(7200) == "2 hours"


class TestEnvironmentConfig:
    """Test environment variable loading."""

    def test_load_valid_environment_config(self, mock_env_vars):
        env_config = load_environment_config()

        assert env_config.jwt_secret == "test-secret-0123456789"
        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.environment == "local"
        assert env_config.log_level is None

    def test_missing_secret(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "JWT_SECRET" in str(exc_info.value)

    def test_short_secret(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "short")

        with pytest.raises(ConfigurationError, match="Environment variable validation failed"):
            load_environment_config()

    def test_invalid_log_level(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "Invalid LOG_LEVEL" in str(exc_info.value)

    def test_empty_database_url(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "  ")

        with pytest.raises(ConfigurationError, match="validation failed"):
            load_environment_config()

    def test_optional_env_vars(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp/board.db")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "staging")

        env_config = load_environment_config()

        assert env_config.database_url == "sqlite:///tmp/board.db"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "staging"


# Pytest fixtures
@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock required environment variables for testing."""
    monkeypatch.setenv("JWT_SECRET", "test-secret-0123456789")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)
