"""
Tests for exporter configuration.
"""

import pytest

from mysqlrouter_exporter.application.config import (
    DEFAULT_PORT,
    ExporterConfig,
    load_config,
)
from mysqlrouter_exporter.application.exceptions import ApplicationException, ConfigurationError
from mysqlrouter_exporter.application.services import FailurePolicy

REQUIRED = {
    "MYSQLROUTER_EXPORTER_URL": "https://router.example:8443/",
    "MYSQLROUTER_EXPORTER_USER": "monitor",
    "MYSQLROUTER_EXPORTER_PASS": "s3cret",
}


def env(**overrides) -> dict[str, str]:
    values = dict(REQUIRED)
    values.update({f"MYSQLROUTER_EXPORTER_{key}": value for key, value in overrides.items()})
    return values


class TestExporterConfig:
    """Test ExporterConfig.from_env."""

    def test_defaults(self):
        """Test default values when only required variables are set."""
        config = ExporterConfig.from_env(env())

        assert config.url == "https://router.example:8443"
        assert config.user == "monitor"
        assert config.password == "s3cret"
        assert config.port == DEFAULT_PORT == 49152
        assert config.host == "0.0.0.0"
        assert config.interval_seconds == 60.0
        assert config.timeout_seconds == 30.0
        assert config.tls_verify is True
        assert config.failure_policy is FailurePolicy.ABORT
        assert config.fetch_retries == 0
        assert config.evict_stale is False
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.listen_address == "0.0.0.0:49152"

    def test_password_not_in_repr(self):
        """Test that the password is kept out of repr()."""
        assert "s3cret" not in repr(ExporterConfig.from_env(env()))

    def test_overrides(self):
        """Test every optional variable."""
        values = env(
            PORT="9100",
            INTERVAL="15",
            TIMEOUT="2.5",
            TLS_VERIFY="no",
            FAILURE_POLICY="SKIP",
            FETCH_RETRIES="3",
            EVICT_STALE="true",
        )
        values["LOG_LEVEL"] = "debug"
        values["LOG_FORMAT"] = "text"

        config = ExporterConfig.from_env(values)

        assert config.port == 9100
        assert config.interval_seconds == 15.0
        assert config.timeout_seconds == 2.5
        assert config.tls_verify is False
        assert config.failure_policy is FailurePolicy.SKIP
        assert config.fetch_retries == 3
        assert config.evict_stale is True
        assert config.log_level == "DEBUG"
        assert config.log_format == "text"

    def test_missing_required_lists_all(self):
        """Test that every missing variable is named in one error."""
        with pytest.raises(ConfigurationError) as exc_info:
            ExporterConfig.from_env({"MYSQLROUTER_EXPORTER_USER": "monitor"})

        error = exc_info.value
        assert error.variables == ["MYSQLROUTER_EXPORTER_URL", "MYSQLROUTER_EXPORTER_PASS"]
        assert "MYSQLROUTER_EXPORTER_URL" in str(error)
        assert "MYSQLROUTER_EXPORTER_PASS" in str(error)
        assert isinstance(error, ApplicationException)

    def test_blank_required_is_missing(self):
        """Test that whitespace-only values count as missing."""
        with pytest.raises(ConfigurationError) as exc_info:
            ExporterConfig.from_env(env(PASS="   "))

        assert exc_info.value.variables == ["MYSQLROUTER_EXPORTER_PASS"]

    @pytest.mark.parametrize(
        "name, value",
        [
            ("PORT", "http"),
            ("PORT", "0"),
            ("PORT", "70000"),
            ("INTERVAL", "0"),
            ("INTERVAL", "soon"),
            ("TIMEOUT", "-1"),
            ("TLS_VERIFY", "maybe"),
            ("FAILURE_POLICY", "retry"),
            ("FETCH_RETRIES", "-1"),
            ("EVICT_STALE", "2"),
        ],
    )
    def test_invalid_values(self, name, value):
        """Test that invalid optional values are rejected with the variable named."""
        with pytest.raises(ConfigurationError) as exc_info:
            ExporterConfig.from_env(env(**{name: value}))

        assert exc_info.value.variables == [f"MYSQLROUTER_EXPORTER_{name}"]

    def test_invalid_log_format(self):
        """Test that LOG_FORMAT must be json or text."""
        values = env()
        values["LOG_FORMAT"] = "xml"

        with pytest.raises(ConfigurationError, match="LOG_FORMAT"):
            ExporterConfig.from_env(values)


class TestLoadConfig:
    """Test load_config with dotenv files."""

    def test_reads_env_file(self, clean_env, tmp_path):
        """Test that variables come from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "MYSQLROUTER_EXPORTER_URL=http://localhost:8443\n"
            "MYSQLROUTER_EXPORTER_USER=monitor\n"
            "MYSQLROUTER_EXPORTER_PASS=from-file\n"
            "MYSQLROUTER_EXPORTER_PORT=9200\n"
        )

        config = load_config(env_file)

        assert config.url == "http://localhost:8443"
        assert config.password == "from-file"
        assert config.port == 9200

    def test_environment_wins_over_file(self, clean_env, tmp_path):
        """Test that real environment variables are not overridden."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "MYSQLROUTER_EXPORTER_URL=http://localhost:8443\n"
            "MYSQLROUTER_EXPORTER_USER=monitor\n"
            "MYSQLROUTER_EXPORTER_PASS=from-file\n"
        )
        clean_env.setenv("MYSQLROUTER_EXPORTER_PASS", "from-env")

        config = load_config(env_file)

        assert config.password == "from-env"

    def test_missing_everything(self, clean_env, tmp_path):
        """Test that an empty environment is a configuration error."""
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.env")
