"""
Application Configuration - Process settings loaded from the environment.

Required:
    MYSQLROUTER_EXPORTER_URL: Router REST API base URL
    MYSQLROUTER_EXPORTER_USER: Basic-auth user
    MYSQLROUTER_EXPORTER_PASS: Basic-auth password

Optional:
    MYSQLROUTER_EXPORTER_PORT: Scrape listen port (default: 49152)
    MYSQLROUTER_EXPORTER_INTERVAL: Seconds between sampling cycles (default: 60)
    MYSQLROUTER_EXPORTER_TIMEOUT: Per-request HTTP timeout in seconds (default: 30)
    MYSQLROUTER_EXPORTER_TLS_VERIFY: Verify the router certificate (default: true)
    MYSQLROUTER_EXPORTER_FAILURE_POLICY: "abort" or "skip" (default: abort)
    MYSQLROUTER_EXPORTER_FETCH_RETRIES: Retries per fetch (default: 0)
    MYSQLROUTER_EXPORTER_EVICT_STALE: Drop series not seen in a cycle (default: false)
    LOG_LEVEL: Root log level (default: INFO)
    LOG_FORMAT: "json" or "text" (default: json)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .services.sampler import FailurePolicy

ENV_PREFIX = "MYSQLROUTER_EXPORTER_"
REQUIRED_VARIABLES = ("URL", "USER", "PASS")

DEFAULT_PORT = 49152
DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_TIMEOUT_SECONDS = 30.0
LISTEN_HOST = "0.0.0.0"


def _parse_bool(variable: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{variable} must be a boolean, got '{raw}'", [variable])


def _parse_number(variable: str, raw: str, cast: type, minimum: float) -> int | float:
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"{variable} must be a {cast.__name__}, got '{raw}'", [variable]
        ) from None
    if value < minimum:
        raise ConfigurationError(f"{variable} must be >= {minimum}, got {value}", [variable])
    return value


@dataclass
class ExporterConfig:
    """Exporter configuration."""

    url: str
    user: str
    password: str = field(repr=False)
    port: int = DEFAULT_PORT
    host: str = LISTEN_HOST
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    tls_verify: bool = True
    failure_policy: FailurePolicy = FailurePolicy.ABORT
    fetch_retries: int = 0
    evict_stale: bool = False
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExporterConfig":
        """
        Create configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigurationError: If a required variable is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: str = "") -> str:
            return env.get(f"{ENV_PREFIX}{name}", default).strip()

        missing = [f"{ENV_PREFIX}{name}" for name in REQUIRED_VARIABLES if not get(name)]
        if missing:
            raise ConfigurationError(
                "The environment is missing required variables: "
                + ", ".join(missing)
                + ". MYSQLROUTER_EXPORTER_URL, MYSQLROUTER_EXPORTER_USER and "
                "MYSQLROUTER_EXPORTER_PASS are required.",
                missing,
            )

        policy_raw = get("FAILURE_POLICY", FailurePolicy.ABORT.value).lower()
        try:
            policy = FailurePolicy(policy_raw)
        except ValueError:
            choices = ", ".join(p.value for p in FailurePolicy)
            raise ConfigurationError(
                f"{ENV_PREFIX}FAILURE_POLICY must be one of {choices}, got '{policy_raw}'",
                [f"{ENV_PREFIX}FAILURE_POLICY"],
            ) from None

        log_format = env.get("LOG_FORMAT", "json").strip().lower()
        if log_format not in ("json", "text"):
            raise ConfigurationError(
                f"LOG_FORMAT must be 'json' or 'text', got '{log_format}'", ["LOG_FORMAT"]
            )

        port = _parse_number(f"{ENV_PREFIX}PORT", get("PORT") or str(DEFAULT_PORT), int, 1)
        if port > 65535:
            raise ConfigurationError(
                f"{ENV_PREFIX}PORT must be <= 65535, got {port}", [f"{ENV_PREFIX}PORT"]
            )

        return cls(
            url=get("URL").rstrip("/"),
            user=get("USER"),
            password=get("PASS"),
            port=int(port),
            interval_seconds=float(
                _parse_number(
                    f"{ENV_PREFIX}INTERVAL",
                    get("INTERVAL") or str(DEFAULT_INTERVAL_SECONDS),
                    float,
                    0.1,
                )
            ),
            timeout_seconds=float(
                _parse_number(
                    f"{ENV_PREFIX}TIMEOUT",
                    get("TIMEOUT") or str(DEFAULT_TIMEOUT_SECONDS),
                    float,
                    0.1,
                )
            ),
            tls_verify=_parse_bool(f"{ENV_PREFIX}TLS_VERIFY", get("TLS_VERIFY") or "true"),
            failure_policy=policy,
            fetch_retries=int(
                _parse_number(f"{ENV_PREFIX}FETCH_RETRIES", get("FETCH_RETRIES") or "0", int, 0)
            ),
            evict_stale=_parse_bool(f"{ENV_PREFIX}EVICT_STALE", get("EVICT_STALE") or "false"),
            log_level=env.get("LOG_LEVEL", "INFO").strip().upper(),
            log_format=log_format,
        )

    @property
    def listen_address(self) -> str:
        return f"{self.host}:{self.port}"


def load_config(env_file: str | Path | None = None) -> ExporterConfig:
    """
    Load configuration, reading a .env file first if one exists.

    Real environment variables take precedence over the file.
    """
    load_dotenv(env_file, override=False)
    return ExporterConfig.from_env()
