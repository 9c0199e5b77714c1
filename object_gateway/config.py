"""
Gateway configuration, read from environment variables.
Loaded once at startup into an immutable Settings and passed to the app; no module-level lookups.
"""
import os
from collections.abc import Mapping
from dataclasses import dataclass

from object_gateway.errors import ConfigurationError

DEFAULT_PORT = 8089
DEFAULT_HOST = "0.0.0.0"

# Upstream call deadline and shutdown grace period (seconds)
DEFAULT_REQUEST_TIMEOUT = 8
DEFAULT_SHUTDOWN_GRACE = 8

DEFAULT_LOG_FILE = "logs/app.log"

_REQUIRED = ("BASE_API_URL", "AUTH_SECRET_KEY")


@dataclass(frozen=True)
class Settings:
    base_api_url: str
    auth_secret_key: str
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    shutdown_grace: int = DEFAULT_SHUTDOWN_GRACE
    log_level: str = "INFO"
    log_file: str | None = DEFAULT_LOG_FILE


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from the environment (os.environ by default).
    Raises ConfigurationError naming every missing required variable.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in _REQUIRED if not env.get(name, "").strip()]
    if missing:
        raise ConfigurationError(f"missing required environment variables: {', '.join(missing)}")

    log_file = env.get("LOG_FILE", DEFAULT_LOG_FILE).strip() or None

    return Settings(
        base_api_url=env["BASE_API_URL"].strip().rstrip("/"),
        auth_secret_key=env["AUTH_SECRET_KEY"],
        port=_int_from_env(env, "PORT", DEFAULT_PORT),
        host=env.get("HOST", DEFAULT_HOST).strip() or DEFAULT_HOST,
        request_timeout=_int_from_env(env, "REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT),
        shutdown_grace=_int_from_env(env, "SHUTDOWN_GRACE_SECONDS", DEFAULT_SHUTDOWN_GRACE),
        log_level=env.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        log_file=log_file,
    )
