"""Configuration loading and constants for the report poller."""

import os
from pathlib import Path
from typing import Any

import yaml


# ---------------------------------------------------------------------------
# Report service contract
# ---------------------------------------------------------------------------

REPORT_STATUS_ENDPOINT = "/api/v1/builds/buildReport"

# Identifies this integration to the report service (requestingCi)
DEFAULT_REQUESTING_CI = "jenkins"

# Advisory server-side wait, sent as a string
DEFAULT_USER_TIMEOUT = "120"

# Transport failures tolerated before giving up
DEFAULT_MAX_RETRIES = 3

# Seconds before the HTTP transport gives up on a single request
DEFAULT_REQUEST_TIMEOUT = 30

# Where the standalone report document is written, relative to the workspace
DEFAULT_ARTIFACT_DIR = "test-report-artifacts"
DEFAULT_ARTIFACT_FILENAME = "test-report.html"

DEFAULT_SERVER_CONFIG = {
    "url": None,
    "report_endpoint": REPORT_STATUS_ENDPOINT,
    "timeout": DEFAULT_REQUEST_TIMEOUT,
}

DEFAULT_REPORT_CONFIG = {
    "requesting_ci": DEFAULT_REQUESTING_CI,
    "user_timeout": DEFAULT_USER_TIMEOUT,
    "max_retries": DEFAULT_MAX_RETRIES,
    "artifact_dir": DEFAULT_ARTIFACT_DIR,
    "artifact_filename": DEFAULT_ARTIFACT_FILENAME,
}


def get_config_path() -> Path:
    """Get the path of the poller's config.yaml.

    Can be overridden via REPORT_POLLER_CONFIG environment variable (used by tests).
    """
    env_override = os.environ.get("REPORT_POLLER_CONFIG")
    if env_override:
        return Path(env_override)
    return Path.cwd() / ".report-poller" / "config.yaml"


def load_config() -> dict[str, Any]:
    """Load config.yaml.

    Returns:
        Parsed YAML config dict, or empty dict if not found
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise RuntimeError(f"Invalid config at {config_path}: expected a mapping")
    return config


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    section = config.get(name) or {}
    return section if isinstance(section, dict) else {}


def get_server_config() -> dict[str, Any]:
    """Get report service connection settings.

    The server URL is resolved in this order:
    1. REPORT_POLLER_SERVER_URL env var (useful for tests and CI)
    2. config.yaml server.url

    Raises:
        RuntimeError: If no server URL is configured
    """
    server = _section(load_config(), "server")
    settings = {
        "url": os.environ.get("REPORT_POLLER_SERVER_URL") or server.get("url"),
        "report_endpoint": server.get("report_endpoint", DEFAULT_SERVER_CONFIG["report_endpoint"]),
        "timeout": int(server.get("timeout", DEFAULT_SERVER_CONFIG["timeout"])),
    }

    if not settings["url"]:
        raise RuntimeError(
            f"Report service URL not configured. Set REPORT_POLLER_SERVER_URL "
            f"or server.url in {get_config_path()}"
        )
    return settings


def get_credentials_config() -> dict[str, str | None]:
    """Get report service credentials, env vars taking precedence over config.yaml."""
    credentials = _section(load_config(), "credentials")
    return {
        "username": os.getenv("REPORT_POLLER_USERNAME") or credentials.get("username"),
        "access_key": os.getenv("REPORT_POLLER_ACCESS_KEY") or credentials.get("access_key"),
    }


def get_report_config() -> dict[str, Any]:
    """Get polling and artifact settings from config or use defaults."""
    report = _section(load_config(), "report")
    return {
        "requesting_ci": report.get("requesting_ci", DEFAULT_REPORT_CONFIG["requesting_ci"]),
        # The service expects the timeout as a string
        "user_timeout": str(report.get("user_timeout", DEFAULT_REPORT_CONFIG["user_timeout"])),
        "max_retries": int(report.get("max_retries", DEFAULT_REPORT_CONFIG["max_retries"])),
        "artifact_dir": report.get("artifact_dir", DEFAULT_REPORT_CONFIG["artifact_dir"]),
        "artifact_filename": report.get("artifact_filename", DEFAULT_REPORT_CONFIG["artifact_filename"]),
    }
