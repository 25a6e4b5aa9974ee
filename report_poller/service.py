"""Shared report service client and config-driven factories."""

from pathlib import Path
from typing import Optional

from .action import TestReportAction
from .artifacts import ArtifactSink, FileArtifactSink
from .client import ReportCredentials, ReportServiceClient
from .config import get_credentials_config, get_report_config, get_server_config
from .poller import ReportPoller
from .state import BuildIdentity

# Global client instance (lazy-initialized)
_client: Optional[ReportServiceClient] = None


def get_client() -> ReportServiceClient:
    """Get or initialize the report service client.

    Returns:
        ReportServiceClient instance

    Raises:
        RuntimeError: If the server URL is not configured
    """
    global _client

    if _client is not None:
        return _client

    server = get_server_config()
    _client = ReportServiceClient(
        server_url=server["url"],
        credentials=get_credentials(),
        timeout=server["timeout"],
        endpoint=server["report_endpoint"],
    )
    return _client


def reset_client() -> None:
    """Close and forget the shared client (config changes, tests)."""
    global _client

    if _client is not None:
        _client.close()
    _client = None


def get_credentials() -> ReportCredentials | None:
    """Build credentials from config, or None when they are incomplete."""
    credentials = get_credentials_config()
    if not credentials["username"] or not credentials["access_key"]:
        return None
    return ReportCredentials(credentials["username"], credentials["access_key"])


def create_poller(
    build: BuildIdentity,
    workspace: Path | None = None,
    archive_dir: Path | None = None,
    sink: ArtifactSink | None = None,
    client: ReportServiceClient | None = None,
) -> ReportPoller:
    """Create a poller for a build using the configured report settings.

    Args:
        build: Build whose report is fetched
        workspace: Build workspace; enables a FileArtifactSink when no sink is given
        archive_dir: Archive directory for the FileArtifactSink
        sink: Explicit artifact sink, overrides workspace/archive_dir
        client: Explicit client, defaults to the shared one
    """
    report = get_report_config()
    if sink is None and workspace is not None:
        sink = FileArtifactSink(workspace, archive_dir)

    return ReportPoller(
        client or get_client(),
        build,
        sink=sink,
        requesting_ci=report["requesting_ci"],
        user_timeout=report["user_timeout"],
        max_retries=report["max_retries"],
        artifact_dir=report["artifact_dir"],
        artifact_filename=report["artifact_filename"],
    )


def create_action(build: BuildIdentity, host_build=None, **kwargs) -> TestReportAction:
    """Create the host adapter for a build (kwargs go to create_poller)."""
    return TestReportAction(create_poller(build, **kwargs), host_build)
