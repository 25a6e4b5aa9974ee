"""Shared test fixtures for report poller tests."""

from unittest.mock import MagicMock

import pytest

from helpers import RecordingSink, as_outcome
from report_poller.client import ReportServiceClient
from report_poller.service import reset_client
from report_poller.state import BuildIdentity


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config at an empty temp location and clear env overrides."""
    config_path = tmp_path / ".report-poller" / "config.yaml"
    monkeypatch.setenv("REPORT_POLLER_CONFIG", str(config_path))
    for var in ("REPORT_POLLER_SERVER_URL", "REPORT_POLLER_USERNAME", "REPORT_POLLER_ACCESS_KEY"):
        monkeypatch.delenv(var, raising=False)
    reset_client()
    yield config_path
    reset_client()


@pytest.fixture
def build():
    return BuildIdentity(name="nightly-regression", started_at="2026-10-19T08:00:00Z")


@pytest.fixture
def client_with():
    """Factory for a fake client answering polls in order.

    Each outcome is a dict (200 with that JSON body), an int (bare status
    code), an exception instance (raised) or a prepared response.
    """

    def _factory(*outcomes):
        client = MagicMock(spec=ReportServiceClient)
        client.post_report_status.side_effect = [as_outcome(o) for o in outcomes]
        return client

    return _factory


@pytest.fixture
def sink():
    return RecordingSink()
