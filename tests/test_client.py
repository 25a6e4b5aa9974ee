"""Tests for ReportServiceClient."""

from unittest.mock import MagicMock

import pytest
import requests

from report_poller.client import ReportCredentials, ReportServiceClient
from report_poller.exceptions import ReportServiceError, ReportServiceTimeoutError


def _fake_request(captured: dict, status_code: int = 200):
    def fake_request(method: str, url: str, **kwargs: object) -> MagicMock:
        captured.update(kwargs, method=method, url=url)
        r = MagicMock()
        r.status_code = status_code
        r.json.return_value = {"reportStatus": "IN_PROGRESS"}
        return r

    return fake_request


class TestReportServiceClient:
    def test_posts_payload_to_report_endpoint(self) -> None:
        client = ReportServiceClient(server_url="http://example.com/", timeout=12)
        captured = {}
        client.session.request = _fake_request(captured)  # type: ignore[method-assign]

        response = client.post_report_status({"requestType": "POLL"})

        assert response.status_code == 200
        assert captured["method"] == "POST"
        assert captured["url"] == "http://example.com/api/v1/builds/buildReport"
        assert captured["json"] == {"requestType": "POLL"}
        assert captured["timeout"] == 12

    def test_custom_endpoint(self) -> None:
        client = ReportServiceClient(server_url="http://example.com", endpoint="/status")
        captured = {}
        client.session.request = _fake_request(captured)  # type: ignore[method-assign]

        client.post_report_status({})

        assert captured["url"] == "http://example.com/status"

    def test_error_status_returned_not_raised(self) -> None:
        client = ReportServiceClient(server_url="http://example.com")
        client.session.request = _fake_request({}, status_code=429)  # type: ignore[method-assign]

        assert client.post_report_status({}).status_code == 429

    def test_basic_auth_from_credentials(self) -> None:
        client = ReportServiceClient(
            server_url="http://example.com",
            credentials=ReportCredentials("alice", "s3cret"),
        )
        assert client.session.auth == ("alice", "s3cret")

    def test_no_auth_without_credentials(self) -> None:
        client = ReportServiceClient(server_url="http://example.com")
        assert client.session.auth is None

    def test_timeout_raises_timeout_error(self) -> None:
        client = ReportServiceClient(server_url="http://example.com", timeout=5)
        client.session.request = MagicMock(side_effect=requests.Timeout())  # type: ignore[method-assign]

        with pytest.raises(ReportServiceTimeoutError, match="timed out after 5s"):
            client.post_report_status({})

    def test_connection_error_raises_service_error(self) -> None:
        client = ReportServiceClient(server_url="http://example.com")
        client.session.request = MagicMock(  # type: ignore[method-assign]
            side_effect=requests.ConnectionError("refused")
        )

        with pytest.raises(ReportServiceError, match="refused"):
            client.post_report_status({})

    def test_context_manager_closes_session(self) -> None:
        with ReportServiceClient(server_url="http://example.com") as client:
            client.session.close = MagicMock()  # type: ignore[method-assign]
        client.session.close.assert_called_once()


class TestReportCredentials:
    def test_repr_hides_access_key(self) -> None:
        assert "s3cret" not in repr(ReportCredentials("alice", "s3cret"))


class TestExceptions:
    def test_timeout_is_a_service_error(self) -> None:
        assert issubclass(ReportServiceTimeoutError, ReportServiceError)

    def test_service_error_carries_only_message(self) -> None:
        error = ReportServiceError("Request to http://example.com failed: refused")
        assert error.args == ("Request to http://example.com failed: refused",)
        assert not hasattr(error, "status_code")
