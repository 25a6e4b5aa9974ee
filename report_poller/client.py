"""
Report service client
HTTP transport for the report status endpoint
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT, REPORT_STATUS_ENDPOINT
from .exceptions import ReportServiceError, ReportServiceTimeoutError


@dataclass(frozen=True)
class ReportCredentials:
    """Account credentials sent to the report service as HTTP basic auth"""
    username: str
    access_key: str

    def __repr__(self) -> str:
        return f"ReportCredentials(username={self.username!r}, access_key='***')"


class ReportServiceClient:
    """
    Report service client

    Usage:
        client = ReportServiceClient(
            server_url='https://reports.example.com',
            credentials=ReportCredentials('user', 'access-key')
        )

        response = client.post_report_status({'requestType': 'POLL', ...})
    """

    def __init__(
        self,
        server_url: str,
        credentials: Optional[ReportCredentials] = None,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
        endpoint: str = REPORT_STATUS_ENDPOINT
    ):
        self.server_url = server_url.rstrip('/')
        self.credentials = credentials
        self.timeout = timeout
        self.endpoint = endpoint
        self.session = requests.Session()
        self.session.headers['Accept'] = 'application/json'

        if credentials:
            self.session.auth = (credentials.username, credentials.access_key)

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict] = None
    ) -> requests.Response:
        """Make HTTP request to the service.

        The response is returned whatever its status code; only failures
        to get a response at all are raised.
        """
        url = f'{self.server_url}{path}'

        try:
            return self.session.request(
                method,
                url,
                json=json,
                timeout=self.timeout
            )
        except requests.Timeout:
            raise ReportServiceTimeoutError(f'Request to {url} timed out after {self.timeout}s')
        except requests.RequestException as e:
            raise ReportServiceError(f'Request to {url} failed: {e}')

    def post_report_status(self, payload: Dict[str, Any]) -> requests.Response:
        """Ask the service for the current report status of a build.

        Args:
            payload: Poll request body (see poller.build_poll_request)

        Returns:
            The raw HTTP response. Callers classify the status code.

        Raises:
            ReportServiceTimeoutError: If the request timed out
            ReportServiceError: On any other network failure
        """
        return self._request('POST', self.endpoint, json=payload)

    def close(self):
        """Close the session"""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
