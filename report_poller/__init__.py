"""
Report poller

Fetch an asynchronously generated test report by polling the report
service, classify each response into a PollState, and persist the final
HTML artifact.

Example:
    >>> from report_poller import BuildIdentity, ReportPoller, ReportServiceClient
    >>>
    >>> client = ReportServiceClient(server_url='https://reports.example.com')
    >>> poller = ReportPoller(client, BuildIdentity(name='nightly', started_at='2026-10-19T08:00:00Z'))
    >>>
    >>> # Each access polls until a terminal state is reached
    >>> html = poller.get_report_html()
    >>> poller.is_report_available()
"""

__version__ = "0.1.0"

from .client import ReportCredentials, ReportServiceClient
from .exceptions import (
    ArtifactError,
    ReportPollerError,
    ReportServiceError,
    ReportServiceTimeoutError,
)
from .poller import ReportPoller, poll_report
from .state import BuildIdentity, PollState, ReportRecord

__all__ = [
    "ArtifactError",
    "BuildIdentity",
    "PollState",
    "ReportCredentials",
    "ReportPoller",
    "ReportPollerError",
    "ReportRecord",
    "ReportServiceClient",
    "ReportServiceError",
    "ReportServiceTimeoutError",
    "poll_report",
]
