"""Report polling.

poll_report() performs exactly one request against the report service and
folds the outcome into a ReportRecord. ReportPoller wraps a record for one
build and polls lazily: every accessor that returns report content polls
again until a terminal state is reached. There is no timer; the caller
decides how often to ask.
"""

import logging
from typing import Any

from .artifacts import ArtifactSink, build_report_document
from .client import ReportServiceClient
from .config import (
    DEFAULT_ARTIFACT_DIR,
    DEFAULT_ARTIFACT_FILENAME,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUESTING_CI,
    DEFAULT_USER_TIMEOUT,
)
from .exceptions import ReportServiceError
from .state import (
    AVAILABLE_STATES,
    STATUS_STATES,
    BuildIdentity,
    PollState,
    ReportRecord,
    record_http_error,
    record_transport_failure,
    resolve_remote_status,
)

logger = logging.getLogger(__name__)

NO_REPORT_HTML = "<h1>No Report Found</h1>"
REPORT_FORMATS = ["richHtml", "basicHtml"]
POLL_REQUEST_TYPE = "POLL"


def build_poll_request(
    build: BuildIdentity,
    requesting_ci: str = DEFAULT_REQUESTING_CI,
    user_timeout: str = DEFAULT_USER_TIMEOUT,
) -> dict[str, Any]:
    """Build the JSON body of a report status poll."""
    return {
        "buildStartedAt": build.started_at,
        "originalBuildName": build.name,
        "requestingCi": requesting_ci,
        "reportFormat": list(REPORT_FORMATS),
        "requestType": POLL_REQUEST_TYPE,
        "userTimeout": str(user_timeout),
    }


def _report_field(report: dict[str, Any] | None, key: str, default: str) -> str:
    if report is None:
        return default
    value = report.get(key)
    return default if value is None else str(value)


def _parse_status_body(response) -> tuple[str | None, dict[str, Any] | None]:
    """Extract (reportStatus, report) from a 2xx response.

    Raises:
        ValueError: If the body is not a JSON object
    """
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError(f"Expected a JSON object, got {type(body).__name__}")

    report = body.get("report")
    if not isinstance(report, dict):
        report = None
    status = body.get("reportStatus")
    return (str(status) if status is not None else None), report


def apply_report_success(
    record: ReportRecord,
    report: dict[str, Any] | None,
    sink: ArtifactSink | None = None,
    artifact_dir: str = DEFAULT_ARTIFACT_DIR,
    artifact_filename: str = DEFAULT_ARTIFACT_FILENAME,
) -> None:
    """Store report content on the record and persist the standalone document.

    A missing report object yields the "No Report Found" placeholder.
    Persistence failures are logged and dropped.
    """
    record.state = PollState.SUCCESS_REPORT
    record.html = _report_field(report, "richHtml", NO_REPORT_HTML)
    record.style = _report_field(report, "richCss", "")

    if sink is None:
        return

    document = build_report_document(_report_field(report, "basicHtml", NO_REPORT_HTML))
    try:
        sink.persist(document, artifact_dir, artifact_filename)
    except Exception as e:
        logger.warning("Could not persist report artifact: %s", e)


def poll_report(
    record: ReportRecord,
    client: ReportServiceClient,
    payload: dict[str, Any],
    sink: ArtifactSink | None = None,
    artifact_dir: str = DEFAULT_ARTIFACT_DIR,
    artifact_filename: str = DEFAULT_ARTIFACT_FILENAME,
) -> PollState:
    """Poll the report service once and update the record.

    Never raises for network failures, error responses or malformed
    bodies; every outcome is expressed as the record's new state. A record
    whose retry budget is spent stays ReportFailed and is not polled.

    Returns:
        The record's state after the poll
    """
    if record.remaining_retries < 0:
        record.state = PollState.REPORT_FAILED
        return record.state

    previous = record.state
    logger.debug("Polling report for %s (state=%s)", payload.get("originalBuildName"), previous.name)

    try:
        response = client.post_report_status(payload)
        if 200 <= response.status_code < 300:
            report_status, report = _parse_status_body(response)
            classify, new_state = resolve_remote_status(report_status)
            if classify:
                apply_report_success(record, report, sink, artifact_dir, artifact_filename)
            record.state = new_state
            if new_state is PollState.REPORT_FAILED:
                logger.warning("Unrecognised reportStatus %r", report_status)
        else:
            record_http_error(record, response.status_code)
            logger.debug("Report service answered HTTP %s", response.status_code)
    except (ReportServiceError, ValueError) as e:
        record_transport_failure(record)
        if record.state is PollState.REPORT_FAILED:
            logger.warning("Report poll failed, retries exhausted; giving up: %s", e)
        elif record.state is PollState.RETRY_REPORT:
            logger.warning("Report poll failed (%s retries left): %s", record.remaining_retries, e)

    if record.state is not previous:
        logger.info("Report state %s -> %s", previous.name, record.state.name)
    return record.state


class ReportPoller:
    """Lazily polled report for one build.

    Args:
        client: Transport to the report service
        build: Build whose report is fetched
        sink: Where the standalone report document is persisted (optional)
        requesting_ci: Integration identifier sent with every poll
        user_timeout: Advisory server-side timeout, in seconds
        max_retries: Transport failures tolerated before the report fails
        artifact_dir: Directory name handed to the sink
        artifact_filename: File name handed to the sink
    """

    def __init__(
        self,
        client: ReportServiceClient,
        build: BuildIdentity,
        sink: ArtifactSink | None = None,
        requesting_ci: str = DEFAULT_REQUESTING_CI,
        user_timeout: str = DEFAULT_USER_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        artifact_dir: str = DEFAULT_ARTIFACT_DIR,
        artifact_filename: str = DEFAULT_ARTIFACT_FILENAME,
    ):
        self.client = client
        self.build = build
        self.sink = sink
        self.requesting_ci = requesting_ci
        self.user_timeout = user_timeout
        self.artifact_dir = artifact_dir
        self.artifact_filename = artifact_filename
        self.record = ReportRecord(remaining_retries=max_retries)

    @property
    def state(self) -> PollState:
        return self.record.state

    def poll(self) -> PollState:
        """Poll once, even from a terminal state. A spent retry budget keeps the report failed."""
        payload = build_poll_request(self.build, self.requesting_ci, self.user_timeout)
        return poll_report(
            self.record,
            self.client,
            payload,
            self.sink,
            self.artifact_dir,
            self.artifact_filename,
        )

    def ensure_fetched(self) -> None:
        if self.record.needs_poll():
            self.poll()

    def get_report_html(self) -> str | None:
        self.ensure_fetched()
        return self.record.html

    def get_report_style(self) -> str:
        self.ensure_fetched()
        return self.record.style

    def is_report_in_progress(self) -> bool:
        return self.record.state is PollState.REPORT_IN_PROGRESS

    def is_report_failed(self) -> bool:
        return self.record.state is PollState.REPORT_FAILED

    def report_retry_required(self) -> bool:
        return self.record.state is PollState.RETRY_REPORT

    def is_user_rate_limited(self) -> bool:
        return self.record.state is PollState.RATE_LIMITED

    def is_report_available(self) -> bool:
        return self.record.state in AVAILABLE_STATES

    def is_report_test_available(self) -> bool:
        return self.record.state is PollState.TEST_AVAILABLE

    def report_has_status(self) -> bool:
        return self.record.state in STATUS_STATES
