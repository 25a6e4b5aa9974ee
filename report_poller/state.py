"""Report polling state machine.

A ReportRecord is the single piece of state carried between polls. It is
owned by one build and mutated only through the transition functions in
this module, which the poller applies after each request.

State transitions:

    Unset / ReportInProgress / RetryReport / RateLimited / TestAvailable
        --COMPLETED, NOT_AVAILABLE-->  SuccessReport     (terminal)
        --TEST_AVAILABLE-->            TestAvailable
        --IN_PROGRESS-->               ReportInProgress
        --unknown reportStatus-->      ReportFailed      (terminal)
        --HTTP 429-->                  RateLimited
        --other non-2xx-->             ReportFailed
        --transport failure-->         RetryReport, or ReportFailed once
                                       the retry budget is exhausted

TestAvailable is sticky against transport failures and non-2xx responses:
a partial report that already exists is never regressed by them.
"""

from dataclasses import dataclass
from enum import Enum

from .config import DEFAULT_MAX_RETRIES


class PollState(Enum):
    UNSET = "UNSET"
    SUCCESS_REPORT = "SUCCESS_REPORT"
    REPORT_IN_PROGRESS = "REPORT_IN_PROGRESS"
    REPORT_FAILED = "REPORT_FAILED"
    RETRY_REPORT = "RETRY_REPORT"
    RATE_LIMITED = "RATE_LIMIT"
    TEST_AVAILABLE = "TEST_AVAILABLE"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


# No further polling once one of these is reached
TERMINAL_STATES = frozenset({PollState.SUCCESS_REPORT, PollState.REPORT_FAILED})

# States in which report content can be displayed
AVAILABLE_STATES = frozenset({PollState.SUCCESS_REPORT, PollState.TEST_AVAILABLE})

# States the UI shows a status message for
STATUS_STATES = frozenset({PollState.REPORT_IN_PROGRESS, PollState.REPORT_FAILED})

RATE_LIMIT_STATUS_CODE = 429

# Remote reportStatus -> (run success classification, resulting state)
REMOTE_STATUS_TRANSITIONS: dict[str, tuple[bool, PollState]] = {
    "COMPLETED": (True, PollState.SUCCESS_REPORT),
    "NOT_AVAILABLE": (True, PollState.SUCCESS_REPORT),
    "TEST_AVAILABLE": (True, PollState.TEST_AVAILABLE),
    "IN_PROGRESS": (False, PollState.REPORT_IN_PROGRESS),
}

# Any status the service has not documented
UNKNOWN_STATUS_TRANSITION = (False, PollState.REPORT_FAILED)


@dataclass(frozen=True)
class BuildIdentity:
    """The build whose report is being polled."""
    name: str
    started_at: str


@dataclass
class ReportRecord:
    """Report content and polling state for one build."""
    html: str | None = None
    style: str = ""
    state: PollState = PollState.UNSET
    remaining_retries: int = DEFAULT_MAX_RETRIES

    def needs_poll(self) -> bool:
        """True while the report has neither succeeded nor failed for good."""
        return not self.state.is_terminal


def resolve_remote_status(report_status: str | None) -> tuple[bool, PollState]:
    """Look up the transition for a reportStatus value (case-insensitive)."""
    key = (report_status or "").upper()
    return REMOTE_STATUS_TRANSITIONS.get(key, UNKNOWN_STATUS_TRANSITION)


def record_transport_failure(record: ReportRecord) -> PollState:
    """Apply a network/timeout failure to the record.

    Each failure spends one retry. A negative budget fails the report.
    """
    if record.state is PollState.TEST_AVAILABLE:
        return record.state

    record.remaining_retries -= 1
    if record.remaining_retries >= 0:
        record.state = PollState.RETRY_REPORT
    else:
        record.state = PollState.REPORT_FAILED
    return record.state


def record_http_error(record: ReportRecord, status_code: int) -> PollState:
    """Apply a non-2xx response to the record."""
    if record.state is PollState.TEST_AVAILABLE:
        return record.state

    if status_code == RATE_LIMIT_STATUS_CODE:
        record.state = PollState.RATE_LIMITED
    else:
        record.state = PollState.REPORT_FAILED
    return record.state
