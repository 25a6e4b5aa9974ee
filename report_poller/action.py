"""Host adapter exposing a build's report to a UI.

The host creates one TestReportAction per build and renders it
repeatedly; each render drives at most one poll.
"""

from typing import Any

from .poller import ReportPoller

REPORT_DISPLAY_NAME = "Test Report"
REPORT_ICON_FILE_NAME = "report-poller-logo.png"
REPORT_URL_NAME = "test-report"


class TestReportAction:
    """Forwards the poller's accessors and carries host metadata.

    Args:
        poller: Poller owning the build's report record
        build: Opaque host build handle
    """

    # Keep pytest from collecting this as a test class
    __test__ = False

    def __init__(self, poller: ReportPoller, build: Any = None):
        self.poller = poller
        self.build = build

    @property
    def display_name(self) -> str:
        return REPORT_DISPLAY_NAME

    @property
    def icon_file_name(self) -> str:
        return REPORT_ICON_FILE_NAME

    @property
    def url_name(self) -> str:
        return REPORT_URL_NAME

    def get_report_html(self) -> str | None:
        return self.poller.get_report_html()

    def get_report_style(self) -> str:
        return self.poller.get_report_style()

    def is_report_in_progress(self) -> bool:
        return self.poller.is_report_in_progress()

    def is_report_failed(self) -> bool:
        return self.poller.is_report_failed()

    def report_retry_required(self) -> bool:
        return self.poller.report_retry_required()

    def is_user_rate_limited(self) -> bool:
        return self.poller.is_user_rate_limited()

    def is_report_available(self) -> bool:
        return self.poller.is_report_available()

    def is_report_test_available(self) -> bool:
        return self.poller.is_report_test_available()

    def report_has_status(self) -> bool:
        return self.poller.report_has_status()

    def render(self) -> dict[str, Any]:
        """Snapshot of everything one page render needs.

        Polls at most once: the style is read from the record after the
        html accessor has already triggered the fetch.
        """
        html = self.get_report_html()
        return {
            "state": self.poller.state.name,
            "html": html,
            "style": self.poller.record.style,
            "available": self.is_report_available(),
            "test_available": self.is_report_test_available(),
            "in_progress": self.is_report_in_progress(),
            "failed": self.is_report_failed(),
            "retry_required": self.report_retry_required(),
            "rate_limited": self.is_user_rate_limited(),
            "has_status": self.report_has_status(),
        }
