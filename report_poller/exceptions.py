"""
Report poller exceptions
"""


class ReportPollerError(Exception):
    """Base exception for all report poller errors"""

    pass


class ReportServiceError(ReportPollerError):
    """Raised when a request to the report service cannot be completed"""

    pass


class ReportServiceTimeoutError(ReportServiceError):
    """Raised when the report service does not answer within the timeout"""

    pass


class ArtifactError(ReportPollerError):
    """Raised when the report artifact cannot be written or archived"""

    pass
