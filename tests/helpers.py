"""Fake transport responses and sinks shared by the tests."""

from pathlib import Path
from unittest.mock import MagicMock

from report_poller.artifacts import ArtifactSink


def make_response(status_code: int = 200, body=None, json_error: Exception | None = None) -> MagicMock:
    """Build a fake requests.Response."""
    r = MagicMock()
    r.status_code = status_code
    if json_error is not None:
        r.json.side_effect = json_error
    else:
        r.json.return_value = body if body is not None else {}
    return r


def as_outcome(outcome):
    """Turn a shorthand poll outcome into what the fake client returns or raises."""
    if isinstance(outcome, dict):
        return make_response(200, outcome)
    if isinstance(outcome, int):
        return make_response(outcome)
    return outcome


class RecordingSink(ArtifactSink):
    """Sink that remembers what it was asked to persist."""

    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    def persist(self, document: str, directory: str, filename: str) -> Path:
        self.calls.append((document, directory, filename))
        if self.error is not None:
            raise self.error
        return Path(directory) / filename
