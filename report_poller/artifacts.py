"""Persistence of the standalone report document.

The poller hands every successfully classified report to an ArtifactSink.
FileArtifactSink writes it under the build workspace and, when an archive
directory is configured, keeps a copy there as the build's artifact:

    <workspace>/test-report-artifacts/test-report.html
    <archive_dir>/test-report-artifacts/test-report.html
"""

import logging
import shutil
from pathlib import Path

from .exceptions import ArtifactError

logger = logging.getLogger(__name__)

DOCUMENT_PREFIX = "<!DOCTYPE html> <html><head></head>"
DOCUMENT_SUFFIX = "</html>"


def build_report_document(basic_html: str) -> str:
    """Wrap the basic report HTML in a minimal standalone document."""
    return f"{DOCUMENT_PREFIX}{basic_html}{DOCUMENT_SUFFIX}"


class ArtifactSink:
    """Destination for the report document.

    Subclasses implement persist(); a failure may raise anything, the
    poller never lets it reach its caller.
    """

    def persist(self, document: str, directory: str, filename: str) -> Path:
        raise NotImplementedError


class FileArtifactSink(ArtifactSink):
    """Write the report into the workspace and optionally archive a copy.

    Args:
        workspace: Build workspace the report directory is created in
        archive_dir: Artifact store the written file is copied to (optional)
    """

    def __init__(self, workspace: Path, archive_dir: Path | None = None):
        self.workspace = Path(workspace)
        self.archive_dir = Path(archive_dir) if archive_dir is not None else None

    def persist(self, document: str, directory: str, filename: str) -> Path:
        artifacts_dir = self.workspace / directory
        artifacts_dir.mkdir(parents=True, exist_ok=True)

        html_file = artifacts_dir / filename
        html_file.write_text(document, encoding="utf-8")
        logger.debug("Wrote report document to %s", html_file)

        if self.archive_dir is not None:
            self._archive(html_file, Path(directory) / filename)

        return html_file

    def _archive(self, html_file: Path, relative_path: Path) -> Path:
        """Copy the written document into the archive directory."""
        if html_file.stat().st_size == 0:
            raise ArtifactError(f"Refusing to archive empty report: {html_file}")

        target = self.archive_dir / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(html_file, target)
        logger.debug("Archived report document to %s", target)
        return target
