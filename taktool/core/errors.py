"""Failure taxonomy for the packaging pipeline.

Every error carries the pipeline stage and, where known, the artifact that
failed, so the CLI can report exactly where a run aborted.
"""

from __future__ import annotations


class TaktoolError(RuntimeError):
    """Base class for all packaging failures.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    stage:
        Pipeline stage that failed (e.g. ``"extract"``, ``"reconcile"``).
    artifact:
        Workspace-relative path of the artifact involved, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str = "",
        artifact: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.artifact = artifact

    def __str__(self) -> str:
        prefix = f"[{self.stage}] " if self.stage else ""
        subject = f"{self.artifact}: " if self.artifact else ""
        return f"{prefix}{subject}{self.message}"


class ArtifactIOError(TaktoolError):
    """File open/read/write/stat/rename/delete failed."""


class ManifestParseError(TaktoolError):
    """The artifact manifest could not be decoded."""


class ArchiveOpenError(ManifestParseError):
    """The artifact could not be opened as a zip archive."""


class ResourceTableError(TaktoolError):
    """The artifact's resource table could not be read."""


class ManifestFormatError(TaktoolError):
    """A required manifest attribute is missing or malformed."""


class DataPackageError(TaktoolError):
    """Invalid data-package input (e.g. a malformed UID)."""
