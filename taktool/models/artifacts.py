"""Artifact record models — one record per APK in the workspace."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ArtifactKind(str, Enum):
    """Whether an artifact is a standalone app or a host plugin."""

    APP = "app"
    PLUGIN = "plugin"


class ArtifactRecord(BaseModel):
    """Identifying metadata extracted from one artifact file.

    Records are immutable. Stages that change a record (renaming, icon
    resolution) return a copy via ``model_copy(update=...)``.

    Examples
    --------
    >>> record = ArtifactRecord(
    ...     kind=ArtifactKind.PLUGIN,
    ...     identity_name="com.example.plugin",
    ...     display_name="Example",
    ...     revision="12",
    ...     artifact_path="example.apk",
    ... )
    >>> record.conflict_key
    ('com.example.plugin', <ArtifactKind.PLUGIN: 'plugin'>)
    >>> record.revision_number
    12
    """

    model_config = ConfigDict(frozen=True)

    platform: str = "Android"
    kind: ArtifactKind = ArtifactKind.APP
    identity_name: str
    display_name: str = ""
    version_string: str = ""
    revision: str = ""
    artifact_path: str
    icon_ref: str = ""
    description: str = ""
    content_digest: str = ""
    min_platform_version: int = 1
    min_host_version: str = ""
    size_bytes: int = 0

    @property
    def conflict_key(self) -> tuple[str, ArtifactKind]:
        """Two records with the same key are revisions of one plugin."""
        return (self.identity_name, self.kind)

    @property
    def revision_number(self) -> int:
        """Revision as an integer; unparsable revisions sort lowest (0)."""
        try:
            return int(self.revision)
        except ValueError:
            return 0
