"""Canonical artifact file names.

``"My Tool"`` + ``plugin`` becomes ``my_tool_plugin.apk``. Names that already
end in their kind (``"Foo Plugin"`` + ``plugin``) do not get it twice.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from taktool.core.errors import ArtifactIOError
from taktool.core.workspace import Workspace
from taktool.models.artifacts import ArtifactRecord

logger = logging.getLogger(__name__)

_STAGE = "rename"

_DOUBLED_SUFFIXES = {
    "_plugin_plugin": "_plugin",
    "_app_app": "_app",
}


_SEPARATORS = (" ", ".", "/", "\\")


def normalize_name(name: str) -> str:
    """Lowercase, turn spaces, dots and path separators into underscores,
    collapse doubled kinds.

    Applying it twice gives the same result as applying it once.
    """
    name = name.lower()
    for separator in _SEPARATORS:
        name = name.replace(separator, "_")
    for doubled, single in _DOUBLED_SUFFIXES.items():
        while doubled in name:
            name = name.replace(doubled, single)
    return name


def canonical_filename(record: ArtifactRecord) -> str:
    """Canonical file name for a record, keeping its current extension."""
    current = PurePosixPath(record.artifact_path)
    stem = normalize_name(f"{record.display_name}_{record.kind.value}")
    return str(current.with_name(stem + current.suffix))


def normalize_names(records: list[ArtifactRecord], workspace: Workspace) -> list[ArtifactRecord]:
    """Rename each artifact to its canonical name and update its record.

    A stale file already at the canonical name (e.g. from an earlier run) is
    replaced. A name that another artifact of this run already has, or will
    get, is rejected before anything is renamed.

    Raises
    ------
    ArtifactIOError
        A rename failed or two artifacts would share a file name.
    """
    targets = [canonical_filename(record) for record in records]
    owners: dict[str, str] = {record.artifact_path: record.artifact_path for record in records}
    for record, target in zip(records, targets):
        owner = owners.get(target)
        if owner is not None and owner != record.artifact_path:
            raise ArtifactIOError(
                f"canonical name {target} collides with {owner}",
                stage=_STAGE,
                artifact=record.artifact_path,
            )
        owners[target] = record.artifact_path

    renamed: list[ArtifactRecord] = []
    for record, target in zip(records, targets):
        if target == record.artifact_path:
            renamed.append(record)
            continue

        try:
            workspace.rename(record.artifact_path, target)
        except (OSError, ValueError) as exc:
            raise ArtifactIOError(
                f"error renaming to {target}: {exc}",
                stage=_STAGE,
                artifact=record.artifact_path,
            ) from exc
        logger.info("Renamed %s -> %s", record.artifact_path, target)
        renamed.append(record.model_copy(update={"artifact_path": target}))
    return renamed
