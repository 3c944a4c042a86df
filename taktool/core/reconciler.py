"""Identity reconciliation — keep one revision per plugin, delete the rest.

Records are grouped by conflict identity ``(identity_name, kind)``. Within
each group the record with the highest integer revision survives; on equal
revisions the record encountered later wins. Superseded artifact files are
deleted from the workspace. Deletions are not rolled back if a later one
fails.
"""

from __future__ import annotations

import logging

from taktool.core.errors import ArtifactIOError
from taktool.core.workspace import Workspace
from taktool.models.artifacts import ArtifactKind, ArtifactRecord

logger = logging.getLogger(__name__)

_STAGE = "reconcile"


def group_by_identity(
    records: list[ArtifactRecord],
) -> dict[tuple[str, ArtifactKind], list[ArtifactRecord]]:
    """Group records by conflict identity, preserving encounter order."""
    groups: dict[tuple[str, ArtifactKind], list[ArtifactRecord]] = {}
    for record in records:
        groups.setdefault(record.conflict_key, []).append(record)
    return groups


def select_survivor(group: list[ArtifactRecord]) -> ArtifactRecord:
    """Highest revision wins; ties go to the later record."""
    survivor = group[0]
    for candidate in group[1:]:
        if candidate.revision_number >= survivor.revision_number:
            survivor = candidate
    return survivor


def reconcile(records: list[ArtifactRecord], workspace: Workspace) -> list[ArtifactRecord]:
    """Return one record per conflict identity, deleting superseded files.

    Survivors are returned in the order their group was first seen.

    Raises
    ------
    ArtifactIOError
        A superseded file could not be deleted.
    """
    survivors: list[ArtifactRecord] = []
    for group in group_by_identity(records).values():
        survivor = select_survivor(group)
        for record in group:
            if record is survivor:
                continue
            logger.info(
                "Removing older version: %s revision %s (%s), keeping revision %s",
                record.display_name or record.identity_name,
                record.revision,
                record.artifact_path,
                survivor.revision,
            )
            try:
                workspace.remove(record.artifact_path)
            except OSError as exc:
                raise ArtifactIOError(
                    f"error removing older version: {exc}",
                    stage=_STAGE,
                    artifact=record.artifact_path,
                ) from exc
        survivors.append(survivor)
    return survivors
