"""Icon resolution — one PNG entry per artifact in the output archive.

Sources, first match wins:

1. An override image in the override directory named exactly like the icon
   entry (``my_tool_plugin.png`` for ``my_tool_plugin.apk``).
2. ``PLACEHOLDER_PNG`` when the artifact's icon is not a PNG (adaptive XML
   icons, vector drawables, or no icon at all).
3. The PNG referenced by the manifest, copied out of the artifact.

Images are copied verbatim; nothing is resized or recompressed.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import PurePosixPath

from taktool.config import ToolSettings, settings as default_settings
from taktool.core.errors import ArchiveOpenError, ArtifactIOError
from taktool.core.workspace import Workspace
from taktool.models.artifacts import ArtifactRecord

logger = logging.getLogger(__name__)

_STAGE = "icons"

# 1x1 fully transparent RGBA PNG.
PLACEHOLDER_PNG = bytes.fromhex(
    "89504e470d0a1a0a"
    "0000000d49484452000000010000000108060000001f15c489"
    "0000000a49444154789c63000100000500010d0a2db4"
    "0000000049454e44ae426082"
)


def icon_entry_name(record: ArtifactRecord, artifact_marker: str, icon_extension: str) -> str:
    """Archive entry name for a record's icon: the artifact name with a PNG extension."""
    name = PurePosixPath(record.artifact_path).name
    return name.removesuffix(artifact_marker) + icon_extension


class IconResolver:
    """Write the icon for each record into an output archive.

    Parameters
    ----------
    workspace:
        Workspace holding the artifacts and the override directory.
    override_icons:
        File names available in the override directory. When ``None`` the
        directory is listed once at construction.
    settings:
        Tool settings; defaults to the module-level singleton.
    """

    def __init__(
        self,
        workspace: Workspace,
        override_icons: set[str] | None = None,
        settings: ToolSettings | None = None,
    ) -> None:
        self._workspace = workspace
        self._settings = settings or default_settings
        if override_icons is None:
            override_icons = workspace.list_override_icons(
                self._settings.override_icon_dir, self._settings.icon_extension
            )
        self._override_icons = override_icons

    def write_icon(self, record: ArtifactRecord, archive: zipfile.ZipFile) -> ArtifactRecord:
        """Write the record's icon into ``archive``.

        Returns the record with ``icon_ref`` pointing at the archive entry.
        """
        entry_name = icon_entry_name(
            record, self._settings.artifact_marker, self._settings.icon_extension
        )

        try:
            if entry_name in self._override_icons:
                self._copy_override(entry_name, archive)
                logger.info(
                    "Using custom image for package %s: %s", record.display_name, entry_name
                )
            elif not record.icon_ref.lower().endswith(self._settings.icon_extension):
                logger.info(
                    "Package %s does not have a png icon file, using empty png",
                    record.display_name,
                )
                archive.writestr(entry_name, PLACEHOLDER_PNG)
            else:
                self._copy_embedded(record, entry_name, archive)
        except OSError as exc:
            raise ArtifactIOError(
                f"error writing icon {entry_name}: {exc}",
                stage=_STAGE,
                artifact=record.artifact_path,
            ) from exc

        return record.model_copy(update={"icon_ref": entry_name})

    def _copy_override(self, entry_name: str, archive: zipfile.ZipFile) -> None:
        source = self._workspace.path(self._settings.override_icon_dir) / entry_name
        with source.open("rb") as src, archive.open(entry_name, "w") as dst:
            shutil.copyfileobj(src, dst)

    def _copy_embedded(
        self, record: ArtifactRecord, entry_name: str, archive: zipfile.ZipFile
    ) -> None:
        try:
            with zipfile.ZipFile(self._workspace.path(record.artifact_path)) as artifact:
                try:
                    info = artifact.getinfo(record.icon_ref)
                except KeyError:
                    logger.warning(
                        "Icon %s not found in %s, using empty png",
                        record.icon_ref,
                        record.artifact_path,
                    )
                    archive.writestr(entry_name, PLACEHOLDER_PNG)
                    return
                with artifact.open(info) as src, archive.open(entry_name, "w") as dst:
                    shutil.copyfileobj(src, dst)
        except zipfile.BadZipFile as exc:
            raise ArchiveOpenError(
                f"error reading zip: {exc}", stage=_STAGE, artifact=record.artifact_path
            ) from exc
