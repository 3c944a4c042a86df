"""Data package assembly — zips a whole directory with a mission manifest.

Unlike the plugins package there is no metadata extraction or conflict
resolution: every file under the workspace is stored as-is next to
``MANIFEST/manifest.xml``.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from taktool.config import ToolSettings, settings as default_settings
from taktool.core.errors import ArtifactIOError, DataPackageError
from taktool.core.workspace import Workspace
from taktool.models.data_package import MANIFEST_ENTRY, DataPackageManifest

logger = logging.getLogger(__name__)

_STAGE = "datapackage"
_DEFAULT_NAME = "default"


class DataPackageResult(BaseModel):
    """Outcome of a successful data package run."""

    model_config = ConfigDict(frozen=True)

    package_path: Path
    manifest: DataPackageManifest


def package_filename(name: str, extension: str) -> str:
    """``<name>.<extension>``, tolerating one leading dot on the extension."""
    return f"{name}.{extension.removeprefix('.')}"


def parse_uid(uid: str | None) -> str:
    """Validate a user-supplied UID, or generate a random one."""
    if not uid:
        return str(uuid.uuid4())
    try:
        return str(uuid.UUID(uid))
    except ValueError as exc:
        raise DataPackageError(f"error parsing UID {uid!r}: {exc}", stage=_STAGE) from exc


class DataPackager:
    """Build a data package from a workspace.

    Parameters
    ----------
    workspace:
        Directory to package; the output file is written into it.
    name:
        Package name. Defaults to the workspace directory name.
    uid:
        Package UID. Defaults to a random UUID.
    extension:
        Output file extension. Defaults to ``settings.data_package_extension``.
    on_receive_delete, on_receive_import:
        Flags copied into the manifest for the receiving client.
    """

    def __init__(
        self,
        workspace: Workspace,
        *,
        name: str | None = None,
        uid: str | None = None,
        extension: str | None = None,
        on_receive_delete: bool = False,
        on_receive_import: bool = False,
        settings: ToolSettings | None = None,
    ) -> None:
        self._workspace = workspace
        self._settings = settings or default_settings
        self._name = name or workspace.name or _DEFAULT_NAME
        self._uid = parse_uid(uid)
        self._extension = extension or self._settings.data_package_extension
        self._on_receive_delete = on_receive_delete
        self._on_receive_import = on_receive_import

    @property
    def filename(self) -> str:
        return package_filename(self._name, self._extension)

    def build_manifest(self) -> DataPackageManifest:
        """Describe every file in the workspace except the package itself."""
        try:
            files = self._workspace.walk_files()
        except OSError as exc:
            raise ArtifactIOError(f"error reading directory: {exc}", stage=_STAGE) from exc
        return DataPackageManifest(
            uid=self._uid,
            name=self._name,
            contents=[f for f in files if f != self.filename],
            on_receive_delete=self._on_receive_delete,
            on_receive_import=self._on_receive_import,
        )

    def build(self) -> DataPackageResult:
        manifest = self.build_manifest()
        current = ""
        try:
            with self._workspace.open_archive(self.filename) as archive:
                archive.writestr(MANIFEST_ENTRY, manifest.to_xml())
                for current in manifest.contents:
                    archive.write(self._workspace.path(current), arcname=current)
        except OSError as exc:
            raise ArtifactIOError(
                f"error writing data package: {exc}", stage=_STAGE, artifact=current
            ) from exc

        logger.info("Data package created: %s", self.filename)
        return DataPackageResult(
            package_path=self._workspace.path(self.filename), manifest=manifest
        )
