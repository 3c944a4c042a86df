"""Plugins package assembly — builds ``product.infz`` from a workspace.

Pipeline
--------
1. List top-level files whose name contains the artifact marker (``.apk``).
2. Extract a record from each.
3. When renaming is enabled, drop older revisions and rename survivors to
   their canonical names.
4. Write one icon entry per record and the ``product.inf`` inventory into a
   temporary archive, then move it over ``product.infz``.

Any failure aborts the run; a previous ``product.infz`` is left as it was.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from taktool.config import ToolSettings, settings as default_settings
from taktool.core.errors import ArtifactIOError
from taktool.core.extractor import MetadataExtractor
from taktool.core.icons import IconResolver
from taktool.core.inventory import render_inventory, sort_records
from taktool.core.manifest_parser import ManifestParser
from taktool.core.naming import normalize_names
from taktool.core.reconciler import reconcile
from taktool.core.workspace import Workspace
from taktool.models.artifacts import ArtifactRecord

logger = logging.getLogger(__name__)


class PackageResult(BaseModel):
    """Outcome of a successful packaging run."""

    model_config = ConfigDict(frozen=True)

    package_path: Path
    records: list[ArtifactRecord]
    inventory: str


class PluginsPackager:
    """Assemble the plugins package for one workspace.

    Parameters
    ----------
    workspace:
        Directory holding the artifacts; the package is written there too.
    parser:
        Manifest parser passed to the extractor.
    settings:
        Tool settings; defaults to the module-level singleton.

    Examples
    --------
    >>> from taktool.core.workspace import Workspace
    >>> packager = PluginsPackager(Workspace("plugins/"))
    >>> # result = packager.build(rename=True)
    """

    def __init__(
        self,
        workspace: Workspace,
        parser: ManifestParser | None = None,
        settings: ToolSettings | None = None,
    ) -> None:
        self._workspace = workspace
        self._settings = settings or default_settings
        self._extractor = MetadataExtractor(workspace, parser=parser, settings=self._settings)

    def discover(self) -> list[str]:
        """Candidate artifact names in the workspace, sorted."""
        try:
            return self._workspace.list_files(self._settings.artifact_marker)
        except OSError as exc:
            raise ArtifactIOError(f"error reading directory: {exc}", stage="scan") from exc

    def collect(self, rename: bool = True) -> list[ArtifactRecord]:
        """Extract records and, if ``rename``, reconcile and rename them."""
        records = self._extractor.extract_all(self.discover())
        logger.info("Found %d artifact(s) in %s", len(records), self._workspace.root)
        if rename:
            records = reconcile(records, self._workspace)
            records = normalize_names(records, self._workspace)
        return records

    def build(self, rename: bool = True) -> PackageResult:
        """Run the whole pipeline and write the package.

        Parameters
        ----------
        rename:
            Remove older revisions and rename artifacts to canonical names.
        """
        records = self.collect(rename=rename)

        try:
            resolver = IconResolver(self._workspace, settings=self._settings)
        except OSError as exc:
            raise ArtifactIOError(
                f"error checking for custom images: {exc}", stage="icons"
            ) from exc

        package_name = self._settings.package_filename
        try:
            with self._workspace.open_archive(package_name) as archive:
                records = [resolver.write_icon(record, archive) for record in records]
                inventory = render_inventory(records)
                archive.writestr(self._settings.inventory_filename, inventory)
        except OSError as exc:
            raise ArtifactIOError(
                f"error writing package: {exc}", stage="package", artifact=package_name
            ) from exc

        logger.info("Package created: %s", package_name)
        return PackageResult(
            package_path=self._workspace.path(package_name),
            records=sort_records(records),
            inventory=inventory,
        )
