"""Metadata extraction — one ``ArtifactRecord`` per artifact file.

The manifest document is folded into first-write-wins attribute maps for the
three element kinds that matter:

* ``manifest`` — ``package``, ``versionName``, ``versionCode``
* ``application`` — ``label``, ``description``, ``icon``
* ``meta-data`` — keyed by ``name``; ``plugin-api`` gives the minimum host
  version and ``app_desc`` is a fallback description.

Every value is sanitized so it can be written as one field of one inventory
line.
"""

from __future__ import annotations

import logging

from taktool.config import ToolSettings, settings as default_settings
from taktool.core.errors import ArtifactIOError, ManifestFormatError
from taktool.core.hasher import sha256_file
from taktool.core.manifest_parser import ApkManifestParser, ManifestParser
from taktool.core.workspace import Workspace
from taktool.models.artifacts import ArtifactKind, ArtifactRecord
from taktool.models.manifest import ManifestDocument

logger = logging.getLogger(__name__)

_STAGE = "extract"

_MANIFEST_KEYS = ("package", "versionName", "versionCode")
_APPLICATION_KEYS = ("label", "description", "icon")
_HOST_VERSION_KEY = "plugin-api"
_DESCRIPTION_KEY = "app_desc"


def sanitize_value(value: str) -> str:
    """Cut a value at its first line break and drop every comma."""
    for newline in ("\n", "\r"):
        value = value.split(newline, 1)[0]
    return value.replace(",", "")


def derive_kind(identity: str, suffix: str = ".plugin") -> ArtifactKind:
    """``PLUGIN`` if the identity ends with ``suffix``, otherwise ``APP``.

    Identities shorter than the suffix are simply apps.
    """
    if suffix and len(identity) >= len(suffix) and identity.endswith(suffix):
        return ArtifactKind.PLUGIN
    return ArtifactKind.APP


def _collect(target: dict[str, str], attributes: dict[str, str], keys: tuple[str, ...]) -> None:
    for key in keys:
        if key in attributes and key not in target:
            target[key] = sanitize_value(attributes[key])


def fold_manifest(document: ManifestDocument) -> dict[str, str]:
    """Reduce a manifest document to the attributes used in a record.

    The first occurrence of each attribute or metadata key wins.
    """
    manifest: dict[str, str] = {}
    application: dict[str, str] = {}
    metadata: dict[str, str] = {}

    for element in document.iter_elements("manifest"):
        _collect(manifest, element.attributes, _MANIFEST_KEYS)
    for element in document.iter_elements("application"):
        _collect(application, element.attributes, _APPLICATION_KEYS)
    for element in document.iter_elements("meta-data"):
        name = element.attributes.get("name")
        if name in (_HOST_VERSION_KEY, _DESCRIPTION_KEY) and name not in metadata:
            metadata[name] = sanitize_value(element.attributes.get("value", ""))

    return {
        "identity_name": manifest.get("package", ""),
        "version_string": manifest.get("versionName", ""),
        "revision": manifest.get("versionCode", ""),
        "display_name": application.get("label", ""),
        "description": application.get("description") or metadata.get(_DESCRIPTION_KEY, ""),
        "icon_ref": application.get("icon", ""),
        "min_host_version": metadata.get(_HOST_VERSION_KEY, ""),
    }


class MetadataExtractor:
    """Build artifact records from files in a workspace.

    Parameters
    ----------
    workspace:
        Workspace the artifact paths are relative to.
    parser:
        Manifest parser; defaults to ``ApkManifestParser``.
    settings:
        Tool settings; defaults to the module-level singleton.
    """

    def __init__(
        self,
        workspace: Workspace,
        parser: ManifestParser | None = None,
        settings: ToolSettings | None = None,
    ) -> None:
        self._workspace = workspace
        self._parser = parser or ApkManifestParser()
        self._settings = settings or default_settings

    def extract(self, artifact_path: str) -> ArtifactRecord:
        """Extract the record for one artifact.

        Raises
        ------
        ManifestParseError, ResourceTableError
            Propagated from the manifest parser.
        ManifestFormatError
            The manifest has no package identity, or the file name cannot be
            written into the inventory unchanged.
        ArtifactIOError
            The file could not be stat'ed or read.
        """
        if sanitize_value(artifact_path) != artifact_path:
            raise ManifestFormatError(
                "file name contains a comma or line break",
                stage=_STAGE,
                artifact=artifact_path,
            )

        document = self._parser.parse(self._workspace.path(artifact_path))
        fields = fold_manifest(document)
        if not fields["identity_name"]:
            raise ManifestFormatError(
                "manifest has no package identity", stage=_STAGE, artifact=artifact_path
            )

        try:
            size = self._workspace.size(artifact_path)
            digest = sha256_file(self._workspace.path(artifact_path))
        except OSError as exc:
            raise ArtifactIOError(
                f"error reading file: {exc}", stage=_STAGE, artifact=artifact_path
            ) from exc

        record = ArtifactRecord(
            platform=self._settings.platform,
            kind=derive_kind(fields["identity_name"], self._settings.plugin_suffix),
            artifact_path=artifact_path,
            content_digest=digest,
            min_platform_version=self._settings.min_platform_version,
            size_bytes=size,
            **fields,
        )
        logger.debug(
            "Extracted %s (%s) revision %s from %s",
            record.identity_name,
            record.kind.value,
            record.revision,
            artifact_path,
        )
        return record

    def extract_all(self, artifact_paths: list[str]) -> list[ArtifactRecord]:
        """Extract records in order; the first failure aborts."""
        return [self.extract(path) for path in artifact_paths]
