"""Manifest parsing — turns an APK into a ``ManifestDocument``.

The extractor depends only on the ``ManifestParser`` protocol. The default
implementation decodes the binary ``AndroidManifest.xml`` with pyaxmlparser
and resolves resource references (``@7F0B0001``) against the APK's resource
table, so labels and icon paths come out as readable values.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pyaxmlparser import APK

from taktool.core.errors import ArchiveOpenError, ManifestParseError, ResourceTableError
from taktool.models.manifest import ManifestDocument, ManifestElement

logger = logging.getLogger(__name__)

_STAGE = "parse"


@runtime_checkable
class ManifestParser(Protocol):
    """Anything that can produce a manifest document for an artifact path.

    Implementations raise ``ArchiveOpenError``, ``ResourceTableError`` or
    ``ManifestParseError``.
    """

    def parse(self, path: Path) -> ManifestDocument: ...


def _local_name(qualified: str) -> str:
    """Strip an lxml ``{namespace}`` prefix from an attribute name."""
    return qualified.rsplit("}", 1)[-1]


class ApkManifestParser:
    """Decode APK manifests with pyaxmlparser."""

    def parse(self, path: Path) -> ManifestDocument:
        artifact = Path(path).name
        try:
            if not zipfile.is_zipfile(path):
                raise zipfile.BadZipFile("File is not a zip file")
            apk = APK(str(path))
        except (zipfile.BadZipFile, OSError) as exc:
            raise ArchiveOpenError(
                f"failed to open the APK: {exc}", stage=_STAGE, artifact=artifact
            ) from exc

        root = apk.get_android_manifest_xml()
        if root is None or not apk.is_valid_APK():
            raise ManifestParseError(
                "failed to decode AndroidManifest.xml", stage=_STAGE, artifact=artifact
            )

        resolver = _ResourceResolver(apk, artifact)
        elements: list[ManifestElement] = []
        for node in root.iter():
            if not isinstance(node.tag, str):
                continue
            attributes = {
                _local_name(key): resolver.resolve(value)
                for key, value in node.attrib.items()
            }
            elements.append(ManifestElement(tag=node.tag, attributes=attributes))

        logger.debug("Parsed %d manifest elements from %s", len(elements), artifact)
        return ManifestDocument(elements=tuple(elements))


class _ResourceResolver:
    """Resolve ``@<hex id>`` attribute values through the resource table.

    The table is loaded on first use so manifests without references never
    touch it.
    """

    def __init__(self, apk: APK, artifact: str) -> None:
        self._apk = apk
        self._artifact = artifact
        self._table: Any = None

    def _resources(self) -> Any:
        if self._table is None:
            try:
                self._table = self._apk.get_android_resources()
            except Exception as exc:
                raise ResourceTableError(
                    f"failed to parse resources: {exc}",
                    stage=_STAGE,
                    artifact=self._artifact,
                ) from exc
            if self._table is None:
                raise ResourceTableError(
                    "APK has no resource table", stage=_STAGE, artifact=self._artifact
                )
        return self._table

    def resolve(self, value: str) -> str:
        if not value.startswith("@") or value.startswith("@android:"):
            return value
        try:
            res_id = int(value[1:], 16)
        except ValueError:
            return value

        try:
            configs = self._resources().get_resolved_res_configs(res_id)
        except ResourceTableError:
            raise
        except Exception as exc:
            raise ResourceTableError(
                f"failed to resolve resource {value}: {exc}",
                stage=_STAGE,
                artifact=self._artifact,
            ) from exc

        for _config, resolved in configs:
            if resolved:
                return str(resolved)
        return value
