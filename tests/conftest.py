"""Shared test fixtures for taktool."""

from __future__ import annotations

import struct
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, NamedTuple

import pytest

from taktool.config import ToolSettings
from taktool.core.workspace import Workspace
from taktool.models.artifacts import ArtifactKind, ArtifactRecord
from taktool.models.manifest import ManifestDocument, ManifestElement

# A real PNG signature followed by filler, enough to tell icons apart.
ICON_BYTES = b"\x89PNG\r\n\x1a\n" + b"embedded-icon"


class FakeManifestParser:
    """Manifest parser that serves prepared documents by file name."""

    def __init__(self) -> None:
        self.documents: dict[str, ManifestDocument | Exception] = {}
        self.calls: list[str] = []

    def add(self, filename: str, document: ManifestDocument | Exception) -> None:
        self.documents[filename] = document

    def parse(self, path: Path) -> ManifestDocument:
        name = Path(path).name
        self.calls.append(name)
        entry = self.documents[name]
        if isinstance(entry, Exception):
            raise entry
        return entry


def build_document(
    package: str,
    label: str = "",
    version_name: str = "1.0",
    version_code: str = "1",
    icon: str = "",
    description: str | None = None,
    metadata: dict[str, str] | None = None,
) -> ManifestDocument:
    manifest_attrs = {"versionCode": version_code, "versionName": version_name}
    if package:
        manifest_attrs["package"] = package
    app_attrs = {"label": label}
    if icon:
        app_attrs["icon"] = icon
    if description is not None:
        app_attrs["description"] = description

    elements = [
        ManifestElement(tag="manifest", attributes=manifest_attrs),
        ManifestElement(tag="uses-sdk", attributes={"minSdkVersion": "21"}),
        ManifestElement(tag="application", attributes=app_attrs),
    ]
    for name, value in (metadata or {}).items():
        elements.append(
            ManifestElement(tag="meta-data", attributes={"name": name, "value": value})
        )
    return ManifestDocument(elements=tuple(elements))


# ---------------------------------------------------------------------------
# Binary APK encoding
#
# Just enough of Android's binary XML and resource table formats for the
# pyaxmlparser-backed parser to read a real manifest and resolve references.
# ---------------------------------------------------------------------------

ANDROID_NS = "http://schemas.android.com/apk/res/android"
PACKAGE_ID = 0x7F

_RES_STRING_POOL = 0x0001
_RES_TABLE = 0x0002
_RES_XML = 0x0003
_XML_START_NAMESPACE = 0x0100
_XML_END_NAMESPACE = 0x0101
_XML_START_ELEMENT = 0x0102
_XML_END_ELEMENT = 0x0103
_TABLE_PACKAGE = 0x0200
_TABLE_TYPE = 0x0201
_TABLE_TYPE_SPEC = 0x0202

_TYPE_REFERENCE = 0x01
_TYPE_STRING = 0x03
_TYPE_INT_DEC = 0x10
_NO_INDEX = 0xFFFFFFFF


class ResRef(int):
    """Attribute value referencing a resource id, e.g. ``@7F010000``."""


# First entry of the first (string) and second (drawable) resource types.
LABEL_REF = ResRef(PACKAGE_ID << 24 | 0x010000)
ICON_REF = ResRef(PACKAGE_ID << 24 | 0x020000)
SYSTEM_THEME_REF = ResRef(0x01030009)


class XmlNode(NamedTuple):
    tag: str
    attributes: dict[str, Any]
    children: tuple[XmlNode, ...] = ()
    comment: str | None = None


def _chunk(chunk_type: int, header: bytes, body: bytes = b"") -> bytes:
    header_size = 8 + len(header)
    return struct.pack("<HHI", chunk_type, header_size, header_size + len(body)) + header + body


def _string_pool(strings: list[str]) -> bytes:
    """UTF-16 string pool chunk."""
    offsets: list[int] = []
    data = b""
    for value in strings:
        offsets.append(len(data))
        data += struct.pack("<H", len(value)) + value.encode("utf-16-le") + b"\x00\x00"
    data += b"\x00" * (-len(data) % 4)
    header = struct.pack("<5I", len(strings), 0, 0, 28 + 4 * len(strings), 0)
    return _chunk(_RES_STRING_POOL, header, struct.pack(f"<{len(strings)}I", *offsets) + data)


def encode_axml(root: XmlNode) -> bytes:
    """Encode an element tree as binary XML with the android namespace bound.

    Attribute keys prefixed ``android:`` are namespaced. ``ResRef`` values
    become references, other ints decimal integers, the rest strings.
    """
    strings: list[str] = []

    def ref(value: str) -> int:
        if value not in strings:
            strings.append(value)
        return strings.index(value)

    def node_header(comment: str | None = None) -> bytes:
        return struct.pack("<II", 1, _NO_INDEX if comment is None else ref(comment))

    def attribute(key: str, value: Any) -> bytes:
        prefix, _, name = key.rpartition(":")
        namespace = ref(ANDROID_NS) if prefix == "android" else _NO_INDEX
        if isinstance(value, ResRef):
            raw, value_type, data = _NO_INDEX, _TYPE_REFERENCE, int(value)
        elif isinstance(value, int):
            raw, value_type, data = _NO_INDEX, _TYPE_INT_DEC, value
        else:
            raw = data = ref(value)
            value_type = _TYPE_STRING
        return struct.pack("<IIIHBBI", namespace, ref(name), raw, 8, 0, value_type, data)

    def element(node: XmlNode) -> bytes:
        attributes = b"".join(attribute(k, v) for k, v in node.attributes.items())
        start = _chunk(
            _XML_START_ELEMENT,
            node_header(node.comment),
            struct.pack(
                "<IIHHHHHH", _NO_INDEX, ref(node.tag), 0x14, 0x14, len(node.attributes), 0, 0, 0
            )
            + attributes,
        )
        children = b"".join(element(child) for child in node.children)
        end = _chunk(_XML_END_ELEMENT, node_header(), struct.pack("<II", _NO_INDEX, ref(node.tag)))
        return start + children + end

    namespace = struct.pack("<II", ref("android"), ref(ANDROID_NS))
    body = (
        _chunk(_XML_START_NAMESPACE, node_header(), namespace)
        + element(root)
        + _chunk(_XML_END_NAMESPACE, node_header(), namespace)
    )
    return _chunk(_RES_XML, b"", _string_pool(strings) + body)


def encode_arsc(package: str, resources: dict[str, dict[str, str]]) -> bytes:
    """Encode a single-package resource table of string values.

    ``resources`` maps type name to ``{key: value}``; types are numbered from
    1 and entries from 0 in the order given, under the default config.
    """
    values: list[str] = []
    keys: list[str] = []
    type_chunks = b""
    for type_id, entries in enumerate(resources.values(), start=1):
        count = len(entries)
        type_chunks += _chunk(
            _TABLE_TYPE_SPEC,
            struct.pack("<BBHI", type_id, 0, 0, count),
            struct.pack(f"<{count}I", *([0] * count)),
        )

        offsets: list[int] = []
        data = b""
        for key, value in entries.items():
            offsets.append(len(data))
            keys.append(key)
            values.append(value)
            data += struct.pack("<HHI", 8, 0, len(keys) - 1)
            data += struct.pack("<HBBI", 8, 0, _TYPE_STRING, len(values) - 1)
        config = struct.pack("<I", 28) + bytes(24)
        entries_start = 8 + 12 + len(config) + 4 * count
        header = struct.pack("<BBHII", type_id, 0, 0, count, entries_start) + config
        type_chunks += _chunk(_TABLE_TYPE, header, struct.pack(f"<{count}I", *offsets) + data)

    type_pool = _string_pool(list(resources))
    key_pool = _string_pool(keys)
    header_size = 8 + 4 + 256 + 16
    package_header = (
        struct.pack("<I", PACKAGE_ID)
        + package[:127].encode("utf-16-le").ljust(256, b"\x00")
        + struct.pack(
            "<IIII", header_size, len(resources), header_size + len(type_pool), len(keys)
        )
    )
    package_chunk = _chunk(_TABLE_PACKAGE, package_header, type_pool + key_pool + type_chunks)
    return _chunk(_RES_TABLE, struct.pack("<I", 1), _string_pool(values) + package_chunk)


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory acting as the artifact directory."""
    return tmp_path


@pytest.fixture
def workspace(tmp_dir: Path) -> Workspace:
    """Provide a Workspace rooted at the temp directory."""
    return Workspace(tmp_dir)


@pytest.fixture
def settings() -> ToolSettings:
    """Provide default settings, unaffected by the environment."""
    return ToolSettings(_env_file=None)


@pytest.fixture
def icon_bytes() -> bytes:
    """The icon payload ``make_apk`` embeds by default."""
    return ICON_BYTES


@pytest.fixture
def parser() -> FakeManifestParser:
    """Provide an empty FakeManifestParser."""
    return FakeManifestParser()


@pytest.fixture
def manifest_document() -> Callable[..., ManifestDocument]:
    """Factory fixture: build a ManifestDocument from the usual attributes."""
    return build_document


@pytest.fixture
def make_apk(
    tmp_dir: Path, parser: FakeManifestParser
) -> Callable[..., str]:
    """Factory fixture: write an APK-shaped zip and register its manifest.

    The icon (when given and a PNG) is stored inside the zip under its
    manifest path.
    """

    def _factory(
        filename: str,
        package: str,
        label: str = "",
        version_code: str = "1",
        icon: str = "res/mipmap/ic_launcher.png",
        icon_bytes: bytes = ICON_BYTES,
        **overrides: Any,
    ) -> str:
        with zipfile.ZipFile(tmp_dir / filename, "w") as zf:
            zf.writestr("AndroidManifest.xml", b"\x03\x00\x08\x00binary-xml")
            zf.writestr("classes.dex", package.encode("utf-8"))
            if icon.endswith(".png"):
                zf.writestr(icon, icon_bytes)
        parser.add(
            filename,
            build_document(
                package, label=label, version_code=version_code, icon=icon, **overrides
            ),
        )
        return filename

    return _factory


@pytest.fixture
def make_binary_apk(tmp_dir: Path) -> Callable[..., str]:
    """Factory fixture: write an APK with a binary manifest and resource table.

    The application label and icon are resource references resolved through
    ``resources.arsc``; pass ``with_resources=False`` to leave the table out.
    """

    def _factory(
        filename: str,
        package: str = "com.example.weather.plugin",
        label: str = "Weather Radar",
        version_code: int = 7,
        version_name: str = "1.2.0",
        icon_path: str = "res/drawable/ic_launcher.png",
        plugin_api: str = "com.atakmap.app@4.5.0.CIV",
        with_resources: bool = True,
    ) -> str:
        manifest = XmlNode(
            "manifest",
            {
                "package": package,
                "android:versionCode": version_code,
                "android:versionName": version_name,
            },
            (
                XmlNode("uses-sdk", {"android:minSdkVersion": 21}),
                XmlNode(
                    "application",
                    {
                        "android:label": LABEL_REF,
                        "android:icon": ICON_REF,
                        "android:theme": SYSTEM_THEME_REF,
                    },
                    (
                        XmlNode(
                            "meta-data",
                            {"android:name": "plugin-api", "android:value": plugin_api},
                        ),
                    ),
                    comment="plugin entry point",
                ),
            ),
        )
        with zipfile.ZipFile(tmp_dir / filename, "w") as zf:
            zf.writestr("AndroidManifest.xml", encode_axml(manifest))
            if with_resources:
                zf.writestr(
                    "resources.arsc",
                    encode_arsc(
                        package,
                        {"string": {"app_name": label}, "drawable": {"ic_launcher": icon_path}},
                    ),
                )
            zf.writestr(icon_path, ICON_BYTES)
        return filename

    return _factory


@pytest.fixture
def make_record() -> Callable[..., ArtifactRecord]:
    """Factory fixture: build an ArtifactRecord with sensible defaults."""

    def _factory(
        identity_name: str = "com.example.tool.plugin",
        artifact_path: str = "tool.apk",
        **overrides: Any,
    ) -> ArtifactRecord:
        defaults: dict[str, Any] = {
            "kind": ArtifactKind.PLUGIN
            if identity_name.endswith(".plugin")
            else ArtifactKind.APP,
            "identity_name": identity_name,
            "display_name": "Tool",
            "version_string": "1.0",
            "revision": "1",
            "artifact_path": artifact_path,
            "content_digest": "0" * 64,
            "size_bytes": 10,
        }
        defaults.update(overrides)
        return ArtifactRecord(**defaults)

    return _factory
