"""Workspace — the directory a packaging run reads from and writes to.

Every component receives a ``Workspace`` instead of relying on the process
working directory. Paths handed in and out are workspace-relative POSIX
strings, which is also the form they take inside the inventory and archives.

Filesystem errors surface as ``OSError``; callers wrap them with the stage
and artifact they were working on.
"""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

_NEW_FILE_MODE = 0o666


def _file_mode(target: Path) -> int:
    """Permission bits for a file written over ``target``.

    mkstemp creates files readable by the owner only; an archive replacing
    ``target`` keeps its mode, and a new one gets 0o666 less the umask.
    """
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return _NEW_FILE_MODE & ~umask


class Workspace:
    """Filesystem operations scoped to one root directory.

    Parameters
    ----------
    root:
        Directory holding the artifacts. Defaults to the current directory.
    """

    def __init__(self, root: Path | str = ".") -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def name(self) -> str:
        """Name of the root directory, resolved so ``.`` has a real name."""
        return self._root.resolve().name

    def path(self, relative: str) -> Path:
        """Absolute-ish path for a workspace-relative name."""
        return self._root / relative

    def exists(self, relative: str) -> bool:
        return self.path(relative).exists()

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_files(self, marker: str) -> list[str]:
        """Top-level files whose name contains ``marker``, sorted by name."""
        return sorted(
            entry.name
            for entry in self._root.iterdir()
            if entry.is_file() and marker in entry.name
        )

    def list_override_icons(self, directory: str, extension: str) -> set[str]:
        """Names of files in ``directory`` ending with ``extension``.

        A missing directory yields an empty set.
        """
        icon_dir = self.path(directory)
        if not icon_dir.is_dir():
            return set()
        return {
            entry.name
            for entry in icon_dir.iterdir()
            if entry.is_file() and entry.name.endswith(extension)
        }

    def walk_files(self) -> list[str]:
        """Every file under the root, recursively, as sorted relative paths."""
        return sorted(
            p.relative_to(self._root).as_posix()
            for p in self._root.rglob("*")
            if p.is_file()
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def size(self, relative: str) -> int:
        return self.path(relative).stat().st_size

    def remove(self, relative: str) -> None:
        self.path(relative).unlink()

    def rename(self, source: str, target: str) -> None:
        """Rename ``source`` to ``target``, deleting any file already at ``target``."""
        if self.exists(target):
            self.remove(target)
        self.path(source).rename(self.path(target))

    @contextmanager
    def open_archive(self, name: str) -> Iterator[ZipFile]:
        """Write a zip archive that replaces ``name`` only on success.

        Entries go to a temporary file beside the target. When the block
        exits cleanly the temporary file is moved over ``name``; on error it
        is removed and any previous archive is left untouched.

        The archive gets the previous archive's permissions, or those of a
        newly created file when there was none.
        """
        target = self.path(name)
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=self._root)
        os.close(fd)
        tmp_path = Path(tmp)
        try:
            with ZipFile(tmp_path, "w", compression=ZIP_DEFLATED) as zf:
                yield zf
            os.chmod(tmp_path, _file_mode(target))
            tmp_path.replace(target)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
