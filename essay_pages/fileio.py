"""Filesystem helpers: atomic writes and attachment copying.

Pages, the post index, and the feed are written to a temporary sibling file
and renamed into place, so a process serving the output directory never reads
a half-written file.
"""

from __future__ import annotations

import os
import shutil
import typing as typ
import uuid

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

TEMP_SUFFIX = ".tmp"


def temp_path_for(path: Path) -> Path:
    """Return a unique hidden temporary path beside ``path``."""
    return path.with_name(f".{path.name}.{os.getpid()}.{uuid.uuid4().hex}{TEMP_SUFFIX}")


def write_atomic(path: Path, content: str | bytes) -> Path:
    """Write ``content`` to ``path`` via a temporary file and rename.

    Parameters
    ----------
    path : Path
        Destination file; parent directories are created as needed.
    content : str or bytes
        Text is encoded as UTF-8.

    Returns
    -------
    Path
        The destination path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else content
    temp_path = temp_path_for(path)
    try:
        temp_path.write_bytes(data)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return path


def copy_if_exists(source: Path, destination: Path) -> bool:
    """Atomically copy ``source`` to ``destination`` when it exists.

    Returns
    -------
    bool
        ``True`` when the file was copied, ``False`` when ``source`` is absent.
    """
    try:
        data = source.read_bytes()
    except FileNotFoundError:
        return False
    write_atomic(destination, data)
    return True


def copy_attachments(
    source_dir: Path, output_dir: Path, *, exclude: cabc.Collection[str]
) -> list[Path]:
    """Copy every entry of ``source_dir`` except ``exclude`` into ``output_dir``.

    Directories are copied recursively and merged into existing output.
    Errors propagate to the caller.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    for entry in sorted(source_dir.iterdir()):
        if entry.name in exclude:
            continue
        destination = output_dir / entry.name
        if entry.is_dir():
            shutil.copytree(entry, destination, dirs_exist_ok=True)
        else:
            shutil.copy2(entry, destination)
        copied.append(destination)
    return copied


__all__ = ["copy_attachments", "copy_if_exists", "temp_path_for", "write_atomic"]
