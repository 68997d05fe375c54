"""Filesystem operations behind the file-manager endpoints.

Each operation resolves its path once, branches on what is there, runs one
filesystem primitive in a worker thread and raises a ``FileServiceError`` for
the conditions it anticipates. Nothing locks the path between the resolve and
the primitive, so concurrent requests on the same path can race.
"""

from __future__ import annotations

import asyncio
import locale
import os
import shutil

import structlog

from fileserver.errors import InvalidArgumentError, NotFoundError, os_errors_mapped
from fileserver.schemas.files import FileContent, FileRecord
from fileserver.services.dir_walker import FileFilter, walk
from fileserver.services.path_resolver import PathKind, ResolvedPath, resolve
from fileserver.services.records import modified_at, record_from_stat

logger = structlog.get_logger(__name__)


async def _resolve(raw: str) -> ResolvedPath:
    return await asyncio.to_thread(resolve, raw)


def _require_directory(target: ResolvedPath) -> None:
    if target.kind is PathKind.missing:
        raise NotFoundError(f"Directory not found: {target.path}")
    if target.kind is PathKind.file:
        raise InvalidArgumentError(f"Not a directory: {target.path}")


def _require_file(target: ResolvedPath) -> os.stat_result:
    if target.kind is PathKind.missing or target.st is None:
        raise NotFoundError(f"File not found: {target.path}")
    if target.kind is PathKind.directory:
        raise InvalidArgumentError(f"Path is a directory, use GET /files to list it: {target.path}")
    return target.st


def _stat_child(path: str) -> os.stat_result:
    try:
        return os.stat(path)
    except FileNotFoundError:
        # Dangling symlink: describe the link itself.
        return os.lstat(path)


def _scan_directory(path: str) -> list[FileRecord]:
    records = []
    for name in os.listdir(path):
        child = os.path.join(path, name)
        records.append(record_from_stat(child, _stat_child(child)))
    return records


def sort_listing(records: list[FileRecord]) -> list[FileRecord]:
    """Directories first, then files; each group ordered by locale-aware name comparison."""
    return sorted(records, key=lambda r: (not r.is_dir, locale.strxfrm(r.name)))


async def list_directory(raw_path: str) -> list[FileRecord]:
    target = await _resolve(raw_path)
    _require_directory(target)
    records = await asyncio.to_thread(_scan_directory, target.path)
    return sort_listing(records)


async def get_file(raw_path: str, include_content: bool = False) -> FileRecord | FileContent:
    target = await _resolve(raw_path)
    st = _require_file(target)
    if not include_content:
        return record_from_stat(target.path, st)

    with os_errors_mapped(target.path):
        content = await asyncio.to_thread(_read_text, target.path)
    return FileContent(
        path=target.path,
        name=os.path.basename(target.path),
        content=content,
        size=st.st_size,
        mod_date=modified_at(st),
    )


def _read_text(path: str) -> str:
    # Bytes that are not valid UTF-8 come back as U+FFFD.
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def _write_text(path: str, content: str) -> os.stat_result:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    return os.stat(path)


def _remove(path: str, is_dir: bool) -> None:
    # A symlink to a directory is unlinked, its target is left alone.
    if is_dir and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.unlink(path)


def _make_directory(path: str) -> os.stat_result:
    os.makedirs(path, exist_ok=True)
    return os.stat(path)


async def create_item(raw_path: str, is_dir: bool = False, content: str = "") -> FileRecord:
    """Create a directory (recursive, idempotent) or write a file (overwriting any existing one)."""
    target = await _resolve(raw_path)
    if not is_dir and target.kind is PathKind.directory:
        raise InvalidArgumentError(f"Path is a directory: {target.path}")

    with os_errors_mapped(target.path):
        try:
            if is_dir:
                st = await asyncio.to_thread(_make_directory, target.path)
            else:
                st = await asyncio.to_thread(_write_text, target.path, content)
        except FileNotFoundError as exc:
            raise NotFoundError(f"Parent directory not found: {os.path.dirname(target.path)}") from exc

    logger.info("directory_created" if is_dir else "file_created", path=target.path, existed=target.exists)
    return record_from_stat(target.path, st)


async def update_item(raw_path: str, content: str) -> FileRecord:
    """Replace the whole content of an existing file. Never creates one."""
    target = await _resolve(raw_path)
    _require_file(target)

    with os_errors_mapped(target.path):
        st = await asyncio.to_thread(_write_text, target.path, content)

    logger.info("file_updated", path=target.path, size=st.st_size)
    return record_from_stat(target.path, st)


async def delete_item(raw_path: str) -> str:
    """Unlink a file or remove a whole directory tree. Returns the deleted path."""
    target = await _resolve(raw_path)
    # Dangling symlinks resolve as missing but appear in listings; unlink those too.
    if target.kind is PathKind.missing and not await asyncio.to_thread(os.path.islink, target.path):
        raise NotFoundError(f"Path not found: {target.path}")

    with os_errors_mapped(target.path):
        await asyncio.to_thread(_remove, target.path, target.kind is PathKind.directory)

    logger.info("path_deleted", path=target.path, kind=str(target.kind))
    return target.path


async def walk_directory(raw_path: str, accept: FileFilter | None = None) -> list[FileRecord]:
    """Run the recursive walker off the event loop after the usual path checks."""
    target = await _resolve(raw_path)
    _require_directory(target)
    records = await asyncio.to_thread(walk, target.path, None, accept)
    logger.info("walk_complete", path=target.path, files=len(records))
    return records
