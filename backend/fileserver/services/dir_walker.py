"""Recursive directory walker producing a flat, deduplicated list of file records."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from fileserver.schemas.files import FileRecord
from fileserver.services.path_resolver import canonical_path
from fileserver.services.records import record_from_stat

FileFilter = Callable[[str], bool]

VIDEO_EXTENSIONS: frozenset[str] = frozenset(
    {
        "3g2", "3gp", "aaf", "asf", "avchd", "avi", "drc", "flv", "m2v", "m4p",
        "m4v", "mkv", "mng", "mov", "mp2", "mp4", "mpe", "mpeg", "mpg", "mpv",
        "mxf", "nsv", "ogg", "ogv", "qt", "rm", "rmvb", "roq", "svi", "vob",
        "webm", "wmv", "yuv",
    }
)  # fmt: skip


@dataclass
class TraversalContext:
    """State owned by exactly one traversal: paths already recorded, and the records in order.

    Pass the same instance to several ``walk`` calls to deduplicate across them.
    """

    visited: set[str] = field(default_factory=set)
    accumulated: list[FileRecord] = field(default_factory=list)


def _normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def extension_filter(extensions: Iterable[str]) -> FileFilter:
    """Build a predicate accepting paths whose extension is in ``extensions`` (case-insensitive)."""
    allowed = frozenset(_normalize_extension(e) for e in extensions if _normalize_extension(e))

    def _accept(path: str) -> bool:
        return os.path.splitext(path)[1][1:].lower() in allowed

    return _accept


def walk(root: str, context: TraversalContext | None = None, accept: FileFilter | None = None) -> list[FileRecord]:
    """Enumerate every file below ``root`` into ``context.accumulated`` and return that list.

    Directories are descended into but never recorded. A file is recorded once per
    literal path string; symlinks are followed when classifying entries but not
    resolved for deduplication. Records follow directory-enumeration order,
    depth-first, exactly as a recursive walk would produce them.

    Uses an explicit stack of directory iterators rather than recursion. Any
    error listing or probing an entry (unreadable directory, dangling symlink)
    propagates; there is no partial result.

    This is blocking I/O. From async code, run it with ``asyncio.to_thread``.
    """
    ctx = context if context is not None else TraversalContext()
    start = canonical_path(root)
    stack: list[tuple[str, Iterator[str]]] = [(start, iter(os.listdir(start)))]
    while stack:
        dir_path, names = stack[-1]
        name = next(names, None)
        if name is None:
            stack.pop()
            continue
        entry_path = os.path.join(dir_path, name)
        st = os.stat(entry_path)
        if stat.S_ISDIR(st.st_mode):
            stack.append((entry_path, iter(os.listdir(entry_path))))
        elif stat.S_ISREG(st.st_mode):
            if entry_path in ctx.visited:
                continue
            if accept is not None and not accept(entry_path):
                continue
            ctx.visited.add(entry_path)
            ctx.accumulated.append(record_from_stat(entry_path, st))
    return ctx.accumulated
