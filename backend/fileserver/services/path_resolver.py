from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import StrEnum


class PathKind(StrEnum):
    missing = "missing"
    file = "file"
    directory = "directory"


@dataclass(frozen=True)
class ResolvedPath:
    path: str
    kind: PathKind
    st: os.stat_result | None = None

    @property
    def exists(self) -> bool:
        return self.kind is not PathKind.missing


def canonical_path(raw: str) -> str:
    """Absolute, normalised form of ``raw``; relative paths are joined to the working directory.

    Symlinks are kept as written so the result is the path the caller traversed.
    """
    return os.path.abspath(os.path.expanduser(raw))


def resolve(raw: str) -> ResolvedPath:
    """Canonicalise ``raw`` and classify it with a single stat probe.

    Nothing is cached; every call looks at the filesystem again. A probe that
    fails for any reason other than absence propagates to the caller.
    """
    path = canonical_path(raw)
    try:
        st = os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return ResolvedPath(path=path, kind=PathKind.missing)
    kind = PathKind.directory if stat.S_ISDIR(st.st_mode) else PathKind.file
    return ResolvedPath(path=path, kind=kind, st=st)
