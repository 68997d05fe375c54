import os
import stat
from datetime import UTC, datetime

from fileserver.schemas.files import FileRecord


def _timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def created_at(st: os.stat_result) -> datetime | None:
    """Birth time when the platform reports one (macOS, BSD, some Linux builds), else None."""
    birthtime = getattr(st, "st_birthtime", None)
    return _timestamp(birthtime) if birthtime is not None else None


def record_from_stat(path: str, st: os.stat_result) -> FileRecord:
    is_dir = stat.S_ISDIR(st.st_mode)
    return FileRecord(
        id=path,
        name=os.path.basename(path) or path,
        is_dir=is_dir,
        size=None if is_dir else st.st_size,
        created_at=created_at(st),
        modified_at=_timestamp(st.st_mtime),
    )


def modified_at(st: os.stat_result) -> datetime:
    return _timestamp(st.st_mtime)
