"""Resolution of a page file's last-modified time."""

from __future__ import annotations

import os
import subprocess
from datetime import datetime, timezone
from pathlib import Path

_RFC3339_UTC = "%Y-%m-%dT%H:%M:%SZ"


def _format_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(_RFC3339_UTC)


def _git_commit_time(path: Path) -> str | None:
    """Return the commit time of the last commit touching *path*, if any."""
    try:
        completed = subprocess.run(
            ["git", "-C", str(path.parent), "log", "-1", "--format=%cI", "--", path.name],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    stamp = completed.stdout.strip()
    if not stamp:
        return None
    if stamp.endswith(("Z", "z")):
        stamp = stamp[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(stamp)
    except ValueError:
        return None
    if moment.tzinfo is None:
        return None
    return _format_utc(moment)


def last_updated_for_file(file_path: str | os.PathLike[str]) -> str:
    """Return the last-modified time of a page file as an RFC 3339 UTC string.

    The time of the most recent git commit touching the file is preferred;
    the filesystem modification time is used otherwise. An empty string is
    returned when neither is available.
    """
    path = Path(file_path)

    committed = _git_commit_time(path)
    if committed is not None:
        return committed

    try:
        mtime = path.stat().st_mtime
    except OSError:
        return ""
    return _format_utc(datetime.fromtimestamp(mtime, tz=timezone.utc))