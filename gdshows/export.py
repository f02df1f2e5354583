"""CSV / JSON export of reconciled show tables and folder records.

Folder names come straight from the filesystem, so names that are not
valid UTF-8 arrive as surrogate escapes; they are written back out as the
original bytes. Files are written beside their destination and renamed
into place, so a failed export leaves the previous file untouched.
"""

import csv
import json
import os
import sys
import tempfile
from contextlib import contextmanager

from gdshows.config import DOWNLOADS_DIR


def default_output_path(filename):
    """Exports land in ~/Downloads unless a path is given."""
    return os.path.join(DOWNLOADS_DIR, filename)


@contextmanager
def atomic_open(path, **open_kwargs):
    """Open a text file that only replaces path once the block finishes."""
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=parent, prefix=".", suffix=".part")
    try:
        with os.fdopen(fd, "w", **open_kwargs) as f:
            yield f
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def rows_to_dicts(rows):
    return [row.to_dict() for row in rows]


def fieldnames_for(dicts):
    """Union of keys across all rows, in first-seen order.

    Reference tables can carry different descriptive columns, and
    synthetic rows carry none, so no single row has every column.
    """
    seen = {}
    for d in dicts:
        for key in d:
            seen.setdefault(key, None)
    return list(seen)


def _write(f, dicts):
    writer = csv.DictWriter(f, fieldnames=fieldnames_for(dicts), restval="")
    writer.writeheader()
    for d in dicts:
        writer.writerow({k: "" if v is None else v for k, v in d.items()})


def write_csv(rows, path):
    """Write ShowRow/FolderRecord objects to path ("-" for stdout).

    Returns the number of rows written.
    """
    return write_dicts(rows_to_dicts(rows), path)


def write_dicts(dicts, path):
    if path == "-":
        _write(sys.stdout, dicts)
    else:
        with atomic_open(path, newline="", encoding="utf-8",
                         errors="surrogateescape") as f:
            _write(f, dicts)
    return len(dicts)


def write_json(rows, statistics, path):
    """Write {"statistics": ..., "rows": [...]} to path ("-" for stdout).

    ensure_ascii keeps undecodable folder names as \\udcXX escapes.
    """
    payload = {"statistics": statistics.to_dict(), "rows": rows_to_dicts(rows)}
    if path == "-":
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    with atomic_open(path, encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
