"""Library browsing helpers: artists, years, shows, and show contents.

Show folders are searched one level deep (the folder itself plus its
immediate subfolders), which covers the usual "Disc 1 / Disc 2" and
"flac16 / flac24" layouts without crawling whole trees.
"""

import logging
import os
import re
import tempfile
import time
from collections import defaultdict

from gdshows.config import (
    ARTIST_DISPLAY_NAMES,
    AUDIO_EXTENSIONS,
    IMAGE_EXTENSIONS,
    PLAYLIST_PREFIX,
    SKIPPED_TEXT_MARKERS,
    TEXT_EXTENSIONS,
    YEAR_FOLDER_PATTERN,
    YEAR_STRUCTURE_MIN_COUNT,
    YEAR_STRUCTURE_MIN_SHARE,
)
from gdshows.showinfo import parse_folder_name

logger = logging.getLogger(__name__)

_YEAR_FOLDER_RE = re.compile(YEAR_FOLDER_PATTERN)

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class LibraryPathError(Exception):
    """A library, artist, year, or show path is missing or unreadable."""


def _require_dir(path, what):
    if not path or not os.path.isdir(path):
        raise LibraryPathError(f"{what} not found: {path}")


def _visible_subdirs(path):
    """Non-hidden subdirectories of path as (name, full_path), unsorted."""
    try:
        with os.scandir(path) as it:
            return [(e.name, e.path) for e in it
                    if e.is_dir() and not e.name.startswith(".")]
    except OSError as e:
        raise LibraryPathError(f"Cannot read folder {path}: {e.strerror or e}") from e


# ── Artists / years / shows ───────────────────────────────────────────

def artist_display_name(folder_name):
    """grateful_dead_flac → "Grateful Dead", some_band → "Some Band"."""
    lower = folder_name.lower()
    for fragment, display in ARTIST_DISPLAY_NAMES.items():
        if fragment in lower:
            return display
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), folder_name.replace("_", " "))


def list_artists(library_path):
    """Artist folders of a library, sorted by display name."""
    _require_dir(library_path, "Music library path")
    artists = [{"name": artist_display_name(name), "path": path}
               for name, path in _visible_subdirs(library_path)]
    return sorted(artists, key=lambda a: a["name"].lower())


def is_year_structured(folder_names):
    """Artist → Year → Show layout, judged by how many subfolders are years."""
    year_count = sum(1 for n in folder_names if _YEAR_FOLDER_RE.match(n))
    if year_count == 0:
        return False
    return (year_count / len(folder_names) > YEAR_STRUCTURE_MIN_SHARE
            or year_count >= YEAR_STRUCTURE_MIN_COUNT)


def list_years(artist_path):
    """Top level of an artist folder.

    Returns {"structure": "years", "years": [...], "paths": {year: path}}
    for year-organized artists, otherwise
    {"structure": "artists", "artists": [...], "paths": {label: path}}
    (e.g. an "Other Flac" folder holding one folder per band).
    """
    _require_dir(artist_path, "Artist directory")
    subdirs = sorted(_visible_subdirs(artist_path))

    if is_year_structured([name for name, _ in subdirs]):
        years = [(name, path) for name, path in subdirs if _YEAR_FOLDER_RE.match(name)]
        return {
            "structure": "years",
            "years": [name for name, _ in years],
            "paths": dict(years),
        }
    return {
        "structure": "artists",
        "artists": [name for name, _ in subdirs],
        "paths": dict(subdirs),
    }


def list_shows(folder_path):
    """Show folders inside a year (or sub-artist) folder, sorted by name."""
    _require_dir(folder_path, "Folder")
    return [{"label": name, "path": path}
            for name, path in sorted(_visible_subdirs(folder_path))]


# ── Files in a show ───────────────────────────────────────────────────

def _walk_one_level(folder_path):
    """Yield (entry, location) for files in folder_path and its direct subfolders."""
    try:
        with os.scandir(folder_path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning("Error processing directory %s: %s", folder_path, e)
        return

    subdirs = []
    for entry in entries:
        if entry.is_file():
            yield entry, "root"
        elif entry.is_dir():
            subdirs.append(entry.path)

    for subdir in subdirs:
        try:
            with os.scandir(subdir) as it:
                sub_entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Error processing directory %s: %s", subdir, e)
            continue
        for entry in sub_entries:
            if entry.is_file():
                yield entry, "subfolder"


def _file_info(entry, folder_path, location):
    return {
        "filename": entry.name,
        "full_path": entry.path,
        "relative_path": os.path.relpath(entry.path, folder_path),
        "size": entry.stat().st_size,
        "location": location,
    }


def find_text_files(folder_path):
    if not os.path.isdir(folder_path):
        return []
    files = []
    for entry, location in _walk_one_level(folder_path):
        name = entry.name
        if name.startswith("."):
            continue
        if any(marker in name.lower() for marker in SKIPPED_TEXT_MARKERS):
            continue
        if os.path.splitext(name)[1].lower() in TEXT_EXTENSIONS:
            files.append(_file_info(entry, folder_path, location))
    return files


def find_audio_files(folder_path):
    """Audio files with their format ("flac", "mp3", ...) added."""
    if not os.path.isdir(folder_path):
        return []
    files = []
    for entry, location in _walk_one_level(folder_path):
        ext = os.path.splitext(entry.name)[1].lower()
        if ext in AUDIO_EXTENSIONS:
            info = _file_info(entry, folder_path, location)
            info["format"] = ext[1:]
            files.append(info)
    return files


def find_image_file(folder_path):
    """First folder image (cover scan, etc.), or None."""
    if not os.path.isdir(folder_path):
        return None
    for entry, _ in _walk_one_level(folder_path):
        if entry.name.startswith("."):
            continue
        if os.path.splitext(entry.name)[1].lower() in IMAGE_EXTENSIONS:
            return entry.path
    return None


def read_text_file(file_path):
    if not os.path.isfile(file_path):
        raise LibraryPathError(f"File not found: {file_path}")
    with open(file_path, encoding="utf-8", errors="replace") as f:
        return f.read()


def format_file_size(size_bytes):
    """1536 → "1.50 KB", 15360 → "15.0 KB", 153600 → "150 KB"."""
    if size_bytes <= 0:
        return "0 B"
    size = float(size_bytes)
    i = 0
    while size >= 1024 and i < len(SIZE_UNITS) - 1:
        size /= 1024
        i += 1
    if size >= 100:
        return f"{round(size)} {SIZE_UNITS[i]}"
    if size >= 10:
        return f"{size:.1f} {SIZE_UNITS[i]}"
    return f"{size:.2f} {SIZE_UNITS[i]}"


def show_content(show_path):
    """Everything the browser shows for one show folder."""
    _require_dir(show_path, "Show folder")

    text_files = [
        {"filename": f["filename"], "path": f["full_path"],
         "size": format_file_size(f["size"]), "location": f["location"]}
        for f in find_text_files(show_path)
    ]
    audio_files = [
        {"filename": f["filename"], "path": f["full_path"],
         "format": f["format"].upper(), "size": format_file_size(f["size"]),
         "location": f["location"]}
        for f in find_audio_files(show_path)
    ]

    by_format = defaultdict(list)
    for f in audio_files:
        by_format[f["format"]].append(f)

    ordered = sorted(audio_files, key=lambda f: f["filename"].lower())
    return {
        "text_files": text_files,
        "audio_files": audio_files,
        "audio_by_format": dict(by_format),
        "sorted_playlist": [f["path"] for f in ordered],
        "track_order": [{"number": i, "name": f["filename"]}
                        for i, f in enumerate(ordered, 1)],
        "image": find_image_file(show_path),
        "info": parse_folder_name(os.path.basename(os.path.normpath(show_path))),
    }


# ── Playlists ─────────────────────────────────────────────────────────

def build_playlist(file_paths, start_index=0):
    """Order tracks so playback starts at start_index and wraps around.

    Hidden files and macOS "._" resource forks are dropped first; the
    start index is clamped into the remaining list.
    """
    clean = [p for p in file_paths if not os.path.basename(p).startswith(".")]
    if not clean:
        return []
    try:
        start = int(start_index)
    except (TypeError, ValueError):
        start = 0
    start = max(0, min(start, len(clean) - 1))
    return clean[start:] + clean[:start]


def write_m3u(file_paths, directory=None):
    """Write a temporary M3U playlist and return its path."""
    fd, path = tempfile.mkstemp(
        prefix=f"{PLAYLIST_PREFIX}{int(time.time() * 1000)}_",
        suffix=".m3u",
        dir=directory,
    )
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write("\n".join(file_paths))
        f.write("\n")
    logger.info("Wrote playlist %s with %d tracks", path, len(file_paths))
    return path
