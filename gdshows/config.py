"""Constants, sentinels, file types, and API URLs."""

import os

# ── Paths ──────────────────────────────────────────────────────────────
DATA_DIR = os.path.expanduser("~/.gdshows")
CACHE_DIR = os.path.join(DATA_DIR, "cache")
DOWNLOADS_DIR = os.path.expanduser("~/Downloads")
DEFAULT_OUTPUT_FILENAME = "combined_shows.csv"

# ── Folder date extraction ────────────────────────────────────────────
# Bare year folders ("1977") are containers for show folders.
YEAR_FOLDER_PATTERN = r'^(19\d{2}|20\d{2})$'

# Two-digit years below the pivot are 20xx, the rest 19xx.
TWO_DIGIT_YEAR_PIVOT = 50

FOLDER_TYPE_YEAR = "year_folder"
FOLDER_TYPE_GD = "gd_prefix"
FOLDER_TYPE_DATE = "date_only"
FOLDER_TYPE_NON_DATE = "non_date"
FOLDER_TYPE_UNKNOWN = "unknown"

# ── Sentinel date strings ─────────────────────────────────────────────
# These stand in for a real date in FolderRecord.date / ShowDate.
NO_DATE_FOUND = "No date found"
INVALID_DATE = "Invalid date"
UNMATCHED_PREFIX = "Unmatched: "

# ── Reconciled table columns ──────────────────────────────────────────
# Column names match the CSV the browser UI has always exported.
SHOW_DATE_COLUMN = "ShowDate"
FOLDER_COLUMNS = (
    "flac show date",
    "folder_name",
    "year",
    "full path",
    "folder_type",
    "month",
    "day",
)
SHOWS_PER_YEAR_COLUMN = "<< total shows per year"
SHOWS_PER_DATE_COLUMN = "shows per date"

# ── Library browsing ──────────────────────────────────────────────────
AUDIO_EXTENSIONS = frozenset({".flac", ".mp3", ".wav", ".ogg", ".shn"})
TEXT_EXTENSIONS = frozenset({".txt"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})

# Text files produced by shntool (checksums, length reports) are noise.
SKIPPED_TEXT_MARKERS = ("shntool",)

# Artist folder name fragment (lowercase) → display name
ARTIST_DISPLAY_NAMES = {
    "grateful_dead": "Grateful Dead",
    "other_flac": "Other Flac",
}

# An artist directory is year-structured when more than this share of its
# subfolders are bare years, or when it has at least YEAR_STRUCTURE_MIN_COUNT.
YEAR_STRUCTURE_MIN_SHARE = 0.5
YEAR_STRUCTURE_MIN_COUNT = 5

PLAYLIST_PREFIX = "grateful_dead_playlist_"

# ── Internet Archive (reference show dates) ───────────────────────────
ARCHIVE_SCRAPE_URL = "https://archive.org/services/search/v1/scrape"
ARCHIVE_QUERY = "collection:GratefulDead AND mediatype:etree"
ARCHIVE_USER_AGENT = "GDShowsBrowser/1.0 (personal concert library browser)"
ARCHIVE_RATE_LIMIT = 0.5  # seconds between requests
ARCHIVE_PAGE_SIZE = 10000
ARCHIVE_MAX_RETRIES = 3
ARCHIVE_DATES_CACHE_KEY = "archive_show_dates"
