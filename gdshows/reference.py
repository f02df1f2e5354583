"""Reference show tables: the known show dates folders are matched against.

Two sources:
  - a CSV file with a ShowDate column (plus any descriptive columns),
  - the Internet Archive GratefulDead collection, reduced to one row per
    distinct concert date with the number of recordings for that date.
"""

import csv
import json
import logging
import re
import time
from collections import Counter
from pathlib import Path

import requests

from gdshows.config import (
    ARCHIVE_DATES_CACHE_KEY,
    ARCHIVE_MAX_RETRIES,
    ARCHIVE_PAGE_SIZE,
    ARCHIVE_QUERY,
    ARCHIVE_RATE_LIMIT,
    ARCHIVE_SCRAPE_URL,
    ARCHIVE_USER_AGENT,
    CACHE_DIR,
    SHOW_DATE_COLUMN,
)
from gdshows.export import atomic_open

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r'(\d{4}-\d{2}-\d{2})')


class ReferenceTableError(Exception):
    """The reference table could not be read or has the wrong shape."""


# ── CSV ───────────────────────────────────────────────────────────────

def load_reference_csv(path):
    """Read a reference table from CSV. Returns a list of row dicts.

    Raises ReferenceTableError if the file is missing, unreadable, not
    UTF-8, malformed, or has no ShowDate column.
    """
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            fieldnames = reader.fieldnames or []
            if SHOW_DATE_COLUMN not in fieldnames:
                raise ReferenceTableError(
                    f"Reference table {path} has no {SHOW_DATE_COLUMN} column")
            rows = [dict(row) for row in reader]
    except OSError as e:
        raise ReferenceTableError(
            f"Could not read reference table {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise ReferenceTableError(
            f"Reference table {path} is not UTF-8 text (byte {e.start}: {e.reason}); "
            "re-save it as UTF-8 CSV") from e
    except csv.Error as e:
        raise ReferenceTableError(f"Malformed reference table {path}: {e}") from e

    logger.info("Loaded %d reference shows from %s", len(rows), path)
    return rows


# ── Cache ─────────────────────────────────────────────────────────────

def _cache_file(cache_dir, key):
    return Path(cache_dir) / f"{key}.json"


def _read_cached(cache_dir, key, max_age_seconds=0):
    """Return cached JSON for key, or None if absent, stale, or corrupt."""
    path = _cache_file(cache_dir, key)
    if not path.exists():
        return None
    if max_age_seconds > 0 and time.time() - path.stat().st_mtime > max_age_seconds:
        logger.info("Cache %s is older than %ds, refreshing", path, max_age_seconds)
        return None
    try:
        return json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable cache %s: %s", path, e)
        return None


def _write_cached(cache_dir, key, data):
    with atomic_open(_cache_file(cache_dir, key), encoding="utf-8") as f:
        json.dump(data, f)


# ── Internet Archive ──────────────────────────────────────────────────

def create_session(user_agent=ARCHIVE_USER_AGENT):
    """requests session that identifies itself to archive.org and asks for JSON."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})
    return session


def _get_json(session, url, params, rate_limit=ARCHIVE_RATE_LIMIT,
              max_retries=ARCHIVE_MAX_RETRIES):
    """GET with a pause after each success and backoff on 429/5xx."""
    for attempt in range(max_retries + 1):
        resp = session.get(url, params=params)
        retryable = resp.status_code == 429 or resp.status_code >= 500
        if retryable and attempt < max_retries:
            retry_after = int(resp.headers.get("Retry-After", 2 ** attempt))
            logger.warning("HTTP %d from %s, retrying in %ds (attempt %d/%d)",
                           resp.status_code, url, retry_after,
                           attempt + 1, max_retries)
            time.sleep(retry_after)
            continue
        resp.raise_for_status()
        if rate_limit > 0:
            time.sleep(rate_limit)
        return resp.json()


def scrape_archive_dates(session, rate_limit=ARCHIVE_RATE_LIMIT):
    """Enumerate the date of every item in the GratefulDead collection.

    Pages through the cursor-based scrape API (the advancedsearch API caps
    at 10,000 results). Items without a parseable date are skipped.
    """
    dates = []
    cursor = None
    while True:
        params = {
            "q": ARCHIVE_QUERY,
            "fields": "identifier,date",
            "count": str(ARCHIVE_PAGE_SIZE),
        }
        if cursor:
            params["cursor"] = cursor

        data = _get_json(session, ARCHIVE_SCRAPE_URL, params, rate_limit=rate_limit)
        items = data.get("items", [])
        if not items:
            break
        for item in items:
            m = _ISO_DATE.match(item.get("date") or "")
            if m:
                dates.append(m.group(1))
        logger.info("Archive search: %d items (%d dated so far, %s total)",
                    len(items), len(dates), data.get("total", "?"))

        cursor = data.get("cursor")
        if not cursor:
            break
    return dates


def dates_to_reference_rows(dates):
    """Collapse a list of recording dates into one row per show date."""
    counts = Counter(dates)
    return [{SHOW_DATE_COLUMN: d, "Recordings": counts[d]} for d in sorted(counts)]


def fetch_archive_show_dates(session=None, use_cache=True, max_age_days=0,
                             cache_dir=CACHE_DIR):
    """Reference table built from the Internet Archive, cached as JSON."""
    max_age = max_age_days * 86400
    if use_cache:
        cached = _read_cached(cache_dir, ARCHIVE_DATES_CACHE_KEY, max_age)
        if cached is not None:
            logger.info("Using cached archive show dates (%d shows)", len(cached))
            return cached

    rows = dates_to_reference_rows(scrape_archive_dates(session or create_session()))
    if use_cache:
        _write_cached(cache_dir, ARCHIVE_DATES_CACHE_KEY, rows)
    return rows
