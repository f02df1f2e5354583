"""Folder date extraction: walk a library tree and date every directory.

Each directory name is tested against the bare-year pattern first, then
against DATE_RULES in order.  The first rule that matches wins, so rule
order is the tie-break between overlapping formats (e.g. a gd-prefixed
name is read before any bare-numeric rule gets a chance at it).

Every directory produces exactly one FolderRecord, and every directory is
descended into, whether or not a date was found at that level.
"""

import datetime
import logging
import os
import re
from dataclasses import asdict, dataclass

from gdshows.config import (
    FOLDER_TYPE_DATE,
    FOLDER_TYPE_GD,
    FOLDER_TYPE_NON_DATE,
    FOLDER_TYPE_YEAR,
    INVALID_DATE,
    NO_DATE_FOUND,
    TWO_DIGIT_YEAR_PIVOT,
    YEAR_FOLDER_PATTERN,
)

logger = logging.getLogger(__name__)


@dataclass
class FolderRecord:
    folder_name: str
    date: str
    full_path: str
    folder_type: str
    valid: bool
    year: int = None
    month: int = None
    day: int = None

    @property
    def is_sentinel(self):
        """True when date is a parse-failure marker rather than a date."""
        return self.date == NO_DATE_FOUND or INVALID_DATE in self.date

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: re.Pattern
    folder_type: str
    groups: tuple = (1, 2, 3)  # year, month, day

    def match(self, folder_name):
        """Return (year, month, day) string tokens, or None."""
        m = self.pattern.search(folder_name)
        if not m:
            return None
        return tuple(m.group(i) for i in self.groups)


def _rule(name, regex, folder_type, groups=(1, 2, 3)):
    return DateRule(name, re.compile(regex), folder_type, groups)


# ── Date rules (ordered, first match wins) ────────────────────────────

DATE_RULES = [
    # gd82-09-20, gd82-09-20.flac16
    _rule("gd_yy_dash", r'gd(\d{2})-(\d{2})-(\d{2})(?:\b|\.)', FOLDER_TYPE_GD),
    # gd1981-02-26
    _rule("gd_yyyy_dash", r'gd(\d{4})-(\d{2})-(\d{2})(?:\b|\.)', FOLDER_TYPE_GD),
    # 1972-10-18
    _rule("yyyy_dash", r'(?:^|\b)(\d{4})-(\d{2})-(\d{2})(?:\b|\.)', FOLDER_TYPE_DATE),
    # 72-10-18
    _rule("yy_dash", r'(?:^|\b)(\d{2})-(\d{2})-(\d{2})(?:\b|\.)', FOLDER_TYPE_DATE),
    # 72.10.18
    _rule("yy_dot", r'(?:^|\b)(\d{2})\.(\d{2})\.(\d{2})(?:\b|\.)', FOLDER_TYPE_DATE),
    # 1972.10.18
    _rule("yyyy_dot", r'(?:^|\b)(\d{4})\.(\d{2})\.(\d{2})(?:\b|\.)', FOLDER_TYPE_DATE),
    # 72_10_18
    _rule("yy_underscore", r'(?:^|\b)(\d{2})_(\d{2})_(\d{2})(?:\b|\.)', FOLDER_TYPE_DATE),
    # 1972_10_18
    _rule("yyyy_underscore", r'(?:^|\b)(\d{4})_(\d{2})_(\d{2})(?:\b|\.)', FOLDER_TYPE_DATE),
    # gd68-11-01sbd
    _rule("gd_yy_sbd", r'gd(\d{2})-(\d{2})-(\d{2})sbd', FOLDER_TYPE_GD),
    # gd1970-11-23sbd
    _rule("gd_yyyy_sbd", r'gd(\d{4})-(\d{2})-(\d{2})sbd', FOLDER_TYPE_GD),
    # gd70-3-24sbd (single-digit month)
    _rule("gd_yy_short_month_sbd", r'gd(\d{2})-(\d{1})-(\d{2})sbd', FOLDER_TYPE_GD),
    # gd70-06-06acoustic, gd72-05-07set1
    _rule("gd_yy_acoustic_set", r'gd(\d{2})-(\d{2})-(\d{2})(?:acoustic|set\d)', FOLDER_TYPE_GD),
    # 1969 Extravaganza - 4-06-69 (the trailing YY repeats the leading year)
    _rule("year_title_mdy", r'(\d{4})(?:\s+\w+\s+-\s+)(\d{1,2})-(\d{2})-(\d{2})',
          FOLDER_TYPE_DATE),
    # gd1977-04-27d1
    _rule("gd_yyyy_disc", r'gd(\d{4})-(\d{2})-(\d{2})d\d', FOLDER_TYPE_GD),
    # gd1972.05.23.GEMS.SBD
    _rule("gd_yyyy_dot_source", r'gd(\d{4})\.(\d{2})\.(\d{2})(?:\.GEMS|\.SBD)', FOLDER_TYPE_GD),
    # gd77-05-01set2
    _rule("gd_yy_set", r'gd(\d{2})-(\d{2})-(\d{2})set\d', FOLDER_TYPE_GD),
    # jg1976-01-09 (Jerry Garcia)
    _rule("jg_yyyy_dash", r'jg(\d{4})-(\d{2})-(\d{2})', FOLDER_TYPE_DATE),
]

_YEAR_FOLDER_RE = re.compile(YEAR_FOLDER_PATTERN)


def expand_year(token):
    """Expand a 2-digit year token to four digits; longer tokens pass through."""
    year = int(token)
    if len(token) == 2:
        year += 2000 if year < TWO_DIGIT_YEAR_PIVOT else 1900
    return year


def match_date_rule(folder_name, rules=None):
    """Return (rule, (year, month, day) tokens) for the first matching rule."""
    for rule in rules or DATE_RULES:
        tokens = rule.match(folder_name)
        if tokens:
            return rule, tokens
    return None, None


def classify_folder_name(folder_name, full_path, rules=None):
    """Build the FolderRecord for a single directory name."""
    m = _YEAR_FOLDER_RE.match(folder_name)
    if m:
        year = int(m.group(1))
        return FolderRecord(
            folder_name=folder_name,
            date=f"{year}-01-01",
            full_path=full_path,
            folder_type=FOLDER_TYPE_YEAR,
            valid=True,
            year=year,
            month=1,
            day=1,
        )

    rule, tokens = match_date_rule(folder_name, rules)
    if rule is None:
        return FolderRecord(
            folder_name=folder_name,
            date=NO_DATE_FOUND,
            full_path=full_path,
            folder_type=FOLDER_TYPE_NON_DATE,
            valid=False,
        )

    year_token, month_token, day_token = tokens
    year = expand_year(year_token)
    month = int(month_token)
    day = int(day_token)
    try:
        date = datetime.date(year, month, day).isoformat()
        valid = True
    except ValueError as e:
        # Keep the raw tokens so the folder can be found and renamed by hand
        date = f"{year}-{month_token}-{day_token} ({INVALID_DATE}: {e})"
        valid = False

    return FolderRecord(
        folder_name=folder_name,
        date=date,
        full_path=full_path,
        folder_type=rule.folder_type,
        valid=valid,
        year=year,
        month=month,
        day=day,
    )


def _list_subdirectories(directory, sort):
    """Return (name, path) for each subdirectory, or None if unreadable."""
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        logger.warning("Error walking directory %s: %s", directory, e)
        return None

    subdirs = []
    for entry in entries:
        try:
            if entry.is_dir():
                subdirs.append((entry.name, entry.path))
        except OSError as e:
            logger.warning("Cannot stat %s: %s", entry.path, e)
    if sort:
        subdirs.sort()
    return subdirs


def extract_dates(root_directory, sort=False, rules=None):
    """Walk root_directory and return one FolderRecord per subdirectory.

    Records come out depth-first, pre-order, in filesystem enumeration
    order (pass sort=True to order each listing by name instead).
    Unreadable directories are logged and skipped; the walk continues
    with their siblings.
    """
    root = os.path.abspath(root_directory)
    results = []
    visited = set()

    # (name, path) pairs, pushed reversed so siblings pop in listing order
    stack = [(None, root)]
    while stack:
        name, directory = stack.pop()
        if name is not None:
            results.append(classify_folder_name(name, directory, rules))

        real = os.path.realpath(directory)
        if real in visited:
            logger.debug("Skipping already visited directory %s", directory)
            continue
        visited.add(real)

        subdirs = _list_subdirectories(directory, sort)
        if subdirs:
            stack.extend(reversed(subdirs))
    logger.info("Extracted %d folder records from %s", len(results), root)
    return results
