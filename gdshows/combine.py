"""Reconcile extracted folder records against the reference show table.

Output rows come in three groups, in this order:
  1. one row per reference show, with the first folder whose date equals
     its ShowDate copied in ("matched") or folder fields left empty
     ("missing");
  2. one "Unmatched: <date>" row per leftover folder with a real date;
  3. one row per leftover folder whose date is a sentinel
     ("No date found" / "... (Invalid date: ...)").
Every reference row and every folder record appears exactly once.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field

from gdshows.config import (
    FOLDER_COLUMNS,
    INVALID_DATE,
    NO_DATE_FOUND,
    SHOW_DATE_COLUMN,
    SHOWS_PER_DATE_COLUMN,
    SHOWS_PER_YEAR_COLUMN,
    UNMATCHED_PREFIX,
)

KIND_MATCHED = "matched"
KIND_MISSING = "missing"
KIND_UNMATCHED = "unmatched"
KIND_UNDATED = "undated"


def is_sentinel_date(value):
    """True for "No date found" and anything tagged "Invalid date"."""
    return value == NO_DATE_FOUND or INVALID_DATE in value


@dataclass
class ShowRow:
    show_date: str
    kind: str
    reference: dict = field(default_factory=dict)
    flac_show_date: str = None
    folder_name: str = None
    year: int = None
    month: int = None
    day: int = None
    full_path: str = None
    folder_type: str = None
    shows_per_year: int = None
    shows_per_date: int = None

    def fill_from(self, record):
        self.flac_show_date = record.date
        self.folder_name = record.folder_name
        self.year = record.year
        self.month = record.month
        self.day = record.day
        self.full_path = record.full_path
        self.folder_type = record.folder_type

    def to_dict(self):
        """Flatten to the CSV column layout (reference columns first)."""
        row = {SHOW_DATE_COLUMN: self.show_date}
        row.update(self.reference)
        values = (self.flac_show_date, self.folder_name, self.year,
                  self.full_path, self.folder_type, self.month, self.day)
        row.update(zip(FOLDER_COLUMNS, values))
        row[SHOWS_PER_YEAR_COLUMN] = self.shows_per_year
        row[SHOWS_PER_DATE_COLUMN] = self.shows_per_date
        return row


@dataclass
class Statistics:
    total_shows: int
    shows_with_folders: int
    missing_shows: int
    coverage: float
    no_date_found: int
    invalid_dates: int
    unmatched_dates: int

    def to_dict(self):
        return {
            "totalShows": self.total_shows,
            "showsWithFolders": self.shows_with_folders,
            "missingShows": self.missing_shows,
            "coverage": self.coverage,
            "noDateFound": self.no_date_found,
            "invalidDates": self.invalid_dates,
            "unmatchedDates": self.unmatched_dates,
        }


def _reference_row(reference):
    extra = {k: v for k, v in reference.items() if k != SHOW_DATE_COLUMN}
    return ShowRow(show_date=reference.get(SHOW_DATE_COLUMN) or "", kind=KIND_MISSING,
                   reference=extra)


def combine_show_tables(reference_shows, folder_records):
    """Join reference shows with folder records on the exact date string.

    When several folders share a date, the first one in extraction order
    is attached to the reference row; the others fall through to the
    "Unmatched:" group.
    """
    rows = [_reference_row(ref) for ref in reference_shows]

    # date -> record indices, in extraction order
    by_date = defaultdict(list)
    for i, record in enumerate(folder_records):
        if not record.is_sentinel:
            by_date[record.date].append(i)

    consumed = set()
    for row in rows:
        candidates = by_date.get(row.show_date)
        if not candidates:
            continue
        first = candidates[0]
        row.fill_from(folder_records[first])
        row.kind = KIND_MATCHED
        consumed.add(first)

    year_counts = Counter(row.year for row in rows if row.year is not None)
    for row in rows:
        if row.year is not None:
            row.shows_per_year = year_counts[row.year]

    for row in rows:
        if is_sentinel_date(row.show_date):
            continue
        count = len(by_date.get(row.show_date, ()))
        row.shows_per_date = count or None

    unmatched = []
    undated = []
    for i, record in enumerate(folder_records):
        if i in consumed:
            continue
        if record.is_sentinel:
            row = ShowRow(show_date=record.date, kind=KIND_UNDATED,
                          flac_show_date=record.date,
                          folder_name=record.folder_name,
                          full_path=record.full_path,
                          folder_type=record.folder_type)
            # Only carry over the parts of the date that were parsed
            row.year = record.year or None
            row.month = record.month or None
            row.day = record.day or None
            undated.append(row)
        else:
            row = ShowRow(show_date=f"{UNMATCHED_PREFIX}{record.date}",
                          kind=KIND_UNMATCHED)
            row.fill_from(record)
            unmatched.append(row)

    return rows + unmatched + undated


def compute_statistics(rows):
    """Summarize a reconciled table.

    Sentinel and "Unmatched:" rows are taken out of the show totals.
    missing_shows is the raw difference over every row, which comes out
    the same because each excluded row also carries a folder.
    """
    total = len(rows)
    with_folders = sum(1 for r in rows if r.folder_name)
    no_date_found = sum(1 for r in rows if r.show_date == NO_DATE_FOUND)
    invalid_dates = sum(1 for r in rows if INVALID_DATE in r.show_date)
    unmatched_dates = sum(1 for r in rows if r.show_date.startswith(UNMATCHED_PREFIX.strip()))
    excluded = no_date_found + invalid_dates + unmatched_dates

    denominator = total - excluded
    if denominator > 0:
        coverage = round((with_folders - excluded) / denominator * 100, 1)
    else:
        coverage = 0.0

    return Statistics(
        total_shows=denominator,
        shows_with_folders=with_folders - excluded,
        missing_shows=total - with_folders,
        coverage=coverage,
        no_date_found=no_date_found,
        invalid_dates=invalid_dates,
        unmatched_dates=unmatched_dates,
    )


def coverage_by_year(rows):
    """Per-year (known, found) counts over the reference rows.

    The year comes from ShowDate, so reference shows with no folder are
    still counted as known.
    """
    counts = {}
    for row in rows:
        if row.kind not in (KIND_MATCHED, KIND_MISSING):
            continue
        try:
            year = int(row.show_date[:4])
        except ValueError:
            continue
        known, found = counts.get(year, (0, 0))
        counts[year] = (known + 1, found + (row.kind == KIND_MATCHED))
    return dict(sorted(counts.items()))
