"""Shared fixtures for gdshows tests."""

import csv

import pytest


def make_dirs(root, *paths):
    """Create each relative directory path under root."""
    for p in paths:
        (root / p).mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def library(tmp_path):
    """A small year-organized show library."""
    root = tmp_path / "library"
    make_dirs(
        root,
        "1977/gd77-05-08.sbd.miller",
        "1977/gd1977-05-09",
        "1978/gd78-01-22",
        "random_notes",
        "gd77-13-40sbd",
    )
    (root / "1977" / "gd77-05-08.sbd.miller" / "t01.flac").write_bytes(b"\0" * 10)
    return root


@pytest.fixture
def reference_csv(tmp_path):
    """Reference table with a descriptive column next to ShowDate."""
    path = tmp_path / "all_dates.csv"
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["ShowDate", "Venue"])
        writer.writeheader()
        writer.writerow({"ShowDate": "1977-05-08", "Venue": "Barton Hall"})
        writer.writerow({"ShowDate": "1977-05-09", "Venue": "Buffalo Memorial Auditorium"})
        writer.writerow({"ShowDate": "1977-05-11", "Venue": "St. Paul Civic Center"})
    return path
