"""Smoke tests for the coverage charts."""

import pytest

pytest.importorskip("matplotlib")

from gdshows.combine import combine_show_tables
from gdshows.extract import extract_dates
from gdshows.reference import load_reference_csv
from viz.coverage import main, plot_coverage_by_year, plot_folder_outcomes


@pytest.fixture
def rows(library, reference_csv):
    return combine_show_tables(load_reference_csv(reference_csv), extract_dates(library))


def test_writes_both_charts(rows, tmp_path):
    main(rows, tmp_path / "charts")
    assert (tmp_path / "charts" / "coverage_by_year.png").exists()
    assert (tmp_path / "charts" / "folder_outcomes.png").exists()


def test_nothing_to_plot(tmp_path):
    assert plot_coverage_by_year([], tmp_path / "a.png") is None
    assert plot_folder_outcomes([], tmp_path / "b.png") is None
