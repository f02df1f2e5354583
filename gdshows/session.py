"""Caller-owned analysis state.

The extractor and reconciler are pure; whatever needs to remember the
last scan (a CLI run, a UI, a notebook) holds an AnalysisSession and
passes it around explicitly.
"""

import logging
import os
from dataclasses import dataclass, field

from gdshows.combine import combine_show_tables, compute_statistics
from gdshows.export import default_output_path, write_csv
from gdshows.extract import extract_dates

logger = logging.getLogger(__name__)


class RootDirectoryError(Exception):
    """The library root to analyze does not exist."""


@dataclass
class AnalysisSession:
    root_directory: str = ""
    rows: list = field(default_factory=list)
    statistics: object = None
    output_path: str = None

    @property
    def analyzed(self):
        return self.statistics is not None

    def analyze(self, root_directory, reference_shows, output_filename=None,
                output_path=None, sort=False):
        """Scan root_directory, reconcile against reference_shows, optionally export.

        output_filename is resolved under ~/Downloads; output_path is used
        as given. Returns the Statistics for this run.
        """
        self.root_directory = root_directory
        if not os.path.isdir(root_directory):
            raise RootDirectoryError(
                f"Could not find the root directory: {root_directory}")

        records = extract_dates(root_directory, sort=sort)
        self.rows = combine_show_tables(reference_shows, records)
        self.statistics = compute_statistics(self.rows)
        logger.info("Analyzed %s: %d folders, %d rows, %.1f%% coverage",
                    root_directory, len(records), len(self.rows),
                    self.statistics.coverage)

        if output_path is None and output_filename:
            output_path = default_output_path(output_filename)
        if output_path:
            write_csv(self.rows, output_path)
        self.output_path = output_path
        return self.statistics

    def years(self):
        """Distinct years of the analyzed rows, ascending."""
        return sorted({row.year for row in self.rows if row.year})
