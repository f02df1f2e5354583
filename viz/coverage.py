"""Coverage charts for an analyzed library.

Usage:
    python -m viz ROOT --reference all_dates.csv
"""

from collections import Counter
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from gdshows.combine import KIND_MATCHED, KIND_UNDATED, KIND_UNMATCHED, coverage_by_year

OUTPUT_DIR = Path.cwd() / "output"

KIND_COLORS = {
    KIND_MATCHED: "#2e8b57",
    KIND_UNMATCHED: "#e0a030",
    KIND_UNDATED: "#b0b0b0",
}


def plot_coverage_by_year(rows, output_path):
    """Known vs. found shows per year, with coverage % on a second axis."""
    by_year = coverage_by_year(rows)
    if not by_year:
        print("  No reference shows to plot.")
        return None

    years = list(by_year)
    known = np.array([by_year[y][0] for y in years])
    found = np.array([by_year[y][1] for y in years])
    pct = np.divide(found * 100.0, known, out=np.zeros(len(years)), where=known > 0)
    x = np.arange(len(years))

    fig, ax = plt.subplots(figsize=(max(8, len(years) * 0.5), 5))
    width = 0.4
    ax.bar(x - width / 2, known, width, color="#4a6fa5", label="Known shows")
    ax.bar(x + width / 2, found, width, color=KIND_COLORS[KIND_MATCHED],
           label="In library")
    ax.set_xticks(x)
    ax.set_xticklabels([str(y) for y in years], rotation=60, fontsize=8)
    ax.set_ylabel("Shows")
    ax.set_title("Library coverage by year")

    ax2 = ax.twinx()
    ax2.plot(x, pct, color="#c0392b", marker="o", linewidth=1.5, label="Coverage %")
    ax2.set_ylim(0, 105)
    ax2.set_ylabel("Coverage (%)")

    handles = ax.get_legend_handles_labels()[0] + ax2.get_legend_handles_labels()[0]
    ax.legend(handles=handles, loc="upper left", fontsize=8, framealpha=0.9)
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    print(f"  {Path(output_path).name}")
    return output_path


def plot_folder_outcomes(rows, output_path):
    """How the scanned folders were classified: matched, unmatched, undated."""
    counts = Counter(r.kind for r in rows if r.folder_name)
    kinds = [k for k in (KIND_MATCHED, KIND_UNMATCHED, KIND_UNDATED) if counts[k]]
    if not kinds:
        print("  No folders to plot.")
        return None

    fig, ax = plt.subplots(figsize=(6, 4))
    y = np.arange(len(kinds))
    values = [counts[k] for k in kinds]
    ax.barh(y, values, color=[KIND_COLORS[k] for k in kinds])
    ax.set_yticks(y)
    ax.set_yticklabels(kinds)
    ax.invert_yaxis()
    for yi, v in zip(y, values):
        ax.text(v, yi, f" {v}", va="center", fontsize=8)
    ax.set_xlabel("Folders")
    ax.set_title("Folder outcomes")
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    print(f"  {Path(output_path).name}")
    return output_path


def main(rows, output_dir=OUTPUT_DIR):
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    print("Generating charts...")
    plot_coverage_by_year(rows, output_dir / "coverage_by_year.png")
    plot_folder_outcomes(rows, output_dir / "folder_outcomes.png")
    print(f"Done. Charts saved to {output_dir}/")
