"""Allow running as `python -m viz`."""

import argparse
import sys

from gdshows.combine import combine_show_tables
from gdshows.extract import extract_dates
from gdshows.reference import ReferenceTableError, load_reference_csv
from viz.coverage import OUTPUT_DIR, main

parser = argparse.ArgumentParser(prog="python -m viz")
parser.add_argument("root", help="Library root directory")
parser.add_argument("--reference", required=True,
                    help="CSV of known shows (needs a ShowDate column)")
parser.add_argument("-o", "--output-dir", default=str(OUTPUT_DIR),
                    help="Directory for the PNG files (default: ./output)")
args = parser.parse_args()

try:
    reference = load_reference_csv(args.reference)
except ReferenceTableError as e:
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(1)

main(combine_show_tables(reference, extract_dates(args.root)), args.output_dir)
