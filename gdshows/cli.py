"""CLI with subcommands for analyzing and browsing a concert library."""

import argparse
import logging
import sys

from gdshows.combine import coverage_by_year
from gdshows.config import DEFAULT_OUTPUT_FILENAME
from gdshows.export import default_output_path, write_csv, write_dicts, write_json
from gdshows.extract import extract_dates
from gdshows.library import (
    LibraryPathError,
    build_playlist,
    list_artists,
    list_shows,
    list_years,
    show_content,
    write_m3u,
)
from gdshows.reference import (
    ReferenceTableError,
    fetch_archive_show_dates,
    load_reference_csv,
)
from gdshows.session import AnalysisSession, RootDirectoryError


def _load_reference(args):
    if args.reference:
        return load_reference_csv(args.reference)
    print("Fetching show dates from the Internet Archive...", file=sys.stderr)
    return fetch_archive_show_dates(use_cache=not args.no_cache)


def print_statistics(stats, rows):
    print(f"  Total shows:        {stats.total_shows}")
    print(f"  Shows with folders: {stats.shows_with_folders}")
    print(f"  Missing shows:      {stats.missing_shows}")
    print(f"  Coverage:           {stats.coverage:.1f}%")
    print(f"  No date found:      {stats.no_date_found}")
    print(f"  Invalid dates:      {stats.invalid_dates}")
    print(f"  Unmatched dates:    {stats.unmatched_dates}")

    by_year = coverage_by_year(rows)
    if by_year:
        print("  By year:")
        for year, (known, found) in by_year.items():
            pct = found * 100 / known if known else 0
            print(f"    {year}  {found:>4}/{known:<4} {pct:5.1f}%")


def cmd_analyze(args):
    """Scan a library, reconcile against known shows, export the table."""
    reference = _load_reference(args)
    output = args.output or default_output_path(DEFAULT_OUTPUT_FILENAME)

    session = AnalysisSession()
    stats = session.analyze(args.root, reference,
                            output_path=None if output == "-" else output,
                            sort=args.sort)
    if output == "-":
        write_csv(session.rows, "-")
    else:
        print(f"Analysis complete - saved to {output}")
        print_statistics(stats, session.rows)

    if args.json:
        write_json(session.rows, stats, args.json)


def cmd_extract(args):
    """Dump the folder records of a library as CSV."""
    records = extract_dates(args.root, sort=args.sort)
    n = write_csv(records, args.output)
    if args.output != "-":
        print(f"Exported {n} folder records to {args.output}")


def cmd_reference(args):
    """Fetch the reference show-date table from the Internet Archive."""
    rows = fetch_archive_show_dates(use_cache=not args.no_cache,
                                    max_age_days=args.max_age)
    write_dicts(rows, args.output)
    if args.output != "-":
        print(f"Exported {len(rows)} show dates to {args.output}")


def cmd_artists(args):
    for artist in list_artists(args.library):
        print(f"  {artist['name']:30s} {artist['path']}")


def cmd_years(args):
    result = list_years(args.artist_dir)
    labels = result[result["structure"]]
    print(f"  Structure: {result['structure']}")
    for label in labels:
        print(f"    {label:20s} {result['paths'][label]}")


def cmd_shows(args):
    shows = list_shows(args.folder)
    if not shows:
        print("  No show folders found.")
        return
    for show in shows:
        print(f"  {show['label']}")


def cmd_content(args):
    content = show_content(args.show_dir)
    info = content["info"]
    if info.date:
        print(f"  Date:   {info.date}")
    if info.venue:
        print(f"  Venue:  {info.venue}")
    if info.city or info.state:
        print(f"  Where:  {', '.join(p for p in (info.city, info.state) if p)}")
    if info.recording_type:
        print(f"  Source: {info.recording_type}")
    if content["image"]:
        print(f"  Image:  {content['image']}")

    if content["text_files"]:
        print("  Text files:")
        for f in content["text_files"]:
            print(f"    {f['filename']:40s} {f['size']:>10}  ({f['location']})")
    if content["audio_by_format"]:
        print("  Audio:")
        for fmt, files in content["audio_by_format"].items():
            print(f"    {fmt}: {len(files)} tracks")
        for track in content["track_order"]:
            print(f"    {track['number']:>3}. {track['name']}")


def cmd_playlist(args):
    content = show_content(args.show_dir)
    tracks = build_playlist(content["sorted_playlist"], args.start)
    if not tracks:
        print("No audio files to play.", file=sys.stderr)
        sys.exit(1)
    path = write_m3u(tracks, directory=args.dir)
    print(path)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="gdshows",
        description="Grateful Dead show library browser",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="More logging (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze
    p_analyze = subparsers.add_parser("analyze", help="Match library folders to known shows")
    p_analyze.add_argument("root", help="Library root directory")
    source = p_analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--reference", help="CSV of known shows (needs a ShowDate column)")
    source.add_argument("--archive", action="store_true",
                        help="Use show dates from the Internet Archive")
    p_analyze.add_argument("-o", "--output", default=None,
                           help=f"Output CSV (default: ~/Downloads/{DEFAULT_OUTPUT_FILENAME}, "
                                "- for stdout)")
    p_analyze.add_argument("--json", default=None,
                           help="Also write rows + statistics as JSON")
    p_analyze.add_argument("--sort", action="store_true",
                           help="Walk folders in name order instead of disk order")
    p_analyze.add_argument("--no-cache", action="store_true",
                           help="Re-fetch archive show dates")
    p_analyze.set_defaults(func=cmd_analyze)

    # extract
    p_extract = subparsers.add_parser("extract", help="List folder dates only")
    p_extract.add_argument("root", help="Library root directory")
    p_extract.add_argument("-o", "--output", default="-",
                           help="Output CSV (default: stdout)")
    p_extract.add_argument("--sort", action="store_true",
                           help="Walk folders in name order instead of disk order")
    p_extract.set_defaults(func=cmd_extract)

    # reference
    p_ref = subparsers.add_parser("reference", help="Fetch known show dates")
    p_ref.add_argument("-o", "--output", default="-",
                       help="Output CSV (default: stdout)")
    p_ref.add_argument("--no-cache", action="store_true",
                       help="Ignore the local cache")
    p_ref.add_argument("--max-age", type=int, default=0,
                       help="Max cache age in days (0 = never expire)")
    p_ref.set_defaults(func=cmd_reference)

    # browsing
    p_artists = subparsers.add_parser("artists", help="List artists in a library")
    p_artists.add_argument("library")
    p_artists.set_defaults(func=cmd_artists)

    p_years = subparsers.add_parser("years", help="List years (or sub-artists) of an artist")
    p_years.add_argument("artist_dir")
    p_years.set_defaults(func=cmd_years)

    p_shows = subparsers.add_parser("shows", help="List show folders")
    p_shows.add_argument("folder")
    p_shows.set_defaults(func=cmd_shows)

    p_content = subparsers.add_parser("content", help="Show files and info for a show")
    p_content.add_argument("show_dir")
    p_content.set_defaults(func=cmd_content)

    p_playlist = subparsers.add_parser("playlist", help="Write an M3U for a show")
    p_playlist.add_argument("show_dir")
    p_playlist.add_argument("--start", type=int, default=0,
                            help="Track index to start from (default: 0)")
    p_playlist.add_argument("--dir", default=None,
                            help="Directory for the playlist file (default: temp dir)")
    p_playlist.set_defaults(func=cmd_playlist)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        args.func(args)
    except (ReferenceTableError, RootDirectoryError, LibraryPathError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
