"""Tests for library browsing: artists, years, shows, files, playlists."""

import pytest

from gdshows.library import (
    LibraryPathError,
    artist_display_name,
    build_playlist,
    find_audio_files,
    find_image_file,
    find_text_files,
    format_file_size,
    is_year_structured,
    list_artists,
    list_shows,
    list_years,
    read_text_file,
    show_content,
    write_m3u,
)
from tests.conftest import make_dirs


@pytest.fixture
def show(tmp_path):
    """A two-disc show folder with info files and artwork."""
    root = make_dirs(tmp_path / "gd77-05-08.sbd.miller", "disc1", "disc2")
    (root / "info.txt").write_text("Barton Hall, Cornell University")
    (root / ".hidden.txt").write_text("x")
    (root / "shntool_len.txt").write_text("x")
    (root / "disc1" / "notes.txt").write_text("lineage")
    (root / "disc1" / "gd77-05-08d1t02.flac").write_bytes(b"\0" * 2048)
    (root / "disc1" / "gd77-05-08d1t01.flac").write_bytes(b"\0" * 1024)
    (root / "disc2" / "gd77-05-08d2t01.mp3").write_bytes(b"\0" * 100)
    (root / "disc2" / "cover.JPG").write_bytes(b"\xff\xd8")
    return root


class TestArtists:

    def test_display_name_overrides(self):
        assert artist_display_name("grateful_dead_flac") == "Grateful Dead"
        assert artist_display_name("Other_FLAC") == "Other Flac"

    def test_display_name_fallback(self):
        assert artist_display_name("jerry_garcia_band") == "Jerry Garcia Band"

    def test_list_artists_sorted_and_hidden_skipped(self, tmp_path):
        make_dirs(tmp_path, "other_flac", "grateful_dead", "allman_brothers", ".Trash")
        (tmp_path / "readme.txt").write_text("x")
        names = [a["name"] for a in list_artists(tmp_path)]
        assert names == ["Allman Brothers", "Grateful Dead", "Other Flac"]

    def test_missing_library(self, tmp_path):
        with pytest.raises(LibraryPathError, match="Music library path not found"):
            list_artists(tmp_path / "nope")


class TestYears:

    def test_is_year_structured_majority(self):
        assert is_year_structured(["1977", "1978", "misc"]) is True

    def test_is_year_structured_many_years(self):
        names = [str(y) for y in range(1970, 1975)] + [f"band{i}" for i in range(10)]
        assert is_year_structured(names) is True

    def test_is_year_structured_minority(self):
        assert is_year_structured(["1977", "misc", "other"]) is False

    def test_is_year_structured_none(self):
        assert is_year_structured([]) is False
        assert is_year_structured(["Phish"]) is False

    def test_year_structure(self, tmp_path):
        make_dirs(tmp_path, "1978", "1977", "misc")
        result = list_years(tmp_path)
        assert result["structure"] == "years"
        assert result["years"] == ["1977", "1978"]
        assert result["paths"]["1977"] == str(tmp_path / "1977")

    def test_artist_structure(self, tmp_path):
        make_dirs(tmp_path, "Phish", "Allman Brothers")
        result = list_years(tmp_path)
        assert result["structure"] == "artists"
        assert result["artists"] == ["Allman Brothers", "Phish"]
        assert result["paths"]["Phish"] == str(tmp_path / "Phish")

    def test_missing_artist_dir(self, tmp_path):
        with pytest.raises(LibraryPathError):
            list_years(tmp_path / "nope")


class TestShows:

    def test_sorted_visible_folders(self, tmp_path):
        make_dirs(tmp_path, "gd77-05-09", "gd77-05-08", ".DS_Store_dir")
        (tmp_path / "notes.txt").write_text("x")
        assert [s["label"] for s in list_shows(tmp_path)] == ["gd77-05-08", "gd77-05-09"]

    def test_missing_folder(self, tmp_path):
        with pytest.raises(LibraryPathError):
            list_shows(tmp_path / "nope")


class TestShowFiles:

    def test_text_files(self, show):
        files = find_text_files(show)
        assert [(f["filename"], f["location"]) for f in files] == [
            ("info.txt", "root"),
            ("notes.txt", "subfolder"),
        ]
        assert files[1]["relative_path"].replace("\\", "/") == "disc1/notes.txt"

    def test_audio_files(self, show):
        files = find_audio_files(show)
        assert sorted((f["filename"], f["format"]) for f in files) == [
            ("gd77-05-08d1t01.flac", "flac"),
            ("gd77-05-08d1t02.flac", "flac"),
            ("gd77-05-08d2t01.mp3", "mp3"),
        ]
        assert all(f["location"] == "subfolder" for f in files)

    def test_image_file(self, show):
        assert find_image_file(show) == str(show / "disc2" / "cover.JPG")

    def test_missing_folder_is_empty(self, tmp_path):
        assert find_text_files(tmp_path / "nope") == []
        assert find_audio_files(tmp_path / "nope") == []
        assert find_image_file(tmp_path / "nope") is None

    def test_read_text_file(self, show):
        assert read_text_file(show / "info.txt") == "Barton Hall, Cornell University"

    def test_read_missing_text_file(self, tmp_path):
        with pytest.raises(LibraryPathError):
            read_text_file(tmp_path / "missing.txt")


class TestFormatFileSize:

    def test_zero(self):
        assert format_file_size(0) == "0 B"

    def test_bytes(self):
        assert format_file_size(512) == "512 B"

    def test_two_decimals_below_ten(self):
        assert format_file_size(1536) == "1.50 KB"

    def test_one_decimal_below_hundred(self):
        assert format_file_size(15360) == "15.0 KB"

    def test_rounded_above_hundred(self):
        assert format_file_size(153600) == "150 KB"

    def test_gigabytes(self):
        assert format_file_size(5 * 1024 ** 3) == "5.00 GB"


class TestShowContent:

    def test_playlist_and_grouping(self, show):
        content = show_content(show)
        assert [t["name"] for t in content["track_order"]] == [
            "gd77-05-08d1t01.flac",
            "gd77-05-08d1t02.flac",
            "gd77-05-08d2t01.mp3",
        ]
        assert content["track_order"][0]["number"] == 1
        assert content["sorted_playlist"][0] == str(show / "disc1" / "gd77-05-08d1t01.flac")
        assert sorted(content["audio_by_format"]) == ["FLAC", "MP3"]
        assert len(content["audio_by_format"]["FLAC"]) == 2
        assert content["audio_files"][0]["size"].endswith("KB")

    def test_text_files_and_image(self, show):
        content = show_content(show)
        assert [f["filename"] for f in content["text_files"]] == ["info.txt", "notes.txt"]
        assert content["image"].endswith("cover.JPG")

    def test_info_from_folder_name(self, show):
        info = show_content(show)["info"]
        assert info.recording_type == "SBD"

    def test_missing_show(self, tmp_path):
        with pytest.raises(LibraryPathError, match="Show folder not found"):
            show_content(tmp_path / "nope")


class TestPlaylist:

    def test_rotates_to_start(self):
        paths = ["/s/t01.flac", "/s/t02.flac", "/s/t03.flac"]
        assert build_playlist(paths, 1) == ["/s/t02.flac", "/s/t03.flac", "/s/t01.flac"]

    def test_drops_resource_forks_and_hidden(self):
        paths = ["/s/t01.flac", "/s/._t01.flac", "/s/.t02.flac", "/s/t02.flac"]
        assert build_playlist(paths) == ["/s/t01.flac", "/s/t02.flac"]

    def test_start_clamped(self):
        paths = ["/s/a.flac", "/s/b.flac", "/s/c.flac"]
        assert build_playlist(paths, 99) == ["/s/c.flac", "/s/a.flac", "/s/b.flac"]
        assert build_playlist(paths, -5) == paths
        assert build_playlist(paths, "bogus") == paths

    def test_empty(self):
        assert build_playlist([]) == []
        assert build_playlist(["/s/._a.flac"]) == []

    def test_write_m3u(self, tmp_path):
        path = write_m3u(["/s/a.flac", "/s/b.flac"], directory=tmp_path)
        assert path.endswith(".m3u")
        with open(path) as f:
            assert f.read().splitlines() == ["/s/a.flac", "/s/b.flac"]


class TestUnreadableFolders:

    def test_unreadable_folder_raises_library_error(self, tmp_path, monkeypatch):
        make_dirs(tmp_path, "1977")

        def fake_scandir(path):
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr("gdshows.library.os.scandir", fake_scandir)
        with pytest.raises(LibraryPathError, match="Cannot read folder"):
            list_artists(tmp_path)
        with pytest.raises(LibraryPathError, match="Cannot read folder"):
            list_years(tmp_path)
        with pytest.raises(LibraryPathError, match="Cannot read folder"):
            list_shows(tmp_path / "1977")
