"""
Unit tests for template resolution.

Tests cover:
- Pattern selection against the OS identifier
- Candidate expansion order and placeholder substitution
- Home directory and dot-segment normalization
- Existence filtering and unsupported platforms
- Concurrent probing via find_async
- Telemetry recorded for each search
"""
import os

import pytest

from libpathset.core import (
    PathSet,
    ResolutionOutcome,
    ResolutionRecorder,
    UnsupportedPlatformError,
    candidates,
    find,
    find_async,
    get_recorder,
    set_recorder,
)
from libpathset.core.resolver import expand, matching_templates


@pytest.fixture
def recorder():
    """Fixture installing a recorder that keeps events and stats."""
    previous = get_recorder()
    rec = ResolutionRecorder(collect_stats=True, keep_events=True)
    set_recorder(rec)
    yield rec
    set_recorder(previous)


@pytest.fixture
def libdir(tmp_path):
    """Fixture providing a directory holding libSDL.so and libfoo.so."""
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "libSDL.so").write_bytes(b"")
    (lib / "libfoo.so").write_bytes(b"")
    return lib


class TestMatchingTemplates:
    """Test pattern selection."""

    def test_selects_matching_patterns(self):
        ps = PathSet({"linux|bsd": ["/usr/lib/"], "darwin": ["/sw/lib/"]})
        assert matching_templates(ps.paths, "linux") == ["/usr/lib/"]
        assert matching_templates(ps.paths, "freebsd") == ["/usr/lib/"]

    def test_flattens_every_match(self):
        """Test all matching patterns contribute their templates."""
        ps = PathSet({"linux": ["/a/"], "lin": ["/b/", "/c/"], "darwin": ["/d/"]})
        assert matching_templates(ps.paths, "linux") == ["/a/", "/b/", "/c/"]

    def test_search_not_fullmatch(self):
        """Test patterns match anywhere in the identifier."""
        ps = PathSet({"bsd": ["/usr/lib/"]})
        assert matching_templates(ps.paths, "openbsd") == ["/usr/lib/"]


class TestExpand:
    """Test placeholder substitution and path expansion."""

    def test_substitutes_every_placeholder(self):
        assert expand("/Library/Frameworks/[NAME].framework/[NAME]", "SDL") == (
            "/Library/Frameworks/SDL.framework/SDL"
        )

    def test_template_without_placeholder(self):
        assert expand("/usr/lib/libz.so", "ignored") == "/usr/lib/libz.so"

    def test_normalizes_dot_segments(self):
        assert expand("/usr/local/../lib/./lib[NAME].so", "m") == "/usr/lib/libm.so"

    def test_expands_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand("~/lib/lib[NAME].so", "x") == str(tmp_path / "lib" / "libx.so")

    def test_relative_is_made_absolute(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert expand("vendor/lib[NAME].so", "x") == str(tmp_path / "vendor" / "libx.so")


class TestCandidates:
    """Test the candidate cross product."""

    def test_order_paths_then_files_then_names(self):
        """Test paths are the outer loop and names the inner loop."""
        ps = PathSet(
            {"linux": ["/a/", "/b/"]},
            {"linux": ["lib[NAME].so", "[NAME].so"]},
        )
        result = candidates(ps, "X", "Y", os_name="linux")
        assert result == [
            "/a/libX.so", "/a/libY.so", "/a/X.so", "/a/Y.so",
            "/b/libX.so", "/b/libY.so", "/b/X.so", "/b/Y.so",
        ]

    def test_single_name_is_not_split(self):
        """Test a multi-character name is substituted whole, as find does."""
        ps = PathSet({"a": ["/x/"]}, {"a": ["lib[NAME].so"]})
        assert candidates(ps, "SDL", os_name="a") == ["/x/libSDL.so"]
        assert ps.candidates("SDL", os_name="a") == candidates(ps, "SDL", os_name="a")

    def test_two_paths_one_file(self):
        ps = PathSet({"linux": ["/a/", "/b/"]}, {"linux": ["lib[NAME].so"]})
        assert candidates(ps, "X", os_name="linux") == ["/a/libX.so", "/b/libX.so"]

    def test_duplicates_are_kept(self):
        """Test overlapping patterns may yield the same path twice."""
        ps = PathSet(
            {"linux": ["/a/"], "lin": ["/a/"]},
            {"linux": ["lib[NAME].so"]},
        )
        assert candidates(ps, "X", os_name="linux") == ["/a/libX.so", "/a/libX.so"]

    def test_paths_only_yields_nothing(self):
        """Test a platform with paths but no files is supported but empty."""
        ps = PathSet({"linux": ["/a/"]})
        assert candidates(ps, "X", os_name="linux") == []

    def test_unsupported_platform(self):
        ps = PathSet({"linux": ["/a/"]}, {"linux": ["lib[NAME].so"]})
        with pytest.raises(UnsupportedPlatformError, match=r"Your OS \(haiku\)") as exc_info:
            candidates(ps, "X", os_name="haiku")
        assert exc_info.value.os_name == "haiku"

    def test_unsupported_is_lookup_error(self):
        with pytest.raises(LookupError):
            candidates(PathSet(), "X", os_name="linux")

    def test_defaults_to_running_os(self, monkeypatch):
        monkeypatch.setattr("libpathset.core.resolver.current_os", lambda: "plan9")
        ps = PathSet({"plan9": ["/a/"]}, {"plan9": ["[NAME]"]})
        assert candidates(ps, "X") == ["/a/X"]


class TestFind:
    """Test existence filtering."""

    def test_finds_existing_file(self, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        assert find(ps, "SDL", os_name="linux") == [str(libdir / "libSDL.so")]

    def test_missing_file_returns_empty(self, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        assert find(ps, "nothere", os_name="linux") == []

    def test_keeps_candidate_order(self, libdir, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "libfoo.so").write_bytes(b"")
        ps = PathSet(
            {"linux": [f"{other}/", f"{libdir}/"]},
            {"linux": ["lib[NAME].so"]},
        )
        assert find(ps, "SDL", "foo", os_name="linux") == [
            str(other / "libfoo.so"),
            str(libdir / "libSDL.so"),
            str(libdir / "libfoo.so"),
        ]

    def test_unsupported_platform_raises(self, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        with pytest.raises(UnsupportedPlatformError):
            find(ps, "SDL", os_name="windows")

    def test_pathset_method(self, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        assert ps.find("foo", os_name="linux") == [str(libdir / "libfoo.so")]
        assert ps.candidates("foo", os_name="linux") == [str(libdir / "libfoo.so")]

    def test_not_cached_between_calls(self, libdir):
        """Test a file created after a miss is found by the next call."""
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        assert find(ps, "late", os_name="linux") == []
        (libdir / "liblate.so").write_bytes(b"")
        assert find(ps, "late", os_name="linux") == [str(libdir / "liblate.so")]


class TestFindAsync:
    """Test concurrent existence probing."""

    @pytest.mark.asyncio
    async def test_same_result_as_find(self, libdir):
        ps = PathSet(
            {"linux": [f"{libdir}/", "/nonexistent/"]},
            {"linux": ["lib[NAME].so", "[NAME].so"]},
        )
        expected = find(ps, "foo", "SDL", os_name="linux")
        assert await find_async(ps, "foo", "SDL", os_name="linux") == expected
        assert expected == [str(libdir / "libfoo.so"), str(libdir / "libSDL.so")]

    @pytest.mark.asyncio
    async def test_pathset_method(self, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        assert await ps.find_async("SDL", os_name="linux") == [str(libdir / "libSDL.so")]

    @pytest.mark.asyncio
    async def test_unsupported_platform(self):
        with pytest.raises(UnsupportedPlatformError):
            await find_async(PathSet(), "SDL", os_name="linux")


class TestFindTelemetry:
    """Test the events recorded by find."""

    def test_found_event(self, recorder, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        find(ps, "SDL", "nope", os_name="linux")

        [event] = recorder.get_events()
        assert event.outcome == ResolutionOutcome.FOUND.value
        assert event.os_name == "linux"
        assert event.names == ["SDL", "nope"]
        assert event.candidates == 2
        assert event.found == [str(libdir / "libSDL.so")]

    def test_missing_event(self, recorder, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        find(ps, "nope", os_name="linux")
        assert recorder.get_events()[0].outcome == ResolutionOutcome.MISSING.value

    def test_unsupported_event(self, recorder):
        with pytest.raises(UnsupportedPlatformError):
            find(PathSet(), "SDL", os_name="linux")
        assert recorder.get_events()[0].outcome == ResolutionOutcome.UNSUPPORTED.value

    def test_stats(self, recorder, libdir):
        ps = PathSet({"linux": [f"{libdir}/"]}, {"linux": ["lib[NAME].so"]})
        find(ps, "SDL", os_name="linux")
        find(ps, "nope", os_name="linux")

        stats = recorder.get_stats()
        assert stats.total_searches == 2
        assert stats.total_candidates == 2
        assert stats.total_found == 1
        assert stats.searches_by_os == {"linux": 2}
