"""
End-to-end test: stock templates + YAML config + resolution.

This test verifies the full flow a library binding goes through:
- Start from the stock system templates
- Layer a deployment's YAML config on top
- Adjust the result with the merge operations
- Resolve library names against a fake install tree
- Inspect the telemetry captured for each search
"""
import logging

import pytest
import yaml

from libpathset.core import (
    ResolutionOutcome,
    ResolutionRecorder,
    UnsupportedPlatformError,
    get_recorder,
    set_recorder,
)
from libpathset.defaults.system import configured_pathset

logger = logging.getLogger(__name__)


@pytest.fixture
def recorder():
    """Install a recorder that keeps events for inspection."""
    previous = get_recorder()
    rec = ResolutionRecorder(collect_stats=True, keep_events=True)
    set_recorder(rec)
    yield rec
    set_recorder(previous)


@pytest.fixture
def install_tree(tmp_path):
    """Create a vendor lib dir and a home-relative lib dir."""
    vendor = tmp_path / "opt" / "vendor" / "lib"
    vendor.mkdir(parents=True)
    (vendor / "libpstest_ttf.so.2").write_bytes(b"")
    (vendor / "libpstest.so.2").write_bytes(b"")

    home = tmp_path / "home"
    (home / ".local" / "lib").mkdir(parents=True)
    (home / ".local" / "lib" / "libpstest.so").write_bytes(b"")
    return tmp_path


@pytest.fixture
def config_file(install_tree):
    """Write a config that prepends the vendor dir and a versioned file name."""
    path = install_tree / "pathsets.yml"
    path.write_text(yaml.safe_dump({
        "policy": "prepend",
        "paths": {"linux|bsd": [f"{install_tree}/opt/vendor/lib/"]},
        "files": {"linux|bsd": ["lib[NAME].so.2"]},
    }))
    return path


def test_locate_libraries(install_tree, config_file, recorder, monkeypatch):
    """Libraries are found in priority order across all template sources."""
    monkeypatch.setenv("HOME", str(install_tree / "home"))

    pathset = configured_pathset(config_file)
    pathset.append_paths({"linux|bsd": ["~/.local/lib/"]})

    found = pathset.find("pstest", os_name="linux")

    # Vendor dir comes first (prepended), versioned name first within it.
    assert found[0] == str(install_tree / "opt" / "vendor" / "lib" / "libpstest.so.2")
    assert found[-1] == str(install_tree / "home" / ".local" / "lib" / "libpstest.so")

    ttf = pathset.find("pstest_ttf", os_name="linux")
    assert ttf == [str(install_tree / "opt" / "vendor" / "lib" / "libpstest_ttf.so.2")]

    stats = recorder.get_stats()
    assert stats.total_searches == 2
    assert stats.outcomes_by_type == {ResolutionOutcome.FOUND.value: 2}


def test_removing_vendor_dir(install_tree, config_file, recorder):
    """Removing the vendor templates again leaves only system locations."""
    pathset = configured_pathset(config_file)
    trimmed = pathset.removed_paths([f"{install_tree}/opt/vendor/lib/"])

    assert trimmed.find("pstest_ttf", os_name="linux") == []
    assert pathset.find("pstest_ttf", os_name="linux") != []

    outcomes = [event.outcome for event in recorder.get_events()]
    assert outcomes == [ResolutionOutcome.MISSING.value, ResolutionOutcome.FOUND.value]


def test_unsupported_platform(config_file, recorder):
    """A platform with no templates is reported, not treated as a miss."""
    pathset = configured_pathset(config_file).delete("windows")

    with pytest.raises(UnsupportedPlatformError, match="windows"):
        pathset.find("pstest", os_name="windows")

    assert recorder.get_events()[-1].outcome == ResolutionOutcome.UNSUPPORTED.value
