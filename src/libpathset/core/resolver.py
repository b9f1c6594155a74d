"""
Resolve path set templates into existing library files.

For every directory template (outer loop), filename template, and candidate
name (inner loop) that applies to the running OS, the placeholder [NAME] is
substituted and the result expanded to an absolute path. Only paths that
exist at call time are returned, in that same iteration order. Nothing is
cached between calls.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

from .errors import UnsupportedPlatformError
from .host import current_os
from .merge import TemplateSource
from .telemetry import ResolutionOutcome, create_event, get_recorder

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "[NAME]"


def matching_templates(templates, os_name: str) -> list[str]:
    """Flatten the template lists of every pattern that matches os_name."""
    return [
        template
        for pattern, values in templates.items()
        if pattern.search(os_name)
        for template in values
    ]


def expand(template: str, name: str) -> str:
    """
    Substitute name into a template and make it an absolute path.

    A leading "~" is expanded to the home directory and "." / ".." segments
    are normalized.
    """
    filled = template.replace(NAME_PLACEHOLDER, name)
    return os.path.abspath(os.path.expanduser(filled))


def candidates(
    pathset: TemplateSource,
    *names: str,
    os_name: str | None = None,
) -> list[str]:
    """
    Build every candidate path for the given names, before existence filtering.

    Args:
        pathset: Source of directory and filename templates
        *names: Library names to substitute for [NAME]
        os_name: OS identifier to match patterns against (defaults to the
                 running operating system)

    Returns:
        Absolute candidate paths, paths outer, then files, then names

    Raises:
        UnsupportedPlatformError: If no pattern in either mapping matches
    """
    if os_name is None:
        os_name = current_os()

    paths = matching_templates(pathset.paths, os_name)
    files = matching_templates(pathset.files, os_name)

    if not paths and not files:
        raise UnsupportedPlatformError(os_name)

    return [
        expand(path + file, name)
        for path in paths
        for file in files
        for name in names
    ]


def _record(os_name, names, probed, found, outcome, started) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    get_recorder().record(
        create_event(
            os_name=os_name,
            names=list(names),
            outcome=outcome,
            candidates=probed,
            found=found,
            elapsed_ms=elapsed_ms,
        )
    )


def _prepare(pathset, names, os_name):
    """Pick the OS and build the candidates, recording unsupported platforms."""
    if os_name is None:
        os_name = current_os()
    started = time.perf_counter()

    try:
        probe = candidates(pathset, *names, os_name=os_name)
    except UnsupportedPlatformError:
        _record(os_name, names, 0, [], ResolutionOutcome.UNSUPPORTED, started)
        raise
    return os_name, probe, started


def _finish(os_name, names, probe, exists, started) -> list[str]:
    """Keep the candidates flagged as existing and record the outcome."""
    found = [path for path, hit in zip(probe, exists) if hit]
    logger.debug(
        "Probed %d candidate(s) for %s on %s, %d exist",
        len(probe), names, os_name, len(found),
    )

    outcome = ResolutionOutcome.FOUND if found else ResolutionOutcome.MISSING
    _record(os_name, names, len(probe), found, outcome, started)
    return found


def find(pathset: TemplateSource, *names: str, os_name: str | None = None) -> list[str]:
    """
    Find existing files for the given names.

    Args:
        pathset: Source of directory and filename templates
        *names: Library names to substitute for [NAME]
        os_name: OS identifier (defaults to the running operating system)

    Returns:
        Existing absolute paths in candidate order, duplicates kept. An empty
        list means the platform is supported but nothing exists on disk.

    Raises:
        UnsupportedPlatformError: If no pattern in either mapping matches
    """
    os_name, probe, started = _prepare(pathset, names, os_name)
    exists = [Path(path).exists() for path in probe]
    return _finish(os_name, names, probe, exists, started)


async def find_async(
    pathset: TemplateSource,
    *names: str,
    os_name: str | None = None,
) -> list[str]:
    """
    Like find, but runs the existence probes concurrently in worker threads.

    The result order is the same as find's.
    """
    os_name, probe, started = _prepare(pathset, names, os_name)
    # gather() keeps argument order, so results line up with probe
    exists = await asyncio.gather(
        *(asyncio.to_thread(Path(path).exists) for path in probe)
    )
    return _finish(os_name, names, probe, exists, started)
