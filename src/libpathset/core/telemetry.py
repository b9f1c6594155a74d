"""
Structured telemetry for library resolution.

This module provides structured logging capabilities for understanding:
- Which platforms and library names are being searched for
- How many candidate paths each search probed
- Searches that found nothing, and platforms with no templates at all
"""
import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class TelemetryLevel(Enum):
    """Telemetry verbosity levels."""
    INFO = "info"
    DEBUG = "debug"


class ResolutionOutcome(Enum):
    """Result of a single find call."""
    FOUND = "found"              # At least one candidate exists
    MISSING = "missing"          # Platform supported, no candidate exists
    UNSUPPORTED = "unsupported"  # No pattern matched the OS


@dataclass
class ResolutionEvent:
    """
    A single telemetry event capturing one library search.

    Attributes:
        timestamp: ISO 8601 timestamp of event
        os_name: OS identifier the patterns were matched against
        names: Library names substituted for [NAME]
        outcome: Resolution outcome (found, missing, unsupported)
        candidates: Number of candidate paths probed
        found: Candidate paths that exist
        elapsed_ms: Search duration in milliseconds
    """
    timestamp: str
    os_name: str
    names: List[str]
    outcome: str
    candidates: int = 0
    found: List[str] = field(default_factory=list)
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for logging."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert event to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def to_keyvalue(self) -> str:
        """Convert event to key=value format."""
        pairs = []
        for key, value in self.to_dict().items():
            if isinstance(value, list):
                pairs.append(f"{key}={','.join(str(v) for v in value)}")
            else:
                pairs.append(f"{key}={value}")
        return " ".join(pairs)


@dataclass
class ResolutionStats:
    """
    Aggregated statistics for resolution analysis.

    Useful for tests and runtime monitoring.
    """
    total_searches: int = 0
    total_candidates: int = 0
    total_found: int = 0
    total_elapsed_time: float = 0.0
    outcomes_by_type: Dict[str, int] = field(default_factory=dict)
    searches_by_os: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        avg_latency = (
            self.total_elapsed_time / self.total_searches
            if self.total_searches > 0
            else 0.0
        )

        return {
            "total_searches": self.total_searches,
            "total_candidates": self.total_candidates,
            "total_found": self.total_found,
            "avg_latency_ms": round(avg_latency, 2),
            "outcomes_by_type": self.outcomes_by_type,
            "searches_by_os": self.searches_by_os,
        }


class ResolutionRecorder:
    """
    Records and emits structured telemetry for library searches.

    Features:
    - Structured logging in JSON or key=value format
    - Configurable verbosity (info/debug)
    - Optional in-memory statistics collection
    - Thread-safe operation
    """

    def __init__(
        self,
        level: TelemetryLevel = TelemetryLevel.INFO,
        format_json: bool = True,
        collect_stats: bool = False,
        keep_events: bool = False,
    ):
        """
        Initialize telemetry recorder.

        Args:
            level: Logging verbosity level
            format_json: If True, log as JSON; otherwise use key=value
            collect_stats: If True, collect in-memory statistics
            keep_events: If True, keep every recorded event (for tests)
        """
        self.level = level
        self.format_json = format_json
        self.collect_stats = collect_stats
        self.keep_events = keep_events

        self._stats = ResolutionStats()
        self._stats_lock = threading.Lock()

        self._events: List[ResolutionEvent] = []
        self._events_lock = threading.Lock()

    def record(self, event: ResolutionEvent) -> None:
        """
        Record a telemetry event.

        Args:
            event: Event to record
        """
        if self.format_json:
            log_message = event.to_json()
        else:
            log_message = event.to_keyvalue()

        if self.level == TelemetryLevel.DEBUG:
            logger.debug(log_message)
        elif event.outcome in (
            ResolutionOutcome.MISSING.value,
            ResolutionOutcome.UNSUPPORTED.value,
        ):
            logger.info(log_message)
        else:
            logger.debug(log_message)

        if self.collect_stats:
            with self._stats_lock:
                self._stats.total_searches += 1
                self._stats.total_candidates += event.candidates
                self._stats.total_found += len(event.found)
                self._stats.total_elapsed_time += event.elapsed_ms
                self._stats.outcomes_by_type[event.outcome] = (
                    self._stats.outcomes_by_type.get(event.outcome, 0) + 1
                )
                self._stats.searches_by_os[event.os_name] = (
                    self._stats.searches_by_os.get(event.os_name, 0) + 1
                )

        if self.keep_events:
            with self._events_lock:
                self._events.append(event)

    def get_stats(self) -> ResolutionStats:
        """Get current statistics snapshot."""
        with self._stats_lock:
            return ResolutionStats(
                total_searches=self._stats.total_searches,
                total_candidates=self._stats.total_candidates,
                total_found=self._stats.total_found,
                total_elapsed_time=self._stats.total_elapsed_time,
                outcomes_by_type=self._stats.outcomes_by_type.copy(),
                searches_by_os=self._stats.searches_by_os.copy(),
            )

    def reset_stats(self) -> None:
        """Reset statistics."""
        with self._stats_lock:
            self._stats = ResolutionStats()

    def get_events(self) -> List[ResolutionEvent]:
        """Get all recorded events (for testing)."""
        with self._events_lock:
            return self._events.copy()

    def clear_events(self) -> None:
        """Clear event history."""
        with self._events_lock:
            self._events.clear()


_global_recorder: Optional[ResolutionRecorder] = None
_recorder_lock = threading.Lock()


def get_recorder() -> ResolutionRecorder:
    """
    Get the global telemetry recorder instance.

    Creates a default recorder if none exists. The default logs every
    outcome at DEBUG; install an INFO-level recorder with set_recorder to
    surface misses and unsupported platforms.
    """
    global _global_recorder

    if _global_recorder is None:
        with _recorder_lock:
            if _global_recorder is None:
                _global_recorder = ResolutionRecorder(level=TelemetryLevel.DEBUG)

    return _global_recorder


def set_recorder(recorder: ResolutionRecorder) -> None:
    """
    Set the global telemetry recorder instance.

    Args:
        recorder: Recorder instance to use globally
    """
    global _global_recorder

    with _recorder_lock:
        _global_recorder = recorder


def create_event(
    os_name: str,
    names: List[str],
    outcome: ResolutionOutcome,
    candidates: int = 0,
    found: Optional[List[str]] = None,
    elapsed_ms: float = 0.0,
) -> ResolutionEvent:
    """
    Helper to create a resolution event with current timestamp.

    Args:
        os_name: OS identifier searched for
        names: Library names searched for
        outcome: Resolution outcome
        candidates: Number of candidate paths probed
        found: Existing paths
        elapsed_ms: Search duration in milliseconds

    Returns:
        ResolutionEvent ready for recording
    """
    from datetime import datetime, timezone

    return ResolutionEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        os_name=os_name,
        names=list(names),
        outcome=outcome.value,
        candidates=candidates,
        found=list(found or []),
        elapsed_ms=elapsed_ms,
    )
