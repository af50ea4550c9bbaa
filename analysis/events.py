"""
Event Model for the Deadlock Visualizer.

Defines event types for tracking scenario playback.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EventType(Enum):
    """Types of events during playback."""
    STEP = "step"
    EDGE_ADDED = "edge_added"
    EDGE_IGNORED = "edge_ignored"
    DEADLOCK = "deadlock"
    NO_CYCLE = "no_cycle"
    RESET = "reset"


@dataclass
class PlaybackEvent:
    """
    Represents a single event during scenario playback.

    Attributes:
        step: Playback step when the event occurred
        event_type: Type of event
        message: Human-readable description
        source: Edge source node id (edge events only)
        target: Edge target node id (edge events only)
        cycle: Node ids on the detected cycle (deadlock events only)
    """
    step: int
    event_type: EventType
    message: str = ""
    source: Optional[str] = None
    target: Optional[str] = None
    cycle: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"Step {self.step}:"

        if self.event_type == EventType.EDGE_ADDED:
            return f"{base} edge {self.source} -> {self.target} added ({self.message})"
        elif self.event_type == EventType.EDGE_IGNORED:
            return f"{base} edge {self.source} -> {self.target} ignored ({self.message})"
        elif self.event_type == EventType.DEADLOCK:
            return f"{base} DEADLOCK DETECTED - cycle: {' -> '.join(self.cycle)}"
        elif self.event_type == EventType.NO_CYCLE:
            return f"{base} marked as deadlocked but no cycle found ({self.message})"
        elif self.event_type == EventType.RESET:
            return f"{base} RESET ({self.message})"
        else:
            return f"{base} {self.message}"


@dataclass
class EventLog:
    """Collection of playback events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: PlaybackEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def clear(self) -> None:
        self.events = []

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
