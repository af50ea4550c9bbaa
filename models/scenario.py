"""
Scenario model for the Deadlock Visualizer.

A scenario is a scripted sequence of graph edits used to animate a
classic deadlock (two processes, dining philosophers).
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class ScenarioStep:
    """
    One step of a scenario.

    Attributes:
        description: Text shown while the step is active
        edges: (source, target) node labels added at this step
        deadlock: True if this step marks the deadlock
    """
    description: str
    edges: List[Tuple[str, str]] = field(default_factory=list)
    deadlock: bool = False


@dataclass
class Scenario:
    """
    A playable deadlock scenario.

    Attributes:
        name: Scenario title
        description: One-line summary
        processes: Process labels, created in order (P1, P2, ...)
        resources: Resource labels, created in order (R1, R2, ...)
        steps: Steps in playback order; step 0 is the initial state
    """
    name: str
    description: str
    processes: List[str]
    resources: List[str]
    steps: List[ScenarioStep] = field(default_factory=list)

    @property
    def num_steps(self) -> int:
        return len(self.steps)
