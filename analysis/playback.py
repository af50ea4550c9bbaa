"""
Scenario Playback for the Deadlock Visualizer.

Steps through a scripted scenario, applying each step's edges to a
resource-allocation graph and recording what happened.
"""

from typing import Dict, List, Optional

from analysis.events import EventLog, EventType, PlaybackEvent
from models.graph import CANVAS_HEIGHT, CANVAS_WIDTH, GraphModel
from models.scenario import Scenario, ScenarioStep
from utils.logger import VisualizerLogger


PROCESS_ROW_Y = CANVAS_HEIGHT * 0.3
RESOURCE_ROW_Y = CANVAS_HEIGHT * 0.7


def _row_position(index: int, count: int) -> float:
    """Evenly spread count nodes across the canvas width."""
    return CANVAS_WIDTH * (index + 1) / (count + 1)


class ScenarioPlayback:
    """
    Plays a scenario one step at a time.

    Step 0 is the initial state and is applied on reset; advance() moves
    to the next step until the last one. A DEADLOCK event is recorded when
    a cycle first appears; a step marked deadlocked whose graph has no
    cycle records NO_CYCLE instead.

    Attributes:
        scenario: Scenario being played
        graph: Graph holding the state after the current step
        event_log: Events recorded since the last reset
        current_step: Index of the step most recently applied
    """

    def __init__(self, scenario: Scenario, logger: Optional[VisualizerLogger] = None):
        self.scenario = scenario
        self.logger = logger
        self.graph = GraphModel()
        self.event_log = EventLog()
        self.current_step = 0
        self._ids_by_label: Dict[str, str] = {}
        self._deadlock_reported = False
        self.reset()

    @property
    def last_step(self) -> int:
        return max(0, self.scenario.num_steps - 1)

    @property
    def is_finished(self) -> bool:
        """True once the last step has been applied."""
        return self.current_step >= self.last_step

    @property
    def current(self) -> Optional[ScenarioStep]:
        """The step most recently applied (None for an empty scenario)."""
        if not self.scenario.steps:
            return None
        return self.scenario.steps[self.current_step]

    @property
    def is_deadlocked(self) -> bool:
        return self.graph.has_cycle()

    def node_id(self, label: str) -> Optional[str]:
        """Graph id assigned to a scenario label."""
        return self._ids_by_label.get(label)

    def reset(self) -> None:
        """Rebuild the graph from scratch and apply the initial step."""
        self.graph.clear()
        self.event_log.clear()
        self._ids_by_label = {}
        self._deadlock_reported = False

        for i, label in enumerate(self.scenario.processes):
            node = self.graph.add_process(
                label=label,
                x=_row_position(i, len(self.scenario.processes)),
                y=PROCESS_ROW_Y
            )
            self._ids_by_label[label] = node.node_id

        for i, label in enumerate(self.scenario.resources):
            node = self.graph.add_resource(
                label=label,
                x=_row_position(i, len(self.scenario.resources)),
                y=RESOURCE_ROW_Y
            )
            self._ids_by_label[label] = node.node_id

        self.current_step = 0
        self._record(PlaybackEvent(
            step=0,
            event_type=EventType.RESET,
            message=f"{self.scenario.name}: {len(self.graph.processes)} processes, "
                    f"{len(self.graph.resources)} resources"
        ))

        if self.scenario.steps:
            self._apply_step(0)

    def advance(self) -> bool:
        """
        Apply the next step.

        Returns:
            True if a step was applied, False if playback was already finished
        """
        if self.is_finished:
            return False
        self.current_step += 1
        self._apply_step(self.current_step)
        return True

    def play(self) -> EventLog:
        """Advance through every remaining step."""
        while self.advance():
            pass
        return self.event_log

    def _apply_step(self, index: int) -> None:
        step = self.scenario.steps[index]
        self._record(PlaybackEvent(step=index, event_type=EventType.STEP, message=step.description))

        for source_label, target_label in step.edges:
            self._apply_edge(index, source_label, target_label)

        cycle = self.graph.find_cycle()
        if cycle is not None and not self._deadlock_reported:
            self._deadlock_reported = True
            self._record(PlaybackEvent(step=index, event_type=EventType.DEADLOCK, cycle=cycle))
        elif step.deadlock and cycle is None:
            self._record(PlaybackEvent(step=index, event_type=EventType.NO_CYCLE, message=step.description))

    def _apply_edge(self, index: int, source_label: str, target_label: str) -> None:
        source = self.node_id(source_label)
        target = self.node_id(target_label)

        if source is None or target is None:
            self._record(PlaybackEvent(
                step=index,
                event_type=EventType.EDGE_IGNORED,
                message="unknown node",
                source=source or source_label,
                target=target or target_label
            ))
            return

        if self.graph.add_edge(source, target):
            edge = self.graph.edges[-1]
            self._record(PlaybackEvent(
                step=index,
                event_type=EventType.EDGE_ADDED,
                message=f"{edge.kind.value}: {source_label} -> {target_label}",
                source=source,
                target=target
            ))
        else:
            self._record(PlaybackEvent(
                step=index,
                event_type=EventType.EDGE_IGNORED,
                message="pair already connected or invalid",
                source=source,
                target=target
            ))

    def _record(self, event: PlaybackEvent) -> None:
        self.event_log.add(event)
        if self.logger is None:
            return
        if event.event_type in (EventType.EDGE_ADDED, EventType.EDGE_IGNORED):
            self.logger.log(str(event), "debug")
        elif event.event_type == EventType.NO_CYCLE:
            self.logger.log(str(event), "warning")
        else:
            self.logger.log(str(event))

    def deadlock_steps(self) -> List[int]:
        """Indices of the steps the scenario marks as deadlocked."""
        return [i for i, step in enumerate(self.scenario.steps) if step.deadlock]
