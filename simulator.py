#!/usr/bin/env python3
"""
Deadlock Visualizer
Main entry point for the command-line front end.

Educational tool for demonstrating deadlock detection (resource-allocation
graph cycles) and avoidance (Banker's Algorithm).
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from algorithms.avoidance import SCAN_POLICIES, SCAN_RESTART
from analysis.events import EventType
from analysis.playback import ScenarioPlayback
from models.allocation_state import (
    DEFAULT_PROCESSES,
    DEFAULT_RESOURCES,
    MAX_DIMENSION,
    AllocationState,
    generate_matrices,
)
from models.graph import GraphModel
from utils.logger import VisualizerLogger
from utils.scenario_loader import ScenarioLoadError, load_allocation_state, load_scenario


SCENARIOS_DIR = Path(__file__).parent / "scenarios"
DEFAULT_SCENARIO = SCENARIOS_DIR / "two_process.json"

MATRIX_NAMES = ('allocation', 'max', 'available')


def run_scenario(scenario_path: str, logger: VisualizerLogger) -> Optional[ScenarioPlayback]:
    """
    Play a scenario from start to finish.

    Args:
        scenario_path: Path to scenario JSON file
        logger: Logger instance

    Returns:
        Finished playback, or None if the scenario could not be loaded
    """
    try:
        scenario = load_scenario(scenario_path)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load scenario: {e}", "error")
        return None

    logger.log(f"\n{'='*60}")
    logger.log(f"SCENARIO: {scenario.name}")
    logger.log(scenario.description)
    logger.log(f"{'='*60}\n")

    playback = ScenarioPlayback(scenario, logger=logger)
    playback.play()

    logger.log(playback.graph.display(), "debug")
    logger.log_cycle_status(playback.graph.find_cycle())

    marked = playback.deadlock_steps()
    detected = playback.event_log.get_events_by_type(EventType.DEADLOCK)
    if marked and detected:
        logger.log(
            f"Cycle first detected at step {detected[0].step}; "
            f"scenario marks deadlock at step {', '.join(str(i) for i in marked)}"
        )
    return playback


def run_graph(
    num_processes: int,
    num_resources: int,
    edges: List[Tuple[str, str]],
    logger: VisualizerLogger
) -> GraphModel:
    """
    Build a resource-allocation graph from command-line edits and check it.

    Args:
        num_processes: Process nodes to create (P1..Pn)
        num_resources: Resource nodes to create (R1..Rm)
        edges: (source, target) node ids, applied in order
        logger: Logger instance

    Returns:
        The resulting graph
    """
    graph = GraphModel()
    for _ in range(num_processes):
        graph.add_process()
    for _ in range(num_resources):
        graph.add_resource()

    for source, target in edges:
        added = graph.add_edge(source, target)
        logger.log_edge(source, target, added)

    logger.log(graph.display())
    logger.log_cycle_status(graph.find_cycle())
    return graph


def run_banker(
    state: AllocationState,
    edits: List[Tuple[str, int, int, str]],
    request: Optional[Tuple[int, List[int]]],
    logger: VisualizerLogger,
    scan: str = SCAN_RESTART
) -> AllocationState:
    """
    Apply matrix edits, run the safety check and optionally a request.

    Args:
        state: Generated or loaded matrices
        edits: (matrix, row, column, raw value) cell edits
        request: (process index, amounts) to evaluate after the check
        logger: Logger instance
        scan: Safety-check scan policy

    Returns:
        The state after edits (and the request, if granted)
    """
    for matrix, row, column, value in edits:
        stored = _apply_edit(state, matrix, row, column, value)
        if stored is None:
            logger.log(f"Ignoring edit {matrix}[{row}][{column}]: out of range", "warning")
        else:
            logger.log(f"Set {matrix}[{row}][{column}] = {stored}", "debug")

    logger.log_matrices(state.display())

    result = state.check_safety(scan)
    logger.log_safety_result(result)

    if request is not None:
        process, amounts = request
        if len(amounts) != state.num_resources or not 0 <= process < state.num_processes:
            logger.log(
                f"Request must name a process in 0..{state.num_processes - 1} "
                f"and {state.num_resources} amounts", "error"
            )
            return state
        decision = state.apply_request(process, amounts, scan)
        logger.log_request_decision(f"P{process}", amounts, decision)

    return state


def _apply_edit(state: AllocationState, matrix: str, row: int, column: int, value: str) -> Optional[int]:
    """Apply one cell edit; returns the stored value, or None if out of range."""
    if matrix == 'available':
        if not 0 <= column < state.num_resources:
            return None
        return state.update_available(column, value)

    if not (0 <= row < state.num_processes and 0 <= column < state.num_resources):
        return None
    if matrix == 'allocation':
        return state.update_allocation(row, column, value)
    return state.update_max(row, column, value)


def parse_edge(text: str) -> Tuple[str, str]:
    """Parse 'SOURCE:TARGET' (e.g. 'P1:R2')."""
    parts = text.split(':')
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"edge must look like P1:R1, got '{text}'")
    return parts[0].strip(), parts[1].strip()


def parse_edit(text: str) -> Tuple[str, int, int, str]:
    """
    Parse a matrix cell edit.

    Forms: 'allocation:ROW:COL=VALUE', 'max:ROW:COL=VALUE', 'available:COL=VALUE'.
    The value is passed through raw; the state coerces it.
    """
    if '=' not in text:
        raise ValueError(f"edit must contain '=', got '{text}'")
    target, value = text.split('=', 1)
    parts = target.split(':')

    if parts[0] not in MATRIX_NAMES:
        raise ValueError(f"edit must start with one of {', '.join(MATRIX_NAMES)}, got '{text}'")

    if parts[0] == 'available':
        if len(parts) != 2:
            raise ValueError(f"available edit must look like available:COL=VALUE, got '{text}'")
        return 'available', 0, int(parts[1]), value

    if len(parts) != 3:
        raise ValueError(f"{parts[0]} edit must look like {parts[0]}:ROW:COL=VALUE, got '{text}'")
    return parts[0], int(parts[1]), int(parts[2]), value


def parse_request(text: str) -> Tuple[int, List[int]]:
    """Parse 'PROCESS:A,B,C' (e.g. '1:1,0,2')."""
    if ':' not in text:
        raise ValueError(f"request must look like 1:1,0,2, got '{text}'")
    process, amounts = text.split(':', 1)
    return int(process.lstrip('Pp')), [int(a) for a in amounts.split(',')]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the visualizer."""
    parser = argparse.ArgumentParser(
        description='Deadlock Visualizer - allocation graphs and Banker\'s Algorithm'
    )
    parser.add_argument(
        '--mode',
        choices=['scenario', 'rag', 'banker'],
        required=True,
        help='What to run: scenario playback, graph cycle check, or Banker\'s safety check'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        default=str(DEFAULT_SCENARIO),
        help='Path to scenario JSON file (scenario mode)'
    )
    parser.add_argument(
        '--processes',
        type=int,
        default=DEFAULT_PROCESSES,
        help=f'Number of processes (default: {DEFAULT_PROCESSES})'
    )
    parser.add_argument(
        '--resources',
        type=int,
        default=DEFAULT_RESOURCES,
        help=f'Number of resources (default: {DEFAULT_RESOURCES})'
    )
    parser.add_argument(
        '--edge',
        action='append',
        default=[],
        help='Edge SOURCE:TARGET to add, repeatable (rag mode)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Seed for random matrix generation (banker mode)'
    )
    parser.add_argument(
        '--matrices',
        type=str,
        default=None,
        help='Load matrices from JSON file instead of generating them (banker mode)'
    )
    parser.add_argument(
        '--set',
        action='append',
        default=[],
        dest='edits',
        help='Cell edit like allocation:0:1=2 or available:2=5, repeatable (banker mode)'
    )
    parser.add_argument(
        '--scan',
        choices=list(SCAN_POLICIES),
        default=SCAN_RESTART,
        help='Where the safety check resumes after a process finishes: restart at P0 (first-fit) or continue (default: restart)'
    )
    parser.add_argument(
        '--request',
        type=str,
        default=None,
        help='Resource request PROCESS:A,B,C to evaluate after the safety check (banker mode)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )

    args = parser.parse_args(argv)

    # Validate arguments
    try:
        edges = [parse_edge(e) for e in args.edge]
        edits = [parse_edit(e) for e in args.edits]
        request = parse_request(args.request) if args.request else None
    except ValueError as e:
        parser.error(str(e))

    if args.processes < 0 or args.resources < 0:
        parser.error('--processes and --resources must not be negative')
    if args.processes > MAX_DIMENSION or args.resources > MAX_DIMENSION:
        parser.error(f'--processes and --resources must not exceed {MAX_DIMENSION}')

    logger = VisualizerLogger(verbose=args.verbose, log_file=args.log_file)
    try:
        if args.mode == 'scenario':
            playback = run_scenario(args.scenario, logger)
            return 0 if playback is not None else 1

        if args.mode == 'rag':
            run_graph(args.processes, args.resources, edges, logger)
            return 0

        if args.matrices:
            try:
                state = load_allocation_state(args.matrices)
            except ScenarioLoadError as e:
                logger.log(f"Failed to load matrices: {e}", "error")
                return 1
        else:
            rng = np.random.default_rng(args.seed)
            state = generate_matrices(args.processes, args.resources, rng)

        run_banker(state, edits, request, logger, args.scan)
        return 0
    finally:
        logger.close()


if __name__ == '__main__':
    sys.exit(main())
