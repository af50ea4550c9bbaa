"""
Scenario Loader for the Deadlock Visualizer.

Loads and validates JSON scenario files (graph playback) and matrix files
(Banker's Algorithm input).
"""

import json
from typing import Any, Dict, List, Tuple

from models.allocation_state import MAX_COUNT, AllocationState
from models.scenario import Scenario, ScenarioStep


class ScenarioLoadError(Exception):
    """Exception raised when a scenario or matrix file cannot be loaded or is invalid."""
    pass


def _read_json(file_path: str) -> Dict[str, Any]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    if not isinstance(data, dict):
        raise ScenarioLoadError(f"Scenario file must contain a JSON object: {file_path}")
    return data


def load_scenario(file_path: str) -> Scenario:
    """
    Load a playback scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Scenario with its steps in playback order

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    data = _read_json(file_path)
    return parse_scenario(data)


def parse_scenario(data: Dict[str, Any]) -> Scenario:
    """
    Build a Scenario from already-decoded JSON data.

    Raises:
        ScenarioLoadError: If a field is missing or refers to an unknown node
    """
    # Validate required fields
    for required in ('name', 'processes', 'resources', 'steps'):
        if required not in data:
            raise ScenarioLoadError(f"Scenario missing '{required}' field")

    processes = _load_labels(data['processes'], 'processes')
    resources = _load_labels(data['resources'], 'resources')

    duplicates = set(processes) & set(resources)
    if duplicates:
        raise ScenarioLoadError(
            f"Labels used for both a process and a resource: {sorted(duplicates)}"
        )

    if not isinstance(data['steps'], list):
        raise ScenarioLoadError("'steps' must be a list")

    known = set(processes) | set(resources)
    steps = [_load_step(step, i, known) for i, step in enumerate(data['steps'])]

    if not steps:
        raise ScenarioLoadError("Scenario must contain at least one step")

    return Scenario(
        name=data['name'],
        description=data.get('description', ''),
        processes=processes,
        resources=resources,
        steps=steps
    )


def _load_labels(labels: Any, field: str) -> List[str]:
    """Validate a list of node labels."""
    if not isinstance(labels, list):
        raise ScenarioLoadError(f"'{field}' must be a list of names")

    result = []
    for label in labels:
        if not isinstance(label, str) or not label:
            raise ScenarioLoadError(f"'{field}' contains an invalid name: {label!r}")
        if label in result:
            raise ScenarioLoadError(f"'{field}' contains duplicate name '{label}'")
        result.append(label)
    return result


def _load_step(step_data: Any, index: int, known: set) -> ScenarioStep:
    """
    Load a single step from scenario data.

    Args:
        step_data: Step dictionary from scenario
        index: Position of the step (for error messages)
        known: Every declared node label

    Returns:
        ScenarioStep
    """
    if not isinstance(step_data, dict):
        raise ScenarioLoadError(f"Step {index}: must be an object")
    if 'description' not in step_data:
        raise ScenarioLoadError(f"Step {index}: missing 'description' field")

    raw_edges = step_data.get('edges', [])
    if not isinstance(raw_edges, list):
        raise ScenarioLoadError(f"Step {index}: 'edges' must be a list")

    edges: List[Tuple[str, str]] = []
    for edge in raw_edges:
        if not isinstance(edge, list) or len(edge) != 2:
            raise ScenarioLoadError(f"Step {index}: edge must be a [source, target] pair: {edge!r}")

        source, target = edge
        for label in (source, target):
            if not isinstance(label, str) or label not in known:
                raise ScenarioLoadError(f"Step {index}: unknown node {label!r}")
        edges.append((source, target))

    return ScenarioStep(
        description=step_data['description'],
        edges=edges,
        deadlock=bool(step_data.get('deadlock', False))
    )


def load_allocation_state(file_path: str) -> AllocationState:
    """
    Load Banker's Algorithm matrices from JSON file.

    Expected fields: 'allocation' [P][R], 'max' [P][R], 'available' [R],
    optional 'resource_names' [R].

    Args:
        file_path: Path to matrix JSON file

    Returns:
        AllocationState

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    data = _read_json(file_path)

    for required in ('allocation', 'max', 'available'):
        if required not in data:
            raise ScenarioLoadError(f"Matrix file missing '{required}' field")

    available = _load_vector(data['available'], 'available')
    num_resources = len(available)
    if num_resources == 0:
        raise ScenarioLoadError("'available' must list at least one resource")

    allocation = _load_matrix(data['allocation'], 'allocation', num_resources)
    max_demand = _load_matrix(data['max'], 'max', num_resources)

    if len(allocation) != len(max_demand):
        raise ScenarioLoadError(
            f"'allocation' has {len(allocation)} rows but 'max' has {len(max_demand)}"
        )

    # Validate allocation doesn't exceed max claim
    for i, (alloc_row, max_row) in enumerate(zip(allocation, max_demand)):
        for j, (alloc, max_d) in enumerate(zip(alloc_row, max_row)):
            if alloc > max_d:
                raise ScenarioLoadError(
                    f"Process P{i}: allocation[{j}] ({alloc}) exceeds max[{j}] ({max_d})"
                )

    resource_names = data.get('resource_names', [])
    if not isinstance(resource_names, list):
        raise ScenarioLoadError("'resource_names' must be a list")
    if resource_names and len(resource_names) != num_resources:
        raise ScenarioLoadError(
            f"'resource_names' has {len(resource_names)} entries, expected {num_resources}"
        )

    try:
        return AllocationState(
            allocation=allocation,
            max_demand=max_demand,
            available=available,
            resource_names=[str(name) for name in resource_names]
        )
    except (OverflowError, ValueError) as e:
        raise ScenarioLoadError(f"Invalid matrices: {e}")


def _load_vector(values: Any, field: str) -> List[int]:
    """Validate a vector of non-negative integers."""
    if not isinstance(values, list):
        raise ScenarioLoadError(f"'{field}' must be a list")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ScenarioLoadError(f"'{field}' must contain non-negative integers, got {value!r}")
        if value > MAX_COUNT:
            raise ScenarioLoadError(f"'{field}' value {value} exceeds the maximum of {MAX_COUNT}")
    return list(values)


def _load_matrix(rows: Any, field: str, num_resources: int) -> List[List[int]]:
    """Validate a [P][R] matrix of non-negative integers."""
    if not isinstance(rows, list):
        raise ScenarioLoadError(f"'{field}' must be a list of rows")

    matrix = []
    for i, row in enumerate(rows):
        row = _load_vector(row, f"{field}[{i}]")
        if len(row) != num_resources:
            raise ScenarioLoadError(
                f"'{field}' row {i} length ({len(row)}) "
                f"does not match resource count ({num_resources})"
            )
        matrix.append(row)
    return matrix


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if the file cannot be read
    """
    try:
        data = _read_json(file_path)
    except ScenarioLoadError:
        return ''
    return data.get('description', '')
