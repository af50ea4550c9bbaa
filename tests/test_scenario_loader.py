"""
Scenario Loader Tests

Tests loading and validation of scenario and matrix JSON files.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from utils.scenario_loader import (
    ScenarioLoadError,
    get_scenario_description,
    load_allocation_state,
    load_scenario,
    parse_scenario,
)


SCENARIOS = project_root / "scenarios"


def _write(tmp_path, data, name="data.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def _scenario_data(**overrides):
    data = {
        "name": "Test",
        "description": "test scenario",
        "processes": ["P1", "P2"],
        "resources": ["R1"],
        "steps": [{"description": "start", "edges": [["R1", "P1"]]}],
    }
    data.update(overrides)
    return data


def test_bundled_scenarios_load():
    """Every bundled scenario file parses."""
    print("\n" + "=" * 60)
    print("TEST: Bundled scenarios")
    print("=" * 60)

    two = load_scenario(str(SCENARIOS / "two_process.json"))
    assert two.processes == ["P1", "P2"]
    assert two.resources == ["Printer", "Scanner"]
    assert two.num_steps == 5
    assert two.steps[1].edges == [("Printer", "P1"), ("Scanner", "P2")]

    dining = load_scenario(str(SCENARIOS / "dining_philosophers.json"))
    assert dining.num_steps == 4
    assert dining.steps[-1].deadlock is True
    print("  ✓ two_process.json and dining_philosophers.json")


def test_bundled_matrices_load():
    state = load_allocation_state(str(SCENARIOS / "banker_example.json"))
    assert state.available.tolist() == [3, 3, 2]
    assert state.resource_names == ["CPU", "Memory", "Disk"]
    assert state.check_safety().is_safe is True

    unsafe = load_allocation_state(str(SCENARIOS / "banker_unsafe.json"))
    assert unsafe.resource_names == ["R0", "R1", "R2"]
    assert unsafe.check_safety().is_safe is False


def test_missing_file():
    with pytest.raises(ScenarioLoadError, match="not found"):
        load_scenario("/nonexistent/scenario.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ScenarioLoadError, match="Invalid JSON"):
        load_scenario(str(path))


def test_top_level_must_be_object(tmp_path):
    with pytest.raises(ScenarioLoadError):
        load_scenario(_write(tmp_path, [1, 2, 3]))


def test_missing_field():
    data = _scenario_data()
    del data["steps"]
    with pytest.raises(ScenarioLoadError, match="'steps'"):
        parse_scenario(data)


def test_unknown_edge_label():
    data = _scenario_data(steps=[{"description": "x", "edges": [["R9", "P1"]]}])
    with pytest.raises(ScenarioLoadError, match="unknown node"):
        parse_scenario(data)


def test_malformed_edge():
    data = _scenario_data(steps=[{"description": "x", "edges": [["R1"]]}])
    with pytest.raises(ScenarioLoadError):
        parse_scenario(data)


def test_duplicate_labels():
    with pytest.raises(ScenarioLoadError, match="duplicate"):
        parse_scenario(_scenario_data(processes=["P1", "P1"]))
    with pytest.raises(ScenarioLoadError, match="both a process and a resource"):
        parse_scenario(_scenario_data(resources=["P1"]))


def test_empty_steps():
    with pytest.raises(ScenarioLoadError, match="at least one step"):
        parse_scenario(_scenario_data(steps=[]))


def test_step_without_description():
    with pytest.raises(ScenarioLoadError, match="description"):
        parse_scenario(_scenario_data(steps=[{"edges": []}]))


def test_matrix_row_length_mismatch(tmp_path):
    path = _write(tmp_path, {
        "allocation": [[0, 1]],
        "max": [[1, 1, 1]],
        "available": [1, 1, 1],
    })
    with pytest.raises(ScenarioLoadError, match="row 0 length"):
        load_allocation_state(path)


def test_matrix_row_count_mismatch(tmp_path):
    path = _write(tmp_path, {
        "allocation": [[0, 1]],
        "max": [[1, 1], [2, 2]],
        "available": [1, 1],
    })
    with pytest.raises(ScenarioLoadError, match="rows"):
        load_allocation_state(path)


def test_matrix_negative_value(tmp_path):
    path = _write(tmp_path, {
        "allocation": [[0, -1]],
        "max": [[1, 1]],
        "available": [1, 1],
    })
    with pytest.raises(ScenarioLoadError, match="non-negative"):
        load_allocation_state(path)


def test_allocation_exceeding_max(tmp_path):
    path = _write(tmp_path, {
        "allocation": [[2, 0]],
        "max": [[1, 1]],
        "available": [1, 1],
    })
    with pytest.raises(ScenarioLoadError, match="exceeds max"):
        load_allocation_state(path)


def test_resource_names_length(tmp_path):
    path = _write(tmp_path, {
        "allocation": [[0, 0]],
        "max": [[1, 1]],
        "available": [1, 1],
        "resource_names": ["CPU"],
    })
    with pytest.raises(ScenarioLoadError, match="resource_names"):
        load_allocation_state(path)


def test_get_scenario_description():
    assert get_scenario_description(str(SCENARIOS / "dining_philosophers.json")) == \
        "Five philosophers with five forks"
    assert get_scenario_description("/nonexistent.json") == ""


def test_steps_must_be_a_list():
    with pytest.raises(ScenarioLoadError, match="'steps' must be a list"):
        parse_scenario(_scenario_data(steps=5))


def test_edges_must_be_a_list():
    data = _scenario_data(steps=[{"description": "d", "edges": 5}])
    with pytest.raises(ScenarioLoadError, match="'edges' must be a list"):
        parse_scenario(data)


def test_oversized_matrix_value(tmp_path):
    """Values too large for the integer matrices are reported, not raised as OverflowError."""
    print("\n" + "=" * 60)
    print("TEST: Oversized matrix values")
    print("=" * 60)

    path = _write(tmp_path, {
        "allocation": [[10 ** 30]],
        "max": [[10 ** 30]],
        "available": [1],
    })
    with pytest.raises(ScenarioLoadError, match="exceeds the maximum"):
        load_allocation_state(path)
    print("  ✓ 10**30 rejected with ScenarioLoadError")


def test_resource_names_must_be_a_list(tmp_path):
    path = _write(tmp_path, {
        "allocation": [[0]],
        "max": [[1]],
        "available": [1],
        "resource_names": 3,
    })
    with pytest.raises(ScenarioLoadError, match="resource_names"):
        load_allocation_state(path)
