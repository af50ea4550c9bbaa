"""
Banker's Algorithm Tests

Tests need computation, the safety check under both scan policies
and resource-request evaluation.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.avoidance import (
    SCAN_CONTINUE,
    SCAN_RESTART,
    can_finish,
    compute_need,
    evaluate_request,
    run_safety_check,
)
from models.allocation_state import BANKER_EXAMPLE


ALLOCATION = BANKER_EXAMPLE["allocation"]
MAX = BANKER_EXAMPLE["max"]
AVAILABLE = BANKER_EXAMPLE["available"]


def test_compute_need():
    """Need = Max - Allocation, cell by cell."""
    need = compute_need(ALLOCATION, MAX)

    assert need.shape == (5, 3)
    assert need[0].tolist() == [7, 4, 3]
    assert need[1].tolist() == [1, 2, 2]
    assert need[2].tolist() == [6, 0, 0]
    assert need[3].tolist() == [0, 1, 1]
    assert need[4].tolist() == [4, 3, 1]
    print("  ✓ Need matrix matches textbook values")


def test_compute_need_allows_negative_cells():
    need = compute_need([[3, 1]], [[1, 1]])
    assert need.tolist() == [[-2, 0]]


def test_can_finish():
    work = np.array([3, 3, 2])
    assert can_finish([1, 2, 2], work)
    assert can_finish([3, 3, 2], work)
    assert not can_finish([4, 0, 0], work)
    assert not can_finish([-1, 0, 0], work)


def test_textbook_example_first_fit():
    """Restarting the scan after each success gives P1, P3, P0, P2, P4."""
    print("\n" + "=" * 60)
    print("TEST: Textbook example (first-fit scan)")
    print("=" * 60)

    result = run_safety_check(ALLOCATION, MAX, AVAILABLE)
    for line in result.trace:
        print(f"  {line}")

    assert result.is_safe is True
    assert result.safe_sequence == ["P1", "P3", "P0", "P2", "P4"]
    print("  ✓ SAFE with sequence P1 -> P3 -> P0 -> P2 -> P4")


def test_textbook_example_continue_scan():
    """Continuing the scan gives the textbook walkthrough order."""
    result = run_safety_check(ALLOCATION, MAX, AVAILABLE, scan=SCAN_CONTINUE)

    assert result.is_safe is True
    assert result.safe_sequence == ["P1", "P3", "P4", "P0", "P2"]
    print("  ✓ SAFE with sequence P1 -> P3 -> P4 -> P0 -> P2")


def test_trace_shape():
    """One initial line, then a can-complete and a release line per process."""
    result = run_safety_check(ALLOCATION, MAX, AVAILABLE, scan=SCAN_RESTART)

    assert len(result.trace) == 1 + 2 * 5
    assert result.trace[0] == "Initial state: Available = [3, 3, 2]"
    assert result.trace[1] == "Process P1 can complete. Need: [1, 2, 2], Available: [3, 3, 2]"
    assert result.trace[2] == "P1 releases resources. New Available: [5, 3, 2]"
    assert result.trace[4] == "P3 releases resources. New Available: [7, 4, 3]"
    assert result.trace[-1] == "P4 releases resources. New Available: [10, 5, 7]"
    print("  ✓ Trace lines in order")


def test_need_returned_with_result():
    result = run_safety_check(ALLOCATION, MAX, AVAILABLE)
    assert np.array_equal(result.need, compute_need(ALLOCATION, MAX))


def test_inputs_not_modified():
    """The check works on its own copy of Available."""
    available = np.array(AVAILABLE)
    allocation = np.array(ALLOCATION)
    run_safety_check(allocation, MAX, available)

    assert available.tolist() == [3, 3, 2]
    assert allocation.tolist() == ALLOCATION


def test_unsafe_state():
    """No process can start: empty sequence, only the initial trace line."""
    print("\n" + "=" * 60)
    print("TEST: Unsafe state")
    print("=" * 60)

    allocation = [[1, 0, 1], [0, 1, 0], [1, 1, 0]]
    max_demand = [[2, 1, 1], [1, 2, 0], [1, 2, 1]]
    result = run_safety_check(allocation, max_demand, [0, 0, 0])

    assert result.is_safe is False
    assert result.safe_sequence == []
    assert result.trace == ["Initial state: Available = [0, 0, 0]"]
    print("  ✓ UNSAFE, no process could start")


def test_partially_unsafe_state_keeps_prefix():
    """Processes that can finish are listed even when the state is unsafe."""
    allocation = [[1, 0], [0, 1]]
    max_demand = [[1, 1], [5, 5]]
    result = run_safety_check(allocation, max_demand, [0, 1])

    assert result.is_safe is False
    assert result.safe_sequence == ["P0"]
    assert len(result.trace) == 3


def test_negative_need_is_never_eligible():
    """A process holding more than its maximum claim can never finish."""
    result = run_safety_check([[2, 0]], [[1, 0]], [5, 5])

    assert result.is_safe is False
    assert result.safe_sequence == []


def test_empty_process_set_is_safe():
    result = run_safety_check(np.zeros((0, 2), dtype=int), np.zeros((0, 2), dtype=int), [1, 1])
    assert result.is_safe is True
    assert result.safe_sequence == []


def test_safety_check_is_deterministic():
    first = run_safety_check(ALLOCATION, MAX, AVAILABLE)
    second = run_safety_check(ALLOCATION, MAX, AVAILABLE)
    assert first.safe_sequence == second.safe_sequence
    assert first.trace == second.trace


def test_unknown_scan_policy():
    with pytest.raises(ValueError):
        run_safety_check(ALLOCATION, MAX, AVAILABLE, scan="random")


def test_request_granted():
    """P1 requesting (1, 0, 2) leaves the system safe."""
    print("\n" + "=" * 60)
    print("TEST: Request evaluation")
    print("=" * 60)

    decision = evaluate_request(ALLOCATION, MAX, AVAILABLE, 1, [1, 0, 2])
    print(f"  P1 (1, 0, 2): {decision.reason}")

    assert decision.granted is True
    assert decision.reason.startswith("GRANTED")
    assert decision.result.is_safe is True
    print("  ✓ Request granted")


def test_request_does_not_modify_inputs():
    allocation = np.array(ALLOCATION)
    available = np.array(AVAILABLE)
    evaluate_request(allocation, MAX, available, 1, [1, 0, 2])

    assert allocation.tolist() == ALLOCATION
    assert available.tolist() == [3, 3, 2]


def test_request_exceeding_need_denied():
    decision = evaluate_request(ALLOCATION, MAX, AVAILABLE, 1, [2, 0, 0])
    assert decision.granted is False
    assert decision.reason.startswith("Request exceeds need")
    assert decision.result is None


def test_request_exceeding_available_must_wait():
    decision = evaluate_request(ALLOCATION, MAX, AVAILABLE, 0, [4, 0, 0])
    assert decision.granted is False
    assert "Insufficient resources" in decision.reason
    assert decision.reason.endswith("P0 must wait")


def test_request_leading_to_unsafe_state_denied():
    """After P1's (1, 0, 2) is committed, P0 asking for (0, 2, 0) is unsafe."""
    allocation = np.array(ALLOCATION)
    available = np.array(AVAILABLE)
    allocation[1] += [1, 0, 2]
    available -= [1, 0, 2]

    decision = evaluate_request(allocation, MAX, available, 0, [0, 2, 0])
    print(f"  P0 (0, 2, 0): {decision.reason}")

    assert decision.granted is False
    assert decision.reason.startswith("DENIED (Unsafe state detected)")
    assert decision.result is not None and decision.result.is_safe is False


def test_malformed_requests_denied():
    assert not evaluate_request(ALLOCATION, MAX, AVAILABLE, 7, [1, 0, 0]).granted
    assert not evaluate_request(ALLOCATION, MAX, AVAILABLE, -1, [1, 0, 0]).granted
    assert not evaluate_request(ALLOCATION, MAX, AVAILABLE, 1, [1, 0]).granted
    assert not evaluate_request(ALLOCATION, MAX, AVAILABLE, 1, [0, 0, 0]).granted
    assert not evaluate_request(ALLOCATION, MAX, AVAILABLE, 1, [-1, 1, 0]).granted
