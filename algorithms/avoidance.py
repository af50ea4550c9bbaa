"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Deadlock Visualizer.

Implements the safety algorithm and resource-request evaluation over
allocation, maximum-claim and available-resource matrices.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence


# Where the scan resumes after a process is found able to finish
SCAN_RESTART = "restart"
SCAN_CONTINUE = "continue"
SCAN_POLICIES = (SCAN_RESTART, SCAN_CONTINUE)


@dataclass
class SafetyResult:
    """
    Outcome of a Banker's safety check.

    Attributes:
        is_safe: True if every process can finish
        safe_sequence: Process identifiers in finishing order ("P1", "P3", ...).
            When unsafe this is only the prefix found, not a valid schedule.
        trace: Human-readable description of every decision, in order
        need: Need matrix (Max - Allocation) the check was run with
    """
    is_safe: bool
    safe_sequence: List[str] = field(default_factory=list)
    trace: List[str] = field(default_factory=list)
    need: Optional[np.ndarray] = None


@dataclass
class RequestDecision:
    """
    Outcome of evaluating a resource request.

    Attributes:
        granted: True if the request can be granted safely
        reason: Human-readable explanation
        result: Safety check of the tentative state (None if not reached)
    """
    granted: bool
    reason: str
    result: Optional[SafetyResult] = None


def process_name(index: int) -> str:
    """Identifier used for a process row in sequences and traces."""
    return f"P{index}"


def _format_vector(vector) -> str:
    return "[" + ", ".join(str(int(v)) for v in vector) + "]"


def compute_need(allocation, max_demand) -> np.ndarray:
    """
    Compute the need matrix.

    Need[i][j] = Max[i][j] - Allocation[i][j]

    No bounds checking: a cell where Max < Allocation yields a negative need.

    Args:
        allocation: [P][R] resources currently held
        max_demand: [P][R] maximum resources each process may request

    Returns:
        [P][R] need matrix
    """
    return np.asarray(max_demand, dtype=int) - np.asarray(allocation, dtype=int)


def can_finish(need_row, work) -> bool:
    """
    Check if a process can run to completion with the current work vector.

    A row with a negative entry (Max < Allocation) describes an inconsistent
    claim; such a process is never considered able to finish.
    """
    need_row = np.asarray(need_row)
    if np.any(need_row < 0):
        return False
    return bool(np.all(need_row <= work))


def run_safety_check(allocation, max_demand, available, scan: str = SCAN_RESTART) -> SafetyResult:
    """
    Check if the system is in a safe state using Banker's Algorithm.

    Algorithm:
    1. Need = Max - Allocation
    2. Initialize Work = Available, Finish = [False] * num_processes
    3. Find the lowest index i where Finish[i] == False and Need[i] <= Work
    4. If found: Work += Allocation[i], Finish[i] = True, append Pi
    5. Repeat until all processes finish (SAFE) or a scan finds none (UNSAFE)

    Scan policies for step 4:
    - "restart" (first-fit): after every success, rescan from process 0.
      On the textbook example this yields P1, P3, P0, P2, P4.
    - "continue": keep scanning from i + 1 and start the next pass at 0,
      as in the textbook walkthrough (P1, P3, P4, P0, P2).

    Time Complexity: O(P²×R)

    Args:
        allocation: [P][R] resources currently held
        max_demand: [P][R] maximum claims
        available: [R] free resource instances
        scan: Scan policy, "restart" or "continue"

    Returns:
        SafetyResult with verdict, (partial) safe sequence and trace

    Raises:
        ValueError: If scan is not a known policy

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 8.6.3: Banker's Algorithm.
    """
    if scan not in SCAN_POLICIES:
        raise ValueError(f"Unknown scan policy '{scan}' (expected one of {', '.join(SCAN_POLICIES)})")

    allocation = np.asarray(allocation, dtype=int)
    need = compute_need(allocation, max_demand)
    num_processes = need.shape[0]

    # Work = copy of Available (caller's vector is left untouched)
    work = np.array(available, dtype=int)
    finish = np.zeros(num_processes, dtype=bool)
    safe_sequence: List[str] = []
    trace: List[str] = []

    trace.append(f"Initial state: Available = {_format_vector(work)}")

    found = True
    while found and len(safe_sequence) < num_processes:
        found = False

        for i in range(num_processes):
            if finish[i] or not can_finish(need[i], work):
                continue

            name = process_name(i)
            trace.append(
                f"Process {name} can complete. "
                f"Need: {_format_vector(need[i])}, Available: {_format_vector(work)}"
            )

            # Process finishes and releases everything it holds
            work += allocation[i]
            finish[i] = True
            safe_sequence.append(name)
            found = True

            trace.append(f"{name} releases resources. New Available: {_format_vector(work)}")
            if scan == SCAN_RESTART:
                break  # Restart search from beginning (lowest index wins)

    is_safe = len(safe_sequence) == num_processes

    return SafetyResult(
        is_safe=is_safe,
        safe_sequence=safe_sequence,
        trace=trace,
        need=need
    )


def evaluate_request(
    allocation,
    max_demand,
    available,
    process_index: int,
    request: Sequence[int],
    scan: str = SCAN_RESTART
) -> RequestDecision:
    """
    Decide a resource request using Banker's Algorithm.

    Steps:
    1. Validate: 0 <= request <= need, and not all zero
    2. Check: request <= available (otherwise the process must wait)
    3. Tentatively allocate on copies of the matrices
    4. Run the safety algorithm on the tentative state
    5. Grant only if the tentative state is safe

    The caller's matrices are never modified.

    Args:
        allocation: [P][R] resources currently held
        max_demand: [P][R] maximum claims
        available: [R] free resource instances
        process_index: Row of the requesting process
        request: [R] instances requested per resource type
        scan: Scan policy passed to the safety check

    Returns:
        RequestDecision with verdict and reason
    """
    allocation = np.array(allocation, dtype=int)
    available = np.array(available, dtype=int)
    request = np.asarray(request, dtype=int)
    name = process_name(process_index)

    if process_index < 0 or process_index >= allocation.shape[0]:
        return _denied(f"Unknown process {name}")

    if request.shape != available.shape:
        return _denied(
            f"Request has {request.size} entries, expected {available.size}"
        )

    if np.any(request < 0) or not np.any(request > 0):
        return _denied(f"Invalid request {_format_vector(request)}")

    need = compute_need(allocation, max_demand)[process_index]
    if np.any(request > need):
        return _denied(
            f"Request exceeds need (requested: {_format_vector(request)}, "
            f"need: {_format_vector(need)})"
        )

    if np.any(request > available):
        return _denied(
            f"Insufficient resources (requested: {_format_vector(request)}, "
            f"available: {_format_vector(available)}) - {name} must wait"
        )

    # Tentative allocation
    allocation[process_index] += request
    available -= request

    result = run_safety_check(allocation, max_demand, available, scan)

    if result.is_safe:
        sequence = " -> ".join(result.safe_sequence)
        return RequestDecision(
            granted=True,
            reason=f"GRANTED (Safe state maintained, sequence: {sequence})",
            result=result
        )

    return RequestDecision(
        granted=False,
        reason=f"DENIED (Unsafe state detected) - {name} must wait",
        result=result
    )


def _denied(reason: str) -> RequestDecision:
    return RequestDecision(granted=False, reason=reason)
