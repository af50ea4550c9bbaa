"""
Allocation State model for the Deadlock Visualizer.

Holds the matrices and vectors edited in the Banker's Algorithm simulator
and generates them (fixed textbook example or random instance).
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from algorithms.avoidance import (
    SCAN_RESTART,
    RequestDecision,
    SafetyResult,
    compute_need,
    evaluate_request,
    run_safety_check,
)


DEFAULT_PROCESSES = 5
DEFAULT_RESOURCES = 3

# Silberschatz et al. textbook instance; safe (first-fit order P1, P3, P0, P2, P4)
BANKER_EXAMPLE = {
    "allocation": [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]],
    "max": [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]],
    "available": [3, 3, 2],
    "resource_names": ["CPU", "Memory", "Disk"],
}

# Random generation ranges (inclusive)
ALLOCATION_RANGE = (0, 2)
EXTRA_CLAIM_RANGE = (0, 3)
AVAILABLE_RANGE = (1, 5)

# Upper bound for a single edited cell
MAX_COUNT = 1_000_000

# Upper bound for generated processes / resource types
MAX_DIMENSION = 100


def _as_matrix(rows, num_resources: int) -> np.ndarray:
    """Integer [P][R] array; an empty input means no processes."""
    matrix = np.array(rows, dtype=int)
    if matrix.size == 0:
        return matrix.reshape(0, num_resources)
    return matrix


def coerce_count(value: Any) -> int:
    """
    Coerce user input to a non-negative integer.

    Anything that does not parse as a number becomes 0; fractions are
    truncated and the result is clamped to [0, MAX_COUNT].
    """
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return min(max(0, number), MAX_COUNT)


@dataclass
class AllocationState:
    """
    Input to the Banker's safety check.

    Attributes:
        allocation: [P][R] units of each resource held by each process
        max_demand: [P][R] maximum units each process may ever request
        available: [R] units of each resource not allocated to anyone
        resource_names: Display names for resource columns

    Invariant (expected, not enforced):
        max_demand >= allocation element-wise. Edits may break it; the
        resulting negative need marks the process as unable to finish.
    """
    allocation: np.ndarray
    max_demand: np.ndarray
    available: np.ndarray
    resource_names: List[str] = field(default_factory=list)

    def __post_init__(self):
        """
        Normalize inputs to integer arrays and default the names.

        Raises:
            ValueError: If the matrices are ragged or their shapes disagree
        """
        self.available = np.array(self.available, dtype=int)
        if self.available.ndim != 1:
            raise ValueError(f"available must be a vector, got shape {self.available.shape}")
        num_resources = self.available.shape[0]

        self.allocation = _as_matrix(self.allocation, num_resources)
        self.max_demand = _as_matrix(self.max_demand, num_resources)

        if self.allocation.ndim != 2 or self.allocation.shape[1] != num_resources:
            raise ValueError(
                f"allocation must be [P][{num_resources}], got shape {self.allocation.shape}"
            )
        if self.max_demand.shape != self.allocation.shape:
            raise ValueError(
                f"max_demand shape {self.max_demand.shape} does not match "
                f"allocation shape {self.allocation.shape}"
            )

        if not self.resource_names:
            self.resource_names = [f"R{j}" for j in range(self.num_resources)]

    @classmethod
    def example(cls) -> "AllocationState":
        """Fresh copy of the fixed 5 x 3 textbook example."""
        return cls(
            allocation=BANKER_EXAMPLE["allocation"],
            max_demand=BANKER_EXAMPLE["max"],
            available=BANKER_EXAMPLE["available"],
            resource_names=list(BANKER_EXAMPLE["resource_names"]),
        )

    @property
    def num_processes(self) -> int:
        """Number of processes (matrix rows)."""
        return self.allocation.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types (matrix columns)."""
        return self.available.shape[0]

    @property
    def need_matrix(self) -> np.ndarray:
        """
        Get need matrix [P][R].
        Computed on every access as: Need = Max - Allocation
        """
        return compute_need(self.allocation, self.max_demand)

    def update_allocation(self, process: int, resource: int, value: Any) -> int:
        """Set one allocation cell; returns the coerced value stored."""
        self.allocation[process][resource] = coerce_count(value)
        return int(self.allocation[process][resource])

    def update_max(self, process: int, resource: int, value: Any) -> int:
        """Set one maximum-claim cell; returns the coerced value stored."""
        self.max_demand[process][resource] = coerce_count(value)
        return int(self.max_demand[process][resource])

    def update_available(self, resource: int, value: Any) -> int:
        """Set one available cell; returns the coerced value stored."""
        self.available[resource] = coerce_count(value)
        return int(self.available[resource])

    def check_safety(self, scan: str = SCAN_RESTART) -> SafetyResult:
        """Run the Banker's safety algorithm on the current matrices."""
        return run_safety_check(self.allocation, self.max_demand, self.available, scan)

    def apply_request(
        self,
        process: int,
        request: Sequence[int],
        scan: str = SCAN_RESTART
    ) -> RequestDecision:
        """
        Evaluate a resource request and commit it if it is granted.

        Args:
            process: Row of the requesting process
            request: [R] instances requested
            scan: Scan policy for the safety check

        Returns:
            RequestDecision; matrices change only when granted
        """
        decision = evaluate_request(
            self.allocation, self.max_demand, self.available, process, request, scan
        )
        if decision.granted:
            amounts = np.asarray(request, dtype=int)
            self.allocation[process] += amounts
            self.available -= amounts
        return decision

    def copy(self) -> "AllocationState":
        return AllocationState(
            allocation=self.allocation.copy(),
            max_demand=self.max_demand.copy(),
            available=self.available.copy(),
            resource_names=list(self.resource_names),
        )

    def display(self) -> str:
        """
        Generate readable string representation of the matrices.

        Returns:
            Formatted string showing all matrices and vectors
        """
        output = []
        output.append("\n" + "=" * 60)
        output.append("BANKER'S ALGORITHM STATE")
        output.append("=" * 60)

        header = "      " + " ".join(f"{name:>6}" for name in self.resource_names)

        output.append("\nAvailable Resources:")
        output.append("  [" + ", ".join(
            f"{name}:{self.available[j]}" for j, name in enumerate(self.resource_names)
        ) + "]")

        for title, matrix in (
            ("Allocation Matrix", self.allocation),
            ("Max Matrix", self.max_demand),
            ("Need Matrix (Max - Allocation)", self.need_matrix),
        ):
            output.append(f"\n{title}:")
            output.append(header)
            for i in range(self.num_processes):
                row = f"  P{i}: "
                row += " ".join(f"{matrix[i][j]:>6}" for j in range(self.num_resources))
                output.append(row)

        output.append("\n" + "=" * 60)
        return "\n".join(output)


def generate_matrices(
    num_processes: int,
    num_resources: int,
    rng: Optional[np.random.Generator] = None
) -> AllocationState:
    """
    Generate a fresh allocation state.

    The fixed textbook example is used for 5 processes x 3 resources;
    any other size gets a random instance:
    - allocation[i][j] uniform in [0, 2]
    - max[i][j] = allocation[i][j] + uniform[0, 3] (so Max >= Allocation)
    - available[j] uniform in [1, 5]

    Random instances carry no safety guarantee.

    Args:
        num_processes: Number of processes (coerced into [1, MAX_DIMENSION])
        num_resources: Number of resource types (coerced into [1, MAX_DIMENSION])
        rng: Random generator (seed it for reproducible instances)

    Returns:
        New AllocationState
    """
    num_processes = min(max(1, coerce_count(num_processes)), MAX_DIMENSION)
    num_resources = min(max(1, coerce_count(num_resources)), MAX_DIMENSION)

    if num_processes == DEFAULT_PROCESSES and num_resources == DEFAULT_RESOURCES:
        return AllocationState.example()

    if rng is None:
        rng = np.random.default_rng()

    shape = (num_processes, num_resources)
    allocation = rng.integers(ALLOCATION_RANGE[0], ALLOCATION_RANGE[1] + 1, size=shape)
    max_demand = allocation + rng.integers(EXTRA_CLAIM_RANGE[0], EXTRA_CLAIM_RANGE[1] + 1, size=shape)
    available = rng.integers(AVAILABLE_RANGE[0], AVAILABLE_RANGE[1] + 1, size=num_resources)

    return AllocationState(allocation=allocation, max_demand=max_demand, available=available)
