"""
Logger utility for the Deadlock Visualizer.

Provides step-by-step logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class VisualizerLogger:
    """
    Logger for graph edits, cycle checks and Banker's decisions.

    Format: "Step X: P1 requests R2 - ADDED" / "[DEBUG] ..." / "[ERROR] ..."
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Deadlock Visualizer Log - {timestamp}\n")
            self.file_handle.write("=" * 60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        # Console output
        print(formatted)

        # File output
        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_step(self, step: int, message: str) -> None:
        """Log a numbered step message."""
        self.log(f"Step {step}: {message}")

    def log_edge(self, source: str, target: str, added: bool) -> None:
        """
        Log an edge edit.

        Args:
            source: Source node id
            target: Target node id
            added: Whether the graph accepted the edge
        """
        status = "ADDED" if added else "IGNORED"
        level = "info" if added else "warning"
        self.log(f"Edge {source} -> {target} - {status}", level)

    def log_cycle_status(self, cycle: Optional[List[str]]) -> None:
        """
        Log the result of a cycle check.

        Args:
            cycle: Node ids on the cycle, or None if none was found
        """
        if cycle:
            path = " -> ".join(cycle + [cycle[0]])
            self.log(f"Cycle Detected - DEADLOCK! ({path})")
        else:
            self.log("No Cycle Detected")

    def log_safety_result(self, result) -> None:
        """
        Log a Banker's safety check.

        Args:
            result: SafetyResult returned by run_safety_check
        """
        for i, line in enumerate(result.trace):
            self.log_step(i, line)

        if result.is_safe:
            self.log("System is in SAFE state")
            self.log(f"Safe Sequence: {' -> '.join(result.safe_sequence)}")
        else:
            self.log("System is in UNSAFE state")
            self.log("No safe sequence exists")
            if result.safe_sequence:
                self.log(f"Processes able to finish: {', '.join(result.safe_sequence)}", "debug")

    def log_request_decision(self, process: str, request: List[int], decision) -> None:
        """
        Log a resource request decision.

        Args:
            process: Requesting process name
            request: Requested amounts
            decision: RequestDecision returned by evaluate_request
        """
        status = "GRANTED" if decision.granted else "DENIED"
        self.log(f"{process} requests {list(request)} - {status} ({decision.reason})")

    def log_matrices(self, state_str: str) -> None:
        """
        Log a matrix snapshot.

        Args:
            state_str: Formatted allocation state
        """
        self.log(state_str)

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
