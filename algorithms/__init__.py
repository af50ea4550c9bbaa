"""
Algorithms package for the Deadlock Visualizer.
Contains deadlock detection (graph cycles) and avoidance (Banker's) implementations.
"""
