"""
Models package for the Deadlock Visualizer.
Contains the allocation graph, Banker's matrices and scenario definitions.
"""
