"""
Utilities package for the Deadlock Visualizer.
Contains the logger and the scenario/matrix file loader.
"""
