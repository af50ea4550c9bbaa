"""
Analysis package for the Deadlock Visualizer.
Contains scenario playback and its event log.
"""
