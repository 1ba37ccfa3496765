"""Maze Robot: depth-first maze solving robots on raster mazes."""

__version__ = "1.0.0"
