"""Grid-based raycasting explorer driven by .cub scene files, with replayable scripted input."""

__version__ = "0.1.0"
__all__ = ["__version__"]