"""GameTrack - terminal client for the game release tracker."""

__version__ = "0.1.0"
