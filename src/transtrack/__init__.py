"""TransTrack: document translation job tracker."""

__version__ = "1.0.0"
