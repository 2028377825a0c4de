"""Smart Saver: cached AI nutrition analysis for meal photos and descriptions."""

from smartsaver.version import __version__

__all__ = ["__version__"]
