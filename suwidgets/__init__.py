"""State and arithmetic for signal-analysis widgets (waterfalls, constellations, spin boxes), independent of any GUI toolkit."""

__version__ = "0.3.0"