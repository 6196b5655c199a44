"""Order book matching fed by market updates, with a ring buffer and an update recorder."""

__version__ = "0.1.0"