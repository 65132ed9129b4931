"""PyScreepsMap - assemble, pan and zoom Screeps room terrain."""

__version__ = "0.1.0"
