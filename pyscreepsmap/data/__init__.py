"""Bundled data for PyScreepsMap."""
