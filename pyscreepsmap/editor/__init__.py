"""PyQt6 viewer for PyScreepsMap."""
