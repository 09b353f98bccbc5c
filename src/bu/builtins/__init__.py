"""Utilities shipped with bu. Loaded by file path, not imported as a package."""
