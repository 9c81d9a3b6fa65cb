"""Staging tree walks: exclusion, directory renames, file rendering, commit."""
