"""After-hooks and git hook installation."""
