"""Template descriptors and survey collaborators."""
