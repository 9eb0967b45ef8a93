"""On-disk project file format."""
