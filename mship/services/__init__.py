"""Release, distribution and setup services."""
