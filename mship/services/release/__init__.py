"""Release pipeline: version bump, quality gates, build matrix, publish."""
