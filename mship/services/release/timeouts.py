from __future__ import annotations

# Local git operations (status, rev-parse, add, commit, tag)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (push)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# gh release create uploads every artifact
GH_RELEASE_TIMEOUT_SECONDS = 30 * 60.0

# A cold cargo build of every backend
BUILD_TIMEOUT_SECONDS = 60 * 60.0

# fmt/clippy/test
GATE_TIMEOUT_SECONDS = 60 * 60.0
