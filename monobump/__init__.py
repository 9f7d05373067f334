"""Dependency-consistent semver releases for uv workspaces."""
