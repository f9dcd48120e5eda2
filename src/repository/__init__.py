"""Dependency file fetchers for local and remote repositories."""
