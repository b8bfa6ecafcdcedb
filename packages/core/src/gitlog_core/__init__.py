"""Validation, rate limiting, git backend and tool dispatch for gitlogmcp."""
