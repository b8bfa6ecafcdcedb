"""Completion API summarizers."""
