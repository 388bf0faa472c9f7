"""Taskboard project management backend."""
