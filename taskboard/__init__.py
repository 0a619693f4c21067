"""Taskboard: LLM-assisted task extraction with a three-column Kanban board."""

__version__ = "0.1.0"
