"""Markdown skill registry, search, workflows and interactive skill sessions."""

__version__ = "0.1.0"

__all__ = ["frontmatter", "loader", "command", "search", "registry", "workflow", "sessions"]