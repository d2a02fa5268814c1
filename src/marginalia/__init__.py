"""Marginalia: content tooling for a markdown blog with YAML front matter."""

__version__ = "0.3.0"
