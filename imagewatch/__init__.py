"""Validate container images to watch from labels, and parse, link, sort and filter their references and tags."""

__version__ = "0.1.0"