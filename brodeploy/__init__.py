"""Deployment tooling for the Brotocol contract suite on Terra."""

__version__ = "0.3.0"
