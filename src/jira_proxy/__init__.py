"""Jira proxy - a small REST façade over the Jira Cloud API."""

__version__ = "0.1.0"
