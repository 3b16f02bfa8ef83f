"""Jira integration module for the proxy."""

from .client import (
    JiraClient,
    JiraClientError,
    JiraAuthenticationError,
    JiraNotFoundError,
    JiraResponseError,
    JiraResponseParseError,
    JiraTransportError,
    TransitionNotFoundError,
)
from .models import Transition, TransitionTarget, find_transition

__all__ = [
    "JiraClient",
    "JiraClientError",
    "JiraAuthenticationError",
    "JiraNotFoundError",
    "JiraResponseError",
    "JiraResponseParseError",
    "JiraTransportError",
    "TransitionNotFoundError",
    "Transition",
    "TransitionTarget",
    "find_transition",
]
