"""Jira-specific data models."""

from dataclasses import dataclass
from typing import Any


@dataclass
class TransitionTarget:
    """The status a transition leads to."""

    id: str | None
    name: str
    status_category: dict[str, Any] | None = None  # passed through verbatim

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "TransitionTarget":
        """Create a TransitionTarget from the ``to`` block of a transition."""
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            status_category=data.get("statusCategory"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "statusCategory": self.status_category,
        }


@dataclass
class Transition:
    """A workflow transition available on an issue."""

    id: str
    name: str  # e.g., "Start Progress"
    to: TransitionTarget  # e.g., "In Progress"

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Transition":
        """Create a Transition from Jira API response."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            to=TransitionTarget.from_api_response(data.get("to") or {}),
        )

    def matches(self, status_name: str) -> bool:
        """Check the transition or its target status against a name, ignoring case."""
        wanted = status_name.lower()
        return self.name.lower() == wanted or self.to.name.lower() == wanted

    def to_dict(self) -> dict[str, Any]:
        """Shape exposed by the transitions listing."""
        return {"id": self.id, "name": self.name, "to": self.to.to_dict()}

    def to_summary(self) -> dict[str, str]:
        """Short ``{name, to}`` form used when no transition matched."""
        return {"name": self.name, "to": self.to.name}


def find_transition(
    transitions: list[Transition], status_name: str
) -> Transition | None:
    """Return the first transition matching ``status_name``, if any."""
    for transition in transitions:
        if transition.matches(status_name):
            return transition
    return None
