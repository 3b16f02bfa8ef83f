"""Tests for Jira-specific models."""

from jira_proxy.jira.models import Transition, TransitionTarget, find_transition


def make_transitions():
    return [
        Transition.from_api_response(
            {"id": "11", "name": "Start", "to": {"id": "3", "name": "In Progress"}}
        ),
        Transition.from_api_response(
            {"id": "31", "name": "Done", "to": {"id": "10001", "name": "Closed"}}
        ),
    ]


class TestTransition:
    """Tests for the Transition model."""

    def test_from_api_response(self):
        """Test building a transition from a Jira payload."""
        transition = Transition.from_api_response(
            {
                "id": "21",
                "name": "Review",
                "hasScreen": False,
                "to": {
                    "self": "https://test.atlassian.net/rest/api/3/status/10002",
                    "id": "10002",
                    "name": "In Review",
                    "statusCategory": {"id": 4, "key": "indeterminate"},
                },
            }
        )

        assert transition.id == "21"
        assert transition.name == "Review"
        assert transition.to == TransitionTarget(
            id="10002",
            name="In Review",
            status_category={"id": 4, "key": "indeterminate"},
        )

    def test_to_dict(self):
        """Test the reshaped transition listing entry."""
        transition = Transition(
            id="21",
            name="Review",
            to=TransitionTarget(id="10002", name="In Review", status_category={"key": "x"}),
        )

        assert transition.to_dict() == {
            "id": "21",
            "name": "Review",
            "to": {"id": "10002", "name": "In Review", "statusCategory": {"key": "x"}},
        }

    def test_to_summary(self):
        """Test the short name/target form."""
        transition = make_transitions()[0]
        assert transition.to_summary() == {"name": "Start", "to": "In Progress"}

    def test_missing_target(self):
        """Test a transition payload without a 'to' block."""
        transition = Transition.from_api_response({"id": "1", "name": "Reopen"})

        assert transition.to.name == ""
        assert transition.to.status_category is None
        assert transition.matches("reopen")

    def test_matches_own_name(self):
        """Test matching on the transition name."""
        assert make_transitions()[0].matches("start")

    def test_matches_target_name(self):
        """Test matching on the target status name, ignoring case."""
        assert make_transitions()[0].matches("IN PROGRESS")

    def test_does_not_match(self):
        """Test a name that matches neither."""
        assert not make_transitions()[0].matches("Progress")


class TestFindTransition:
    """Tests for find_transition."""

    def test_finds_by_target_status(self):
        """Test the lookup used by status-by-name."""
        transition = find_transition(make_transitions(), "in progress")
        assert transition is not None
        assert transition.id == "11"

    def test_returns_first_match(self):
        """Test that the first matching transition wins."""
        transitions = make_transitions() + [
            Transition.from_api_response(
                {"id": "41", "name": "Close", "to": {"id": "10001", "name": "Closed"}}
            )
        ]
        assert find_transition(transitions, "closed").id == "31"

    def test_no_match(self):
        """Test that no match gives None."""
        assert find_transition(make_transitions(), "Nope") is None

    def test_empty(self):
        """Test an issue with no transitions."""
        assert find_transition([], "Done") is None
