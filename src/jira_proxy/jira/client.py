"""Jira REST API client wrapper."""

from typing import Any

import httpx

from ..logging import get_logger, sanitize_for_log, truncate_output
from ..models import ConfigError, JiraConfig
from .models import Transition, find_transition

logger = get_logger("jira")

TASK_FIELDS = "summary,status,priority,project"


class JiraClientError(Exception):
    """Base exception for Jira client errors."""

    pass


class JiraResponseError(JiraClientError):
    """Jira answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class JiraAuthenticationError(JiraResponseError):
    """Authentication failed."""

    pass


class JiraNotFoundError(JiraResponseError):
    """Resource not found."""

    pass


class JiraResponseParseError(JiraClientError):
    """A successful response did not carry valid JSON."""

    pass


class JiraTransportError(JiraClientError):
    """The request never produced a response (DNS, connect, TLS...)."""

    pass


class TransitionNotFoundError(JiraClientError):
    """No transition leads to the requested status."""

    def __init__(self, issue_key: str, status_name: str):
        super().__init__(f'No valid transition found to status "{status_name}"')
        self.issue_key = issue_key
        self.status_name = status_name


class JiraClient:
    """Async Jira REST API client using httpx."""

    def __init__(self, config: JiraConfig):
        """Initialize the client.

        Args:
            config: Jira connection settings (site URL, email, API token)

        Raises:
            ConfigError: If any of the settings is missing
        """
        if not config.is_configured():
            raise ConfigError(
                f"Jira is not configured, missing: {', '.join(config.missing())}"
            )
        self.base_url = config.url.rstrip("/")
        self.auth = httpx.BasicAuth(config.email, config.api_token)
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "JiraClient":
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/api/3",
            auth=self.auth,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
        )
        return self

    async def __aexit__(self, *args) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make an API request with error handling.

        Returns the decoded JSON body, or None when Jira answers with an
        empty body (e.g. 204 after an update).
        """
        if not self._client:
            raise JiraClientError("Client not initialized. Use async with context.")

        try:
            response = await self._client.request(
                method, endpoint, params=params, json=json
            )
        except httpx.RequestError as e:
            raise JiraTransportError(f"Request error: {e}") from e

        if not response.is_success:
            logger.debug(
                "%s %s -> %s: %s",
                method,
                endpoint,
                response.status_code,
                sanitize_for_log(truncate_output(response.text)),
            )
            if response.status_code == 401:
                raise JiraAuthenticationError(response.status_code, response.text)
            elif response.status_code == 404:
                raise JiraNotFoundError(response.status_code, response.text)
            raise JiraResponseError(response.status_code, response.text)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise JiraResponseParseError(f"Response parse error: {e}") from e

    async def fetch_tasks(self, project_key: str, status: str = "Open") -> list[dict[str, Any]]:
        """Fetch the issues of a project.

        Args:
            project_key: Project key (e.g., PROJ)
            status: Requested status. Logged only, the JQL filters on project alone.

        Returns:
            The issues exactly as Jira returned them
        """
        logger.info('Fetching tasks for project "%s" with status "%s"', project_key, status)
        try:
            data = await self._request(
                "GET",
                "/search",
                params={"jql": f"project={project_key}", "fields": TASK_FIELDS},
            )
        except JiraClientError as e:
            logger.error("Error fetching tasks for %s: %s", project_key, e)
            raise

        issues = (data or {}).get("issues", [])
        logger.info("Fetched %d tasks for project %s", len(issues), project_key)
        return issues

    async def update_task(self, issue_key: str, fields: dict[str, Any]) -> Any:
        """Update fields of an issue.

        Args:
            issue_key: Issue key (e.g., PROJ-123)
            fields: Field values to set, sent under ``fields``

        Returns:
            The upstream response, usually None
        """
        logger.info("Updating task %s with fields %s", issue_key, sorted(fields))
        try:
            result = await self._request(
                "PUT", f"/issue/{issue_key}", json={"fields": dict(fields)}
            )
        except JiraClientError as e:
            logger.error("Error updating task %s: %s", issue_key, e)
            raise

        logger.info("Task %s updated successfully", issue_key)
        return result

    async def get_transitions(self, issue_key: str) -> list[dict[str, Any]]:
        """Fetch the transitions currently available on an issue."""
        logger.info("Fetching available transitions for issue %s", issue_key)
        try:
            data = await self._request("GET", f"/issue/{issue_key}/transitions")
        except JiraClientError as e:
            logger.error("Error fetching transitions for %s: %s", issue_key, e)
            raise

        transitions = (data or {}).get("transitions", [])
        logger.info("Found %d available transitions for %s", len(transitions), issue_key)
        for t in transitions:
            logger.debug(
                '- ID: %s, Name: "%s", To: "%s"',
                t.get("id"),
                t.get("name"),
                (t.get("to") or {}).get("name"),
            )
        return transitions

    async def find_transition_by_status_name(
        self, issue_key: str, status_name: str
    ) -> str | None:
        """Find the transition leading to a status.

        Matches case-insensitively on the transition name or on the name of
        the status it leads to.

        Args:
            issue_key: Issue key (e.g., PROJ-123)
            status_name: Transition or target status name (e.g., "Done")

        Returns:
            The transition id, or None if nothing matches
        """
        logger.info('Finding transition for issue %s to status "%s"', issue_key, status_name)
        transitions = [
            Transition.from_api_response(t)
            for t in await self.get_transitions(issue_key)
        ]

        transition = find_transition(transitions, status_name)
        if transition:
            logger.info('Found transition ID %s for status "%s"', transition.id, status_name)
            return transition.id

        logger.info(
            'No transition found for status "%s". Available: %s',
            status_name,
            ", ".join(f'"{t.name}" -> "{t.to.name}"' for t in transitions) or "none",
        )
        return None

    async def update_task_status(self, issue_key: str, transition_id: str) -> Any:
        """Move an issue through a transition given its id."""
        logger.info("Updating status for task %s with transition %s", issue_key, transition_id)
        try:
            result = await self._request(
                "POST",
                f"/issue/{issue_key}/transitions",
                json={"transition": {"id": transition_id}},
            )
        except JiraClientError as e:
            logger.error("Error updating task status for %s: %s", issue_key, e)
            raise

        logger.info("Task %s status updated successfully", issue_key)
        return result

    async def update_task_status_by_name(
        self, issue_key: str, status_name: str, comment: Any = None
    ) -> Any:
        """Move an issue to a status given its name.

        Args:
            issue_key: Issue key (e.g., PROJ-123)
            status_name: Transition or target status name (e.g., "In Progress")
            comment: Optional comment body (an ADF document for Jira Cloud)

        Raises:
            TransitionNotFoundError: If no transition matches the name
        """
        logger.info('Updating status for task %s to "%s"', issue_key, status_name)
        transition_id = await self.find_transition_by_status_name(issue_key, status_name)
        if not transition_id:
            error = TransitionNotFoundError(issue_key, status_name)
            logger.error("Error updating task status by name for %s: %s", issue_key, error)
            raise error

        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        if comment:
            payload["update"] = {"comment": [{"add": {"body": comment}}]}

        try:
            result = await self._request(
                "POST", f"/issue/{issue_key}/transitions", json=payload
            )
        except JiraClientError as e:
            logger.error("Error updating task status by name for %s: %s", issue_key, e)
            raise

        logger.info('Task %s status updated to "%s" successfully', issue_key, status_name)
        return result

    async def get_projects(self) -> list[dict[str, Any]]:
        """Fetch all projects visible to the configured account."""
        logger.info("Fetching Jira project list")
        try:
            projects = await self._request("GET", "/project")
        except JiraClientError as e:
            logger.error("Error fetching project list: %s", e)
            raise

        projects = projects or []
        logger.info("Fetched %d projects", len(projects))
        return projects

    async def test_connection(self) -> tuple[bool, str]:
        """Test if the credentials are valid.

        Returns:
            Tuple of (success, message)
        """
        try:
            data = await self._request("GET", "/myself")
        except JiraAuthenticationError:
            return False, "Authentication failed (401)"
        except JiraResponseError as e:
            if e.status_code == 403:
                return False, "Access forbidden (403) - check API token permissions"
            return False, f"Unexpected status {e.status_code}"
        except JiraTransportError as e:
            return False, f"Connection error: Could not reach {self.base_url} - {e}"
        except JiraClientError as e:
            return False, f"Error: {e}"

        data = data or {}
        user = data.get("emailAddress", data.get("accountId", "unknown"))
        return True, f"Connected as: {user}"
