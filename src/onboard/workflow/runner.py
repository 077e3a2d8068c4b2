"""WorkflowRunner - drives one onboarding run and emits its events."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING
from uuid import uuid4

from onboard.reconcile import WorkflowClient
from onboard.tracker.exceptions import DuplicateCardError, TrackerError
from onboard.workflow.events import Event, EventType
from onboard.workflow.exceptions import RunAlreadyStartedError
from onboard.workflow.models import RunState
from onboard.workflow.schedule import milestone_due_date

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from onboard.tracker.client import TrackerClient
    from onboard.tracker.models import User
    from onboard.workflow.models import WorkflowSpec

logger = logging.getLogger(__name__)

BOARD_COLUMNS = ("Backlog", "In Progress", "Review", "Done")
START_COLUMN = "Backlog"

# Each step yields the event to emit and, for terminal events, the state the
# run ends in.
_Step = tuple[Event, RunState | None]


class WorkflowRunner:
    """Runs the onboarding workflow for one user against one repository.

    The run is a single linear pipeline: repository, milestone, project,
    columns, then one issue and card per task. Tracker failures become
    ``error`` events; all of them end the run except card creation failures.

    A runner is one-shot. ``run()`` returns an iterator of events that only
    advances when the caller pulls from it, and whose exhaustion marks the
    end of the run.
    """

    def __init__(
        self,
        spec: WorkflowSpec,
        user: User,
        client: WorkflowClient,
        run_id: str | None = None,
        started_at: datetime | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            spec: Organization, repository and tasks to reconcile.
            user: The resolved identity being onboarded.
            client: Workflow client over an authenticated tracker.
            run_id: Identifier stamped on every event. Generated if omitted.
            started_at: Reference time for the milestone due date. Defaults to now.
        """
        self.spec = spec
        self.user = user
        self.client = client
        self.run_id = run_id or str(uuid4())
        self.started_at = started_at
        self.state = RunState.NOT_STARTED

    def run(self, cancel: threading.Event | None = None) -> Iterator[Event]:
        """Start the run.

        Args:
            cancel: Signal checked before every event; once set, the run stops
                without emitting anything further.

        Returns:
            Iterator over the run's events, ending after the terminal event.

        Raises:
            RunAlreadyStartedError: If this runner has already been started.
        """
        if self.state is not RunState.NOT_STARTED:
            raise RunAlreadyStartedError(f"Run {self.run_id} already {self.state.value}")
        self.state = RunState.RUNNING
        logger.info(
            "Run %s started for %s on %s", self.run_id, self.user.login, self.spec.full_name
        )
        return self._events(cancel or threading.Event())

    def _events(self, cancel: threading.Event) -> Iterator[Event]:
        steps = self._steps()
        try:
            for event, outcome in steps:
                if cancel.is_set():
                    self._finish(RunState.CANCELLED)
                    return
                if outcome is not None:
                    self._finish(outcome)
                yield event
        finally:
            steps.close()
            if self.state is RunState.RUNNING:
                self._finish(RunState.CANCELLED)

    def _finish(self, state: RunState) -> None:
        self.state = state
        logger.info("Run %s %s", self.run_id, state.value)

    def _event(self, kind: EventType, message: str) -> Event:
        return Event.new(self.run_id, kind, message)

    def _error(self, message: str, error: Exception | str) -> Event:
        return Event.failure(self.run_id, message, str(error))

    def _steps(self) -> Iterator[_Step]:
        try:
            yield from self._pipeline()
        except Exception as e:
            logger.exception("Run %s failed unexpectedly: %s", self.run_id, e)
            yield self._error("Unexpected failure", e), RunState.FAILED

    def _pipeline(self) -> Iterator[_Step]:
        spec = self.spec
        username = self.user.login

        yield self._event(EventType.START, f"Starting project generation as {username}"), None

        try:
            repo = self.client.get_repository(spec.organization, spec.repository)
        except TrackerError as e:
            logger.error("Failed to fetch repository %s: %s", spec.full_name, e)
            message = f"Failed to fetch repository - {spec.full_name}"
            yield self._error(message, e), RunState.FAILED
            return

        title = f"Welcome @{username}!"
        description = f"Let's setup up @{username} for success. Here's what we need to cover..."
        due_on = milestone_due_date(self.started_at)

        try:
            milestone = repo.create_or_update_milestone(title, description, due_on)
        except TrackerError as e:
            logger.error("Failed to create milestone %r: %s", title, e)
            yield self._error(f"Failed to create milestone - {title}", e), RunState.FAILED
            return

        try:
            project = repo.create_or_update_project(title, description, BOARD_COLUMNS)
        except TrackerError as e:
            logger.error("Failed to create project %r: %s", title, e)
            yield self._error(f"Failed to create project - {title}", e), RunState.FAILED
            return

        try:
            columns = repo.fetch_columns_by_name(project)
        except TrackerError as e:
            logger.error("Failed to fetch columns of project #%d: %s", project.number, e)
            yield self._error("Failed to fetch project columns", e), RunState.FAILED
            return

        start_column = columns.get(START_COLUMN)

        for task in spec.tasks:
            yield self._event(EventType.PROGRESS, f"Preparing Issue - {task.title}"), None

            try:
                issue = repo.create_or_update_issue(
                    task.assignee or None, task.title, task.description, milestone.number
                )
            except TrackerError as e:
                logger.error("Failed to create issue %r: %s", task.title, e)
                yield self._error(f"Failed to create issue - {task.title}", e), RunState.FAILED
                return

            # Card failures are reported but never end the run.
            card_message = f"Failed to create card for issue #{issue.number} - {issue.title}"
            if start_column is None:
                missing = f"Column {START_COLUMN!r} not found in project #{project.number}"
                yield self._error(card_message, missing), None
                continue
            try:
                repo.create_card_for_issue(issue, start_column)
            except DuplicateCardError as e:
                logger.info("Issue #%d already has a card: %s", issue.number, e)
                exists = f"Card already exists for issue #{issue.number} - {issue.title}"
                yield self._error(exists, e), None
            except TrackerError as e:
                logger.warning("Failed to create card for issue #%d: %s", issue.number, e)
                yield self._error(card_message, e), None

        url = repo.project_url(project)
        yield (
            self._event(EventType.COMPLETE, f"Successfully created project @ {url}"),
            RunState.COMPLETED,
        )


def run_workflow(
    spec: WorkflowSpec,
    identity: str,
    client: TrackerClient,
    *,
    run_id: str | None = None,
    cancel: threading.Event | None = None,
) -> Iterator[Event]:
    """Run the onboarding workflow for an identity.

    The identity is resolved before the run starts, so a failure surfaces as
    an exception rather than as an event.

    Args:
        spec: Organization, repository and tasks.
        identity: GitHub login of the user being onboarded.
        client: Authenticated tracker client.
        run_id: Identifier stamped on every event.
        cancel: Optional cancellation signal.

    Returns:
        Iterator over the run's events.

    Raises:
        IdentityResolutionError: If the identity cannot be resolved.
    """
    workflow_client = WorkflowClient(client)
    user = workflow_client.resolve_user(identity)
    runner = WorkflowRunner(spec, user, workflow_client, run_id=run_id)
    return runner.run(cancel)
