"""Execution of parsed actions against the task store."""

import logging
from collections.abc import Sequence

from ..notifications import Notification, NotificationLevel, NotifyCallback, ignore_notification
from ..tasks import Task, TaskStore
from .models import Action, ActionKind, ActionOutcome, OutcomeStatus

logger = logging.getLogger(__name__)


def find_task_by_title(tasks: Sequence[Task], title: str) -> Task | None:
    """Find a task by case-insensitive exact title.

    When several tasks share the title, the first one in listing order
    wins; there is no further disambiguation.
    """
    wanted = title.casefold()
    for task in tasks:
        if task.title.casefold() == wanted:
            return task
    return None


class ActionExecutor:
    """Applies assistant actions to the board.

    Hidden design decisions:
    - Title resolution policy
    - Per-action failure isolation
    - Notification wording
    """

    def __init__(self, store: TaskStore, notify: NotifyCallback | None = None):
        """Initialize the executor.

        Args:
            store: Task store the actions are applied through
            notify: Callback receiving one notification per resolved outcome
        """
        self._store = store
        self._notify = notify or ignore_notification

    async def execute(
        self,
        actions: Sequence[Action],
        tasks: Sequence[Task]
    ) -> list[ActionOutcome]:
        """Apply actions in order.

        All titles resolve against ``tasks`` as captured on entry, so actions
        in one batch never see each other's effects. A missing task or a
        store failure is reported and the batch carries on.

        Args:
            actions: Actions in the order they appeared in the reply
            tasks: Task snapshot to resolve titles against

        Returns:
            One outcome per action, in the same order
        """
        snapshot = tuple(tasks)
        outcomes = []
        for action in actions:
            outcome = await self._execute_one(action, snapshot)
            logger.info(
                "Action %s on %r: %s",
                action.kind.value, action.target_title, outcome.status.value
            )
            outcomes.append(outcome)
        return outcomes

    async def _execute_one(self, action: Action, snapshot: Sequence[Task]) -> ActionOutcome:
        task = find_task_by_title(snapshot, action.target_title)
        if task is None:
            self._notify(Notification(
                title="Task not found",
                description=f'Could not find a task named "{action.target_title}"',
                level=NotificationLevel.ERROR,
            ))
            return ActionOutcome(action=action, status=OutcomeStatus.NOT_FOUND)

        if action.kind is ActionKind.EDIT_TASK:
            if not action.updates:
                return ActionOutcome(action=action, status=OutcomeStatus.SKIPPED, task_id=task.id)
            failure_title = "Error updating task"
            success = Notification(
                title="Task updated",
                description=f'"{task.title}" has been updated',
                level=NotificationLevel.SUCCESS,
            )
        else:
            failure_title = "Error deleting task"
            success = Notification(
                title="Task deleted",
                description=f'"{task.title}" has been removed',
                level=NotificationLevel.SUCCESS,
            )

        try:
            if action.kind is ActionKind.EDIT_TASK:
                await self._store.update_task(task.id, action.updates)
            else:
                await self._store.delete_task(task.id)
        except Exception as e:
            # One failing store call must not stop the rest of the batch
            logger.warning("%s %r: %s", failure_title, task.title, e)
            self._notify(Notification(
                title=failure_title,
                description=str(e),
                level=NotificationLevel.ERROR,
            ))
            return ActionOutcome(
                action=action,
                status=OutcomeStatus.FAILED,
                task_id=task.id,
                error=str(e),
            )

        self._notify(success)
        return ActionOutcome(action=action, status=OutcomeStatus.APPLIED, task_id=task.id)
