"""Task lifecycle: create, update, move and delete tasks inside columns.

A task's column is its only state. It changes through ``move_task`` or an
``update_task`` carrying ``column_id``, and never crosses into another
board. When a board was generated for an assignment that has a due date,
no task on it may be due later than the assignment.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlmodel import Session, col, select

from ciao.errors import InvalidRequestError, NotFoundError
from ciao.models import (
    Assignment,
    Attachment,
    BoardColumn,
    Priority,
    Task,
    TaskAssignee,
    User,
)
from ciao.services import access
from ciao.services.boards import require_title, touch_board
from ciao.services.cascade import purge_tasks

logger = logging.getLogger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to the naive UTC datetimes stored in the database."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_priority(value: Optional[str]) -> Priority:
    if value is None:
        return Priority.MEDIUM
    try:
        return Priority(value)
    except ValueError:
        raise InvalidRequestError("Invalid priority. Must be 'low', 'medium', or 'high'")


def assignment_deadline(session: Session, board_id: int) -> Optional[datetime]:
    assignment = session.exec(select(Assignment).where(Assignment.kanban_board_id == board_id)).first()
    return assignment.due_date if assignment else None


def check_due_date(session: Session, board_id: int, due_date: Optional[datetime]) -> None:
    if due_date is None:
        return
    deadline = assignment_deadline(session, board_id)
    if deadline is not None and due_date > deadline:
        raise InvalidRequestError(
            f"Task due date cannot be later than the assignment due date ({deadline.isoformat()})"
        )


def check_tasks_within(session: Session, board_id: int, deadline: Optional[datetime]) -> None:
    """Reject ``deadline`` if a task on the board is already due after it."""
    if deadline is None:
        return
    late = session.exec(
        select(Task)
        .join(BoardColumn, Task.column_id == BoardColumn.id)
        .where(BoardColumn.board_id == board_id, Task.due_date > deadline)
        .order_by(col(Task.due_date).desc())
    ).first()
    if late is not None:
        raise InvalidRequestError(
            f"Task '{late.title}' is due {late.due_date.isoformat()}, later than the new due date"
        )


def resolve_assignees(session: Session, assignee_ids: List[int]) -> List[int]:
    unique_ids = list(dict.fromkeys(assignee_ids))
    if not unique_ids:
        return []
    found = set(session.exec(select(User.id).where(col(User.id).in_(unique_ids))).all())
    missing = [i for i in unique_ids if i not in found]
    if missing:
        raise InvalidRequestError(f"Unknown assignee ids: {missing}")
    return unique_ids


def _replace_assignees(session: Session, task_id: int, user_ids: List[int]) -> None:
    for link in session.exec(select(TaskAssignee).where(TaskAssignee.task_id == task_id)).all():
        session.delete(link)
    session.flush()
    for user_id in user_ids:
        session.add(TaskAssignee(task_id=task_id, user_id=user_id))


def _destination_column(session: Session, source: BoardColumn, destination_id: int) -> BoardColumn:
    destination = session.get(BoardColumn, destination_id)
    if destination is None:
        raise NotFoundError("Destination column not found")
    if destination.board_id != source.board_id:
        raise InvalidRequestError("Cannot move task to a column in a different board")
    return destination


def list_tasks(session: Session, column_id: int, actor_id: int) -> List[Task]:
    column, board_access = access.column_access(session, actor_id, column_id)
    access.check_read(board_access)
    return list(
        session.exec(
            select(Task).where(Task.column_id == column.id).order_by(col(Task.updated_at).desc(), col(Task.id).desc())
        ).all()
    )


def get_task(session: Session, task_id: int, actor_id: int) -> Task:
    task, _, board_access = access.task_access(session, actor_id, task_id)
    access.check_read(board_access)
    return task


def create_task(
    session: Session,
    column_id: int,
    actor_id: int,
    title: str,
    description: Optional[str] = None,
    priority: Optional[str] = None,
    due_date: Optional[datetime] = None,
    assignee_ids: Optional[List[int]] = None,
    labels: Optional[List[str]] = None,
) -> Task:
    column, board_access = access.column_access(session, actor_id, column_id)
    access.check_edit(board_access)
    title = require_title(title)
    priority = parse_priority(priority)
    due_date = as_utc(due_date)
    check_due_date(session, column.board_id, due_date)
    assignees = resolve_assignees(session, assignee_ids or [])

    task = Task(
        title=title,
        description=description,
        priority=priority,
        due_date=due_date,
        labels=list(labels or []),
        column_id=column.id,
        created_by_id=actor_id,
    )
    try:
        session.add(task)
        session.flush()
        for user_id in assignees:
            session.add(TaskAssignee(task_id=task.id, user_id=user_id))
        touch_board(session, column.board_id)
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(task)
    return task


def update_task(session: Session, task_id: int, actor_id: int, changes: Dict[str, Any]) -> Task:
    """Apply ``changes`` to the task.

    ``title`` is always required; the other fields change only when present.
    ``assignee_ids``, when present, replaces the whole assignee set in the
    same transaction as the scalar fields.
    """
    task, column, board_access = access.task_access(session, actor_id, task_id)
    access.check_edit(board_access)

    updates: Dict[str, Any] = {"title": require_title(changes.get("title"))}
    if "description" in changes:
        updates["description"] = changes["description"]
    if "priority" in changes:
        if changes["priority"] is None:
            raise InvalidRequestError("Invalid priority. Must be 'low', 'medium', or 'high'")
        updates["priority"] = parse_priority(changes["priority"])
    if "labels" in changes:
        updates["labels"] = list(changes["labels"] or [])
    if "due_date" in changes:
        updates["due_date"] = as_utc(changes["due_date"])
        check_due_date(session, column.board_id, updates["due_date"])
    if changes.get("column_id") is not None and changes["column_id"] != task.column_id:
        updates["column_id"] = _destination_column(session, column, changes["column_id"]).id
    assignees = None
    if "assignee_ids" in changes:
        assignees = resolve_assignees(session, changes["assignee_ids"] or [])

    try:
        if assignees is not None:
            _replace_assignees(session, task.id, assignees)
        for field, value in updates.items():
            setattr(task, field, value)
        task.updated_at = datetime.utcnow()
        session.add(task)
        touch_board(session, column.board_id)
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(task)
    return task


def move_task(session: Session, task_id: int, actor_id: int, destination_column_id: int) -> Task:
    task, column, board_access = access.task_access(session, actor_id, task_id)
    access.check_edit(board_access)
    destination = _destination_column(session, column, destination_column_id)

    task.column_id = destination.id
    task.updated_at = datetime.utcnow()
    session.add(task)
    touch_board(session, column.board_id)
    session.commit()
    session.refresh(task)
    logger.info("Task %s moved from column %s to %s", task.id, column.id, destination.id)
    return task


def delete_task(session: Session, task_id: int, actor_id: int) -> None:
    task, column, board_access = access.task_access(session, actor_id, task_id)
    access.check_edit(board_access)
    purge_tasks(session, [task.id])
    touch_board(session, column.board_id)
    session.commit()


def add_attachment(
    session: Session, task_id: int, actor_id: int, name: str, type: str, size: int, url: str
) -> Attachment:
    task, _, board_access = access.task_access(session, actor_id, task_id)
    access.check_edit(board_access)
    name = require_title(name, "Name")
    if not url:
        raise InvalidRequestError("URL is required")
    if size < 0:
        raise InvalidRequestError("Size must not be negative")
    attachment = Attachment(task_id=task.id, user_id=actor_id, name=name, type=type, size=size, url=url)
    session.add(attachment)
    session.commit()
    session.refresh(attachment)
    return attachment
