"""Assignments (students) and projects (freelancers).

Both can own a generated board. The board is created in the same
transaction as the parent row; afterwards the two live independently and
deleting either one leaves the other in place.
"""
import logging
from datetime import datetime
from typing import List, Optional, Type, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from ciao.errors import ForbiddenError, InvalidRequestError, NotFoundError
from ciao.models import (
    Assignment,
    AssignmentStatus,
    Board,
    Project,
    ProjectStatus,
    User,
    UserRole,
)
from ciao.services import boards
from ciao.services.boards import require_title
from ciao.services.tasks import as_utc, check_tasks_within

logger = logging.getLogger(__name__)

WorkItem = Union[Assignment, Project]


def _require_role(user: User, role: UserRole, message: str) -> None:
    if user.role != role:
        raise ForbiddenError(message)


def _parse_status(value: Optional[str], enum, default):
    if value is None:
        return default
    try:
        return enum(value)
    except ValueError:
        allowed = ", ".join(s.value for s in enum)
        raise InvalidRequestError(f"Invalid status. Must be one of: {allowed}")


def _get_owned(session: Session, model: Type[WorkItem], item_id: int, user: User) -> WorkItem:
    item = session.get(model, item_id)
    if item is None:
        raise NotFoundError(f"{model.__name__} not found")
    if item.user_id != user.id:
        raise ForbiddenError(f"You don't have access to this {model.__name__.lower()}")
    return item


def _rename_linked_board(session: Session, item: WorkItem) -> None:
    # Cosmetic follow-up; the parent update is already committed
    if item.kanban_board_id is None:
        return
    try:
        board = session.get(Board, item.kanban_board_id)
        if board is not None:
            board.title = f"{item.title} Board"
            board.updated_at = datetime.utcnow()
            session.add(board)
            session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to rename board %s after editing %s %s",
                         item.kanban_board_id, type(item).__name__.lower(), item.id)


def _create(session: Session, item: WorkItem, with_board: bool, kind: str) -> WorkItem:
    try:
        session.add(item)
        session.flush()
        if with_board and kind == "assignment":
            boards.create_board_for_assignment(session, item)
        elif with_board:
            boards.create_board_for_project(session, item)
        else:
            session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(item)
    logger.info("%s %s created by user %s (board %s)", kind.capitalize(), item.id, item.user_id,
                item.kanban_board_id)
    return item


def _delete(session: Session, item: WorkItem) -> None:
    session.delete(item)
    session.commit()


# Assignments

def list_assignments(session: Session, user: User) -> List[Assignment]:
    _require_role(user, UserRole.STUDENT, "Only students can access assignments")
    return list(
        session.exec(
            select(Assignment).where(Assignment.user_id == user.id).order_by(col(Assignment.updated_at).desc())
        ).all()
    )


def create_assignment(
    session: Session,
    user: User,
    title: str,
    description: Optional[str] = None,
    course: Optional[str] = None,
    status: Optional[str] = None,
    due_date: Optional[datetime] = None,
    create_kanban_board: bool = True,
) -> Assignment:
    _require_role(user, UserRole.STUDENT, "Only students can create assignments")
    assignment = Assignment(
        title=require_title(title),
        description=description or None,
        course=course or None,
        status=_parse_status(status, AssignmentStatus, AssignmentStatus.NOT_STARTED),
        due_date=as_utc(due_date),
        user_id=user.id,
    )
    return _create(session, assignment, create_kanban_board, "assignment")


def get_assignment(session: Session, assignment_id: int, user: User) -> Assignment:
    _require_role(user, UserRole.STUDENT, "Only students can access assignments")
    return _get_owned(session, Assignment, assignment_id, user)


def update_assignment(
    session: Session,
    assignment_id: int,
    user: User,
    title: str,
    description: Optional[str] = None,
    course: Optional[str] = None,
    status: Optional[str] = None,
    due_date: Optional[datetime] = None,
) -> Assignment:
    assignment = get_assignment(session, assignment_id, user)
    title = require_title(title)
    status = _parse_status(status, AssignmentStatus, AssignmentStatus.NOT_STARTED)
    due_date = as_utc(due_date)
    if assignment.kanban_board_id is not None:
        check_tasks_within(session, assignment.kanban_board_id, due_date)

    assignment.title = title
    assignment.description = description or None
    assignment.course = course or None
    assignment.status = status
    assignment.due_date = due_date
    assignment.updated_at = datetime.utcnow()
    session.add(assignment)
    session.commit()
    _rename_linked_board(session, assignment)
    session.refresh(assignment)
    return assignment


def delete_assignment(session: Session, assignment_id: int, user: User) -> None:
    _delete(session, get_assignment(session, assignment_id, user))


# Projects

def list_projects(session: Session, user: User) -> List[Project]:
    _require_role(user, UserRole.FREELANCER, "Only freelancers can access projects")
    return list(
        session.exec(
            select(Project).where(Project.user_id == user.id).order_by(col(Project.updated_at).desc())
        ).all()
    )


def create_project(
    session: Session,
    user: User,
    title: str,
    description: Optional[str] = None,
    client_name: Optional[str] = None,
    status: Optional[str] = None,
    budget: Optional[float] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    create_kanban_board: bool = False,
) -> Project:
    _require_role(user, UserRole.FREELANCER, "Only freelancers can create projects")
    project = Project(
        title=require_title(title),
        description=description,
        client_name=client_name,
        status=_parse_status(status, ProjectStatus, ProjectStatus.PLANNING),
        budget=budget,
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
        user_id=user.id,
    )
    return _create(session, project, create_kanban_board, "project")


def get_project(session: Session, project_id: int, user: User) -> Project:
    _require_role(user, UserRole.FREELANCER, "Only freelancers can access projects")
    return _get_owned(session, Project, project_id, user)


def update_project(
    session: Session,
    project_id: int,
    user: User,
    title: str,
    description: Optional[str] = None,
    client_name: Optional[str] = None,
    status: Optional[str] = None,
    budget: Optional[float] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Project:
    project = get_project(session, project_id, user)
    title = require_title(title)
    status = _parse_status(status, ProjectStatus, ProjectStatus.PLANNING)

    project.title = title
    project.description = description
    project.client_name = client_name
    project.status = status
    project.budget = budget
    project.start_date = as_utc(start_date)
    project.end_date = as_utc(end_date)
    project.updated_at = datetime.utcnow()
    session.add(project)
    session.commit()
    _rename_linked_board(session, project)
    session.refresh(project)
    return project


def delete_project(session: Session, project_id: int, user: User) -> None:
    _delete(session, get_project(session, project_id, user))
