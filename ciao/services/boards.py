"""Board and column lifecycle."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from ciao.errors import InvalidRequestError
from ciao.models import (
    Assignment,
    Board,
    BoardColumn,
    BoardMember,
    BoardSummary,
    MemberRole,
    Project,
)
from ciao.services import access
from ciao.services.cascade import purge_board, purge_columns

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = ("To Do", "In Progress", "Done")


def require_title(title: Optional[str], label: str = "Title") -> str:
    if not title or not title.strip():
        raise InvalidRequestError(f"{label} is required")
    return title.strip()


def seed_board(session: Session, owner_id: int, title: str, description: Optional[str] = None) -> Board:
    """Stage a board with its default columns and the owner's admin row.

    Only flushes; the caller commits so the seeding joins its transaction.
    """
    board = Board(title=title, description=description, created_by_id=owner_id)
    session.add(board)
    session.flush()
    for order, column_title in enumerate(DEFAULT_COLUMNS):
        session.add(BoardColumn(title=column_title, order=order, board_id=board.id))
    session.add(BoardMember(board_id=board.id, user_id=owner_id, role=MemberRole.ADMIN))
    session.flush()
    return board


def create_board(session: Session, owner_id: int, title: str, description: Optional[str] = None) -> Board:
    title = require_title(title)
    board = seed_board(session, owner_id, title, description)
    session.commit()
    session.refresh(board)
    logger.info("Board %s created by user %s", board.id, owner_id)
    return board


def link_new_board(session: Session, parent, kind: str) -> Board:
    board = seed_board(
        session,
        parent.user_id,
        f"{parent.title} Board",
        f"Kanban board for {kind}: {parent.title}",
    )
    parent.kanban_board_id = board.id
    session.add(parent)
    session.flush()
    return board


def create_board_for_assignment(session: Session, assignment: Assignment) -> Board:
    """Create the assignment's board and link it back in one transaction."""
    board = link_new_board(session, assignment, "assignment")
    session.commit()
    session.refresh(board)
    logger.info("Board %s created for assignment %s", board.id, assignment.id)
    return board


def create_board_for_project(session: Session, project: Project) -> Board:
    board = link_new_board(session, project, "project")
    session.commit()
    session.refresh(board)
    logger.info("Board %s created for project %s", board.id, project.id)
    return board


def list_boards(session: Session, user_id: int) -> List[BoardSummary]:
    member_boards = select(BoardMember.board_id).where(BoardMember.user_id == user_id)
    boards = session.exec(
        select(Board)
        .where(or_(Board.created_by_id == user_id, col(Board.id).in_(member_boards)))
        .order_by(col(Board.updated_at).desc(), col(Board.id).desc())
    ).all()
    summaries = []
    for board in boards:
        column_count = session.exec(
            select(func.count()).select_from(BoardColumn).where(BoardColumn.board_id == board.id)
        ).one()
        role = access.get_board_access(session, user_id, board.id).role
        summaries.append(BoardSummary.model_validate(board, update={"role": role, "column_count": column_count}))
    return summaries


def get_board(session: Session, board_id: int, actor_id: int) -> Board:
    return access.require_read(session, actor_id, board_id).board


def update_board(
    session: Session, board_id: int, actor_id: int, title: str, description: Optional[str] = None
) -> Board:
    board = access.require_admin(session, actor_id, board_id).board
    board.title = require_title(title)
    board.description = description
    board.updated_at = datetime.utcnow()
    session.add(board)
    session.commit()
    session.refresh(board)
    return board


def touch_board(session: Session, board_id: int) -> None:
    board = session.get(Board, board_id)
    board.updated_at = datetime.utcnow()
    session.add(board)


def delete_board(session: Session, board_id: int, actor_id: int) -> None:
    board = access.require_creator(session, actor_id, board_id).board
    purge_board(session, board)
    session.commit()
    logger.info("Board %s deleted by user %s", board_id, actor_id)


# Columns

def list_columns(session: Session, board_id: int, actor_id: int) -> List[BoardColumn]:
    access.require_read(session, actor_id, board_id)
    return list(
        session.exec(select(BoardColumn).where(BoardColumn.board_id == board_id).order_by(BoardColumn.order)).all()
    )


def add_column(session: Session, board_id: int, actor_id: int, title: str) -> BoardColumn:
    access.require_edit(session, actor_id, board_id)
    title = require_title(title)
    highest = session.exec(
        select(func.max(BoardColumn.order)).where(BoardColumn.board_id == board_id)
    ).one()
    column = BoardColumn(title=title, board_id=board_id, order=0 if highest is None else highest + 1)
    session.add(column)
    touch_board(session, board_id)
    session.commit()
    session.refresh(column)
    return column


def rename_column(session: Session, column_id: int, actor_id: int, title: str) -> BoardColumn:
    column, board_access = access.column_access(session, actor_id, column_id)
    access.check_edit(board_access)
    column.title = require_title(title)
    session.add(column)
    session.commit()
    session.refresh(column)
    return column


def delete_column(session: Session, column_id: int, actor_id: int) -> None:
    column, board_access = access.column_access(session, actor_id, column_id)
    access.check_edit(board_access)
    board_id = column.board_id
    purge_columns(session, [column_id])
    touch_board(session, board_id)
    session.commit()
    logger.info("Column %s deleted from board %s", column_id, board_id)
