"""Board access checks.

Every board-scoped operation resolves the target first and the caller's
standing second: an id that does not resolve is a 404, a resource that
exists but is off limits is a 403. The board creator is handled as its own
branch and never depends on a membership row existing.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlmodel import Session, select

from ciao.errors import ForbiddenError, NotFoundError
from ciao.models import Board, BoardColumn, BoardMember, MemberRole, Task

EDIT_ROLES = frozenset({MemberRole.ADMIN, MemberRole.EDITOR})


@dataclass(frozen=True)
class BoardAccess:
    board: Board
    user_id: int
    is_creator: bool
    member_role: Optional[MemberRole]

    @property
    def allowed(self) -> bool:
        return self.is_creator or self.member_role is not None

    @property
    def role(self) -> Optional[MemberRole]:
        """Effective role; the creator always counts as admin."""
        if self.is_creator:
            return MemberRole.ADMIN
        return self.member_role

    @property
    def can_edit(self) -> bool:
        return self.is_creator or self.member_role in EDIT_ROLES

    @property
    def is_admin(self) -> bool:
        return self.is_creator or self.member_role == MemberRole.ADMIN


def _access_for(session: Session, board: Board, user_id: int) -> BoardAccess:
    member = session.exec(
        select(BoardMember).where(BoardMember.board_id == board.id, BoardMember.user_id == user_id)
    ).first()
    return BoardAccess(
        board=board,
        user_id=user_id,
        is_creator=board.created_by_id == user_id,
        member_role=member.role if member else None,
    )


def get_board_access(session: Session, user_id: int, board_id: int) -> BoardAccess:
    board = session.get(Board, board_id)
    if board is None:
        raise NotFoundError("Board not found")
    return _access_for(session, board, user_id)


def can_access(session: Session, user_id: int, board_id: int) -> Tuple[bool, Optional[MemberRole]]:
    access = get_board_access(session, user_id, board_id)
    return access.allowed, access.role


def can_edit(session: Session, user_id: int, board_id: int) -> bool:
    return get_board_access(session, user_id, board_id).can_edit


def check_read(access: BoardAccess) -> BoardAccess:
    if not access.allowed:
        raise ForbiddenError("You don't have access to this board")
    return access


def check_edit(access: BoardAccess) -> BoardAccess:
    if not access.can_edit:
        raise ForbiddenError("You don't have permission to edit this board")
    return access


def require_read(session: Session, user_id: int, board_id: int) -> BoardAccess:
    return check_read(get_board_access(session, user_id, board_id))


def require_edit(session: Session, user_id: int, board_id: int) -> BoardAccess:
    return check_edit(get_board_access(session, user_id, board_id))


def require_admin(session: Session, user_id: int, board_id: int) -> BoardAccess:
    access = get_board_access(session, user_id, board_id)
    if not access.is_admin:
        raise ForbiddenError("Only board admins can do this")
    return access


def require_creator(session: Session, user_id: int, board_id: int) -> BoardAccess:
    access = get_board_access(session, user_id, board_id)
    if not access.is_creator:
        raise ForbiddenError("Only the creator can do this")
    return access


def column_access(session: Session, user_id: int, column_id: int) -> Tuple[BoardColumn, BoardAccess]:
    column = session.get(BoardColumn, column_id)
    if column is None:
        raise NotFoundError("Column not found")
    return column, get_board_access(session, user_id, column.board_id)


def task_access(session: Session, user_id: int, task_id: int) -> Tuple[Task, BoardColumn, BoardAccess]:
    task = session.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    column = session.get(BoardColumn, task.column_id)
    return task, column, get_board_access(session, user_id, column.board_id)
