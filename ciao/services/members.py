import logging
from typing import List, Tuple

from sqlmodel import Session, select

from ciao.errors import ForbiddenError, InvalidRequestError, NotFoundError
from ciao.models import BoardMember, MemberRole, MemberRead, User
from ciao.services import access
from ciao.services.views import board_members

logger = logging.getLogger(__name__)


def parse_role(value) -> MemberRole:
    try:
        return MemberRole(value)
    except ValueError:
        raise InvalidRequestError("Invalid role. Must be 'admin', 'editor', or 'viewer'")


def list_members(session: Session, board_id: int, actor_id: int) -> List[MemberRead]:
    access.require_read(session, actor_id, board_id)
    return board_members(session, board_id)


def add_or_update_member(
    session: Session, board_id: int, actor_id: int, email: str, role: str
) -> Tuple[BoardMember, bool]:
    """Give the user behind ``email`` ``role`` on the board.

    Returns the membership and whether it was newly created. An existing
    membership is updated in place.
    """
    board_access = access.get_board_access(session, actor_id, board_id)
    if not board_access.is_admin:
        raise ForbiddenError("Only board admins can add members")
    if not email or not role:
        raise InvalidRequestError("Email and role are required")
    role = parse_role(role)

    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if user is None:
        raise NotFoundError("User not found")

    board = board_access.board
    if user.id == board.created_by_id and not board_access.is_creator:
        raise ForbiddenError("Only the creator can change the creator's membership")

    member = session.exec(
        select(BoardMember).where(BoardMember.board_id == board_id, BoardMember.user_id == user.id)
    ).first()
    if member is not None:
        if member.role == MemberRole.ADMIN and role != MemberRole.ADMIN and not board_access.is_creator:
            raise ForbiddenError("Only the creator can demote an admin")
        member.role = role
        created = False
    else:
        member = BoardMember(board_id=board_id, user_id=user.id, role=role)
        created = True
    session.add(member)
    session.commit()
    session.refresh(member)
    logger.info("User %s is now %s on board %s", user.id, role.value, board_id)
    return member, created


def remove_member(session: Session, board_id: int, actor_id: int, user_id: int) -> None:
    board_access = access.require_creator(session, actor_id, board_id)
    if user_id == board_access.board.created_by_id:
        raise InvalidRequestError("The board creator cannot be removed")
    member = session.exec(
        select(BoardMember).where(BoardMember.board_id == board_id, BoardMember.user_id == user_id)
    ).first()
    if member is None:
        raise NotFoundError("Member not found")
    session.delete(member)
    session.commit()
    logger.info("User %s removed from board %s", user_id, board_id)
