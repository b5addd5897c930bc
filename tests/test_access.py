"""Board access resolution: creator, member roles, outsiders, missing boards."""

import pytest
from sqlmodel import select

from ciao.errors import ForbiddenError, NotFoundError
from ciao.models import BoardMember, MemberRole
from ciao.services import access, boards


def _add_member(session, board, user, role):
    session.add(BoardMember(board_id=board.id, user_id=user.id, role=role))
    session.commit()


def test_creator_is_admin(session, alice):
    board = boards.create_board(session, alice.id, "Plans")

    allowed, role = access.can_access(session, alice.id, board.id)
    assert allowed is True
    assert role == MemberRole.ADMIN
    assert access.can_edit(session, alice.id, board.id) is True


def test_creator_keeps_access_without_membership_row(session, alice):
    board = boards.create_board(session, alice.id, "Plans")
    row = session.exec(
        select(BoardMember).where(BoardMember.board_id == board.id, BoardMember.user_id == alice.id)
    ).one()
    session.delete(row)
    session.commit()

    allowed, role = access.can_access(session, alice.id, board.id)
    assert allowed is True
    assert role == MemberRole.ADMIN
    assert access.can_edit(session, alice.id, board.id) is True
    access.require_creator(session, alice.id, board.id)


@pytest.mark.parametrize(
    "role, can_edit, is_admin",
    [
        (MemberRole.ADMIN, True, True),
        (MemberRole.EDITOR, True, False),
        (MemberRole.VIEWER, False, False),
    ],
)
def test_member_roles(session, alice, bob, role, can_edit, is_admin):
    board = boards.create_board(session, alice.id, "Plans")
    _add_member(session, board, bob, role)

    board_access = access.get_board_access(session, bob.id, board.id)
    assert board_access.allowed is True
    assert board_access.role == role
    assert board_access.can_edit is can_edit
    assert board_access.is_admin is is_admin
    assert board_access.is_creator is False


def test_outsider_has_no_access(session, alice, carol):
    board = boards.create_board(session, alice.id, "Plans")

    allowed, role = access.can_access(session, carol.id, board.id)
    assert allowed is False
    assert role is None
    assert access.can_edit(session, carol.id, board.id) is False
    with pytest.raises(ForbiddenError):
        access.require_read(session, carol.id, board.id)


def test_missing_board_is_not_found(session, alice):
    with pytest.raises(NotFoundError):
        access.can_access(session, alice.id, 9999)
    with pytest.raises(NotFoundError):
        access.require_edit(session, alice.id, 9999)


def test_missing_column_and_task_are_not_found(session, alice):
    with pytest.raises(NotFoundError):
        access.column_access(session, alice.id, 9999)
    with pytest.raises(NotFoundError):
        access.task_access(session, alice.id, 9999)


def test_admin_member_is_not_creator(session, alice, bob):
    board = boards.create_board(session, alice.id, "Plans")
    _add_member(session, board, bob, MemberRole.ADMIN)

    access.require_admin(session, bob.id, board.id)
    with pytest.raises(ForbiddenError):
        access.require_creator(session, bob.id, board.id)
