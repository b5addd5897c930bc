"""Ordered deletion of dependent rows.

Children always go before their parents and each stage is flushed before
the next one, so the routines work the same with or without database level
cascades. None of them commit; callers own the transaction.
"""
from typing import Iterable, List

from sqlmodel import Session, select

from ciao.models import (
    Assignment,
    Attachment,
    Board,
    BoardColumn,
    BoardMember,
    Comment,
    Project,
    Task,
    TaskAssignee,
)


def _delete_rows(session: Session, rows: Iterable) -> int:
    count = 0
    for row in rows:
        session.delete(row)
        count += 1
    session.flush()
    return count


def purge_comments(session: Session, comments: List[Comment]) -> None:
    """Delete ``comments`` together with every reply pointing at them."""
    if not comments:
        return
    ids = [c.id for c in comments]
    replies = session.exec(select(Comment).where(Comment.parent_id.in_(ids))).all()
    pending = [r for r in replies if r.id not in ids]
    _delete_rows(session, pending)
    _delete_rows(session, [c for c in comments if c.parent_id is not None])
    _delete_rows(session, [c for c in comments if c.parent_id is None])


def purge_tasks(session: Session, task_ids: List[int]) -> None:
    if not task_ids:
        return
    comments = session.exec(select(Comment).where(Comment.task_id.in_(task_ids))).all()
    purge_comments(session, list(comments))
    _delete_rows(session, session.exec(select(Attachment).where(Attachment.task_id.in_(task_ids))).all())
    _delete_rows(session, session.exec(select(TaskAssignee).where(TaskAssignee.task_id.in_(task_ids))).all())
    _delete_rows(session, session.exec(select(Task).where(Task.id.in_(task_ids))).all())


def purge_columns(session: Session, column_ids: List[int]) -> None:
    if not column_ids:
        return
    task_ids = session.exec(select(Task.id).where(Task.column_id.in_(column_ids))).all()
    purge_tasks(session, list(task_ids))
    _delete_rows(session, session.exec(select(BoardColumn).where(BoardColumn.id.in_(column_ids))).all())


def purge_board(session: Session, board: Board) -> None:
    column_ids = session.exec(select(BoardColumn.id).where(BoardColumn.board_id == board.id)).all()
    purge_columns(session, list(column_ids))
    _delete_rows(session, session.exec(select(BoardMember).where(BoardMember.board_id == board.id)).all())

    # Parents generated the board but outlive it
    for parent in (Assignment, Project):
        linked = session.exec(select(parent).where(parent.kanban_board_id == board.id)).all()
        for row in linked:
            row.kanban_board_id = None
            session.add(row)
    session.flush()

    session.delete(board)
    session.flush()
