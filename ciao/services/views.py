"""Build the nested read models returned by the API."""
from typing import Dict, Iterable, List

from sqlmodel import Session, col, select

from ciao.models import (
    Attachment,
    AttachmentRead,
    Board,
    BoardColumn,
    BoardDetail,
    BoardMember,
    ColumnDetail,
    Comment,
    CommentRead,
    CommentThread,
    MemberRead,
    Task,
    TaskAssignee,
    TaskDetail,
    TaskRead,
    User,
    UserSummary,
)


def user_summary(user: User) -> UserSummary:
    return UserSummary(id=user.id, name=user.name, email=user.email)


def _summaries(session: Session, user_ids: Iterable[int]) -> Dict[int, UserSummary]:
    ids = set(user_ids)
    if not ids:
        return {}
    users = session.exec(select(User).where(col(User.id).in_(ids))).all()
    return {u.id: user_summary(u) for u in users}


def member_read(session: Session, member: BoardMember) -> MemberRead:
    user = session.get(User, member.user_id)
    return MemberRead.model_validate(member, update={"user": user_summary(user)})


def board_members(session: Session, board_id: int) -> List[MemberRead]:
    members = session.exec(
        select(BoardMember).where(BoardMember.board_id == board_id).order_by(BoardMember.created_at, BoardMember.id)
    ).all()
    users = _summaries(session, (m.user_id for m in members))
    return [MemberRead.model_validate(m, update={"user": users[m.user_id]}) for m in members]


def comment_threads(session: Session, task_id: int) -> List[CommentThread]:
    """Top-level comments oldest first, each with its direct replies."""
    comments = session.exec(
        select(Comment).where(Comment.task_id == task_id).order_by(Comment.created_at, Comment.id)
    ).all()
    users = _summaries(session, (c.user_id for c in comments))
    replies: Dict[int, List[CommentRead]] = {}
    for c in comments:
        if c.parent_id is not None:
            replies.setdefault(c.parent_id, []).append(
                CommentRead.model_validate(c, update={"user": users.get(c.user_id)})
            )
    return [
        CommentThread.model_validate(c, update={"user": users.get(c.user_id), "replies": replies.get(c.id, [])})
        for c in comments
        if c.parent_id is None
    ]


def comment_read(session: Session, comment: Comment) -> CommentRead:
    user = session.get(User, comment.user_id)
    return CommentRead.model_validate(comment, update={"user": user_summary(user) if user else None})


def _assignees(session: Session, task_id: int) -> List[UserSummary]:
    user_ids = session.exec(select(TaskAssignee.user_id).where(TaskAssignee.task_id == task_id)).all()
    return sorted(_summaries(session, user_ids).values(), key=lambda u: u.id)


def task_read(session: Session, task: Task) -> TaskRead:
    return TaskRead.model_validate(
        task, update={"assignees": _assignees(session, task.id), "labels": task.labels or []}
    )


def task_detail(session: Session, task: Task) -> TaskDetail:
    attachments = session.exec(
        select(Attachment).where(Attachment.task_id == task.id).order_by(Attachment.uploaded_at, Attachment.id)
    ).all()
    return TaskDetail.model_validate(
        task,
        update={
            "assignees": _assignees(session, task.id),
            "labels": task.labels or [],
            "comments": comment_threads(session, task.id),
            "attachments": [AttachmentRead.model_validate(a) for a in attachments],
        },
    )


def column_tasks(session: Session, column_id: int) -> List[TaskDetail]:
    tasks = session.exec(
        select(Task).where(Task.column_id == column_id).order_by(col(Task.updated_at).desc(), col(Task.id).desc())
    ).all()
    return [task_detail(session, t) for t in tasks]


def board_detail(session: Session, board: Board) -> BoardDetail:
    columns = session.exec(
        select(BoardColumn).where(BoardColumn.board_id == board.id).order_by(BoardColumn.order)
    ).all()
    creator = session.get(User, board.created_by_id)
    return BoardDetail.model_validate(
        board,
        update={
            "created_by": user_summary(creator) if creator else None,
            "columns": [
                ColumnDetail.model_validate(c, update={"tasks": column_tasks(session, c.id)}) for c in columns
            ],
            "members": board_members(session, board.id),
        },
    )
