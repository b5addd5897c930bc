from typing import List, Optional

from sqlmodel import Session

from ciao.errors import InvalidRequestError, NotFoundError
from ciao.models import Comment, CommentThread
from ciao.services import access
from ciao.services.views import comment_threads


def add_comment(
    session: Session, task_id: int, actor_id: int, content: str, parent_id: Optional[int] = None
) -> Comment:
    # Any member may comment, viewers included
    task, _, board_access = access.task_access(session, actor_id, task_id)
    access.check_read(board_access)
    if not content or not content.strip():
        raise InvalidRequestError("Content is required")

    if parent_id is not None:
        parent = session.get(Comment, parent_id)
        if parent is None or parent.task_id != task.id:
            raise NotFoundError("Parent comment not found")
        if parent.parent_id is not None:
            raise InvalidRequestError("Replies cannot be nested")

    comment = Comment(content=content.strip(), task_id=task.id, user_id=actor_id, parent_id=parent_id)
    session.add(comment)
    session.commit()
    session.refresh(comment)
    return comment


def list_comments(session: Session, task_id: int, actor_id: int) -> List[CommentThread]:
    task, _, board_access = access.task_access(session, actor_id, task_id)
    access.check_read(board_access)
    return comment_threads(session, task.id)
