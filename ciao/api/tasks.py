from fastapi import APIRouter, Depends
from sqlmodel import Session

from ciao.database import get_session
from ciao.models import (
    AttachmentCreate,
    AttachmentRead,
    CommentCreate,
    CommentRead,
    CommentThread,
    TaskDetail,
    TaskMove,
    TaskRead,
    TaskUpdate,
    User,
)
from ciao.security import get_current_user
from ciao.services import comments as comment_service
from ciao.services import tasks as task_service
from ciao.services.views import comment_read, task_detail, task_read

router = APIRouter()


@router.get("/{task_id}", response_model=TaskDetail)
def get_task(task_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return task_detail(session, task_service.get_task(session, task_id, current_user.id))

@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: int,
    task: TaskUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    changes = task.model_dump(exclude_unset=True)
    return task_read(session, task_service.update_task(session, task_id, current_user.id, changes))

@router.put("/{task_id}/move", response_model=TaskRead)
def move_task(
    task_id: int,
    move: TaskMove,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    db_task = task_service.move_task(session, task_id, current_user.id, move.destination_column_id)
    return task_read(session, db_task)

@router.delete("/{task_id}")
def delete_task(task_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    task_service.delete_task(session, task_id, current_user.id)
    return {"message": "Task deleted successfully"}


# Comments

@router.get("/{task_id}/comments", response_model=list[CommentThread])
def list_comments(task_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return comment_service.list_comments(session, task_id, current_user.id)

@router.post("/{task_id}/comments", response_model=CommentRead, status_code=201)
def add_comment(
    task_id: int,
    comment: CommentCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    db_comment = comment_service.add_comment(session, task_id, current_user.id, comment.content, comment.parent_id)
    return comment_read(session, db_comment)


# Attachments

@router.post("/{task_id}/attachments", response_model=AttachmentRead, status_code=201)
def add_attachment(
    task_id: int,
    attachment: AttachmentCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return task_service.add_attachment(
        session,
        task_id,
        current_user.id,
        attachment.name,
        attachment.type,
        attachment.size,
        attachment.url,
    )
