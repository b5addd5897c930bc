from fastapi import APIRouter, Depends
from sqlmodel import Session

from ciao.database import get_session
from ciao.models import ColumnCreate, ColumnRead, TaskCreate, TaskRead, User
from ciao.security import get_current_user
from ciao.services import boards as board_service
from ciao.services import tasks as task_service
from ciao.services.views import task_read

router = APIRouter()


@router.put("/{column_id}", response_model=ColumnRead)
def rename_column(
    column_id: int,
    column: ColumnCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return board_service.rename_column(session, column_id, current_user.id, column.title)

@router.delete("/{column_id}")
def delete_column(column_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    board_service.delete_column(session, column_id, current_user.id)
    return {"message": "Column deleted successfully"}

@router.get("/{column_id}/tasks", response_model=list[TaskRead])
def list_tasks(column_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return [task_read(session, t) for t in task_service.list_tasks(session, column_id, current_user.id)]

@router.post("/{column_id}/tasks", response_model=TaskRead, status_code=201)
def create_task(
    column_id: int,
    task: TaskCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    db_task = task_service.create_task(
        session,
        column_id,
        current_user.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        assignee_ids=task.assignee_ids,
        labels=task.labels,
    )
    return task_read(session, db_task)
