from fastapi import APIRouter, Depends
from sqlmodel import Session

from ciao.database import get_session
from ciao.models import ProjectCreate, ProjectRead, ProjectUpdate, User
from ciao.security import get_current_user
from ciao.services import work_items

router = APIRouter()


@router.get("", response_model=list[ProjectRead])
def list_projects(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return work_items.list_projects(session, current_user)

@router.post("", response_model=ProjectRead, status_code=201)
def create_project(
    body: ProjectCreate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    return work_items.create_project(
        session,
        current_user,
        title=body.title,
        description=body.description,
        client_name=body.client_name,
        status=body.status,
        budget=body.budget,
        start_date=body.start_date,
        end_date=body.end_date,
        create_kanban_board=body.create_kanban_board,
    )

@router.get("/{project_id}", response_model=ProjectRead)
def get_project(project_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return work_items.get_project(session, project_id, current_user)

@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    body: ProjectUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return work_items.update_project(
        session,
        project_id,
        current_user,
        title=body.title,
        description=body.description,
        client_name=body.client_name,
        status=body.status,
        budget=body.budget,
        start_date=body.start_date,
        end_date=body.end_date,
    )

@router.delete("/{project_id}")
def delete_project(project_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    work_items.delete_project(session, project_id, current_user)
    return {"success": True}
