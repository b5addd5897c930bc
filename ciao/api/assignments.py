from fastapi import APIRouter, Depends
from sqlmodel import Session

from ciao.database import get_session
from ciao.models import AssignmentCreate, AssignmentRead, AssignmentUpdate, User
from ciao.security import get_current_user
from ciao.services import work_items

router = APIRouter()


@router.get("", response_model=list[AssignmentRead])
def list_assignments(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return work_items.list_assignments(session, current_user)

@router.post("", response_model=AssignmentRead, status_code=201)
def create_assignment(
    body: AssignmentCreate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    return work_items.create_assignment(
        session,
        current_user,
        title=body.title,
        description=body.description,
        course=body.course,
        status=body.status,
        due_date=body.due_date,
        create_kanban_board=body.create_kanban_board,
    )

@router.get("/{assignment_id}", response_model=AssignmentRead)
def get_assignment(
    assignment_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    return work_items.get_assignment(session, assignment_id, current_user)

@router.put("/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    body: AssignmentUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return work_items.update_assignment(
        session,
        assignment_id,
        current_user,
        title=body.title,
        description=body.description,
        course=body.course,
        status=body.status,
        due_date=body.due_date,
    )

@router.delete("/{assignment_id}")
def delete_assignment(
    assignment_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    work_items.delete_assignment(session, assignment_id, current_user)
    return {"success": True}
