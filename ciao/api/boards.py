from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from ciao.database import get_session
from ciao.models import (
    BoardCreate,
    BoardDetail,
    BoardRead,
    BoardSummary,
    BoardUpdate,
    ColumnCreate,
    ColumnRead,
    MemberRead,
    MemberUpsert,
    User,
)
from ciao.security import get_current_user
from ciao.services import boards as board_service
from ciao.services import members as member_service
from ciao.services.views import board_detail, member_read

router = APIRouter()


@router.get("", response_model=list[BoardSummary])
def list_boards(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return board_service.list_boards(session, current_user.id)

@router.post("", response_model=BoardDetail, status_code=201)
def create_board(
    board: BoardCreate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    db_board = board_service.create_board(session, current_user.id, board.title, board.description)
    return board_detail(session, db_board)

@router.get("/{board_id}", response_model=BoardDetail)
def get_board(board_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return board_detail(session, board_service.get_board(session, board_id, current_user.id))

@router.put("/{board_id}", response_model=BoardRead)
def update_board(
    board_id: int,
    board: BoardUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return board_service.update_board(session, board_id, current_user.id, board.title, board.description)

@router.delete("/{board_id}")
def delete_board(board_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    board_service.delete_board(session, board_id, current_user.id)
    return {"message": "Board deleted successfully"}


# Columns

@router.get("/{board_id}/columns", response_model=list[ColumnRead])
def list_columns(board_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return board_service.list_columns(session, board_id, current_user.id)

@router.post("/{board_id}/columns", response_model=ColumnRead, status_code=201)
def create_column(
    board_id: int,
    column: ColumnCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return board_service.add_column(session, board_id, current_user.id, column.title)


# Members

@router.get("/{board_id}/members", response_model=list[MemberRead])
def list_members(board_id: int, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return member_service.list_members(session, board_id, current_user.id)

@router.post("/{board_id}/members", response_model=MemberRead)
def add_member(
    board_id: int,
    body: MemberUpsert,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    member, created = member_service.add_or_update_member(session, board_id, current_user.id, body.email, body.role)
    payload = member_read(session, member)
    return JSONResponse(payload.model_dump(mode="json"), status_code=201 if created else 200)

@router.delete("/{board_id}/members/{user_id}")
def remove_member(
    board_id: int,
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    member_service.remove_member(session, board_id, current_user.id, user_id)
    return {"message": "Member removed successfully"}
