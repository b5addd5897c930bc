from fastapi import APIRouter, Depends
from sqlmodel import Session

from ciao.database import get_session
from ciao.models import RoleUpdate, SettingsUpdate, User, UserRead, UserSettings
from ciao.security import get_current_user
from ciao.services import accounts

router = APIRouter()


@router.put("/role", response_model=UserRead)
def update_role(
    body: RoleUpdate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    return accounts.update_role(session, current_user, body.role)

@router.get("/settings", response_model=UserSettings)
def get_settings(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    return accounts.get_settings(session, current_user)

@router.patch("/settings", response_model=UserSettings)
def update_settings(
    body: SettingsUpdate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)
):
    return accounts.update_settings(session, current_user, body.email_notifications, body.theme)

@router.delete("")
def delete_account(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    accounts.delete_account(session, current_user)
    return {"message": "Account deleted successfully"}
