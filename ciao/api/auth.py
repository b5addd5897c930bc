from fastapi import APIRouter, Depends
from sqlmodel import Session

from ciao.database import get_session
from ciao.mailer import Mailer, get_mailer
from ciao.models import User, UserCreate, UserLogin, UserRead, VerificationRequest
from ciao.security import create_access_token, get_current_user
from ciao.services import accounts

router = APIRouter()


@router.post("/signup", response_model=UserRead, status_code=201)
def signup(user: UserCreate, session: Session = Depends(get_session), mailer: Mailer = Depends(get_mailer)):
    return accounts.register_user(session, mailer, user.email, user.name, user.password, user.role)

@router.post("/login")
def login(user: UserLogin, session: Session = Depends(get_session)):
    db_user = accounts.authenticate(session, user.email, user.password)
    token = create_access_token({"sub": str(db_user.id)})
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user

@router.post("/verify-email/send")
def send_verification_email(
    body: VerificationRequest, session: Session = Depends(get_session), mailer: Mailer = Depends(get_mailer)
):
    accounts.send_verification(session, mailer, body.email)
    return {"message": "Verification email sent"}

@router.get("/verify-email")
def verify_email(token: str | None = None, session: Session = Depends(get_session)):
    accounts.verify_email(session, token)
    return {"success": True, "message": "Email verified"}
