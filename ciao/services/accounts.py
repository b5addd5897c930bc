"""User accounts: registration, email verification, login, settings and
account removal."""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from ciao.config import APP_BASE_URL, REQUIRE_EMAIL_VERIFICATION, VERIFICATION_TOKEN_TTL_HOURS
from ciao.errors import AuthenticationError, ForbiddenError, InvalidRequestError, NotFoundError
from ciao.mailer import Mailer
from ciao.models import (
    Assignment,
    Attachment,
    Board,
    BoardMember,
    Comment,
    Project,
    Task,
    TaskAssignee,
    User,
    UserRole,
    UserSettings,
    VerificationToken,
)
from ciao.security import get_password_hash, verify_password
from ciao.services.cascade import purge_board, purge_comments, purge_tasks

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def parse_user_role(value) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        raise InvalidRequestError("Invalid role. Must be 'student' or 'freelancer'")


def issue_verification_token(session: Session, email: str) -> VerificationToken:
    """Replace any token held by ``email`` with a fresh one."""
    for old in session.exec(select(VerificationToken).where(VerificationToken.identifier == email)).all():
        session.delete(old)
    session.flush()
    token = VerificationToken(
        identifier=email,
        token=secrets.token_hex(32),
        expires=datetime.utcnow() + timedelta(hours=VERIFICATION_TOKEN_TTL_HOURS),
    )
    session.add(token)
    session.commit()
    session.refresh(token)
    return token


def _mail_verification(mailer: Mailer, email: str, token: str) -> None:
    link = f"{APP_BASE_URL}/auth/verify-email?token={token}"
    mailer.send(email, "Verify your email", f"Confirm your Ciao account by opening {link}")


def register_user(
    session: Session, mailer: Mailer, email: str, name: str, password: str, role=UserRole.STUDENT
) -> User:
    email = normalize_email(email)
    if not email or not name or not password:
        raise InvalidRequestError("Missing required fields")
    role = parse_user_role(role or UserRole.STUDENT)
    if session.exec(select(User).where(User.email == email)).first():
        raise InvalidRequestError("Email already registered")

    user = User(email=email, name=name.strip(), hashed_password=get_password_hash(password), role=role)
    session.add(user)
    session.flush()
    token = issue_verification_token(session, email)
    session.refresh(user)
    _mail_verification(mailer, email, token.token)
    logger.info("Registered user %s", user.id)
    return user


def send_verification(session: Session, mailer: Mailer, email: str) -> None:
    email = normalize_email(email)
    if not email:
        raise InvalidRequestError("Email is required")
    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        raise NotFoundError("User not found")
    if user.email_verified:
        raise InvalidRequestError("Email already verified")
    token = issue_verification_token(session, email)
    _mail_verification(mailer, email, token.token)


def verify_email(session: Session, token: Optional[str]) -> User:
    if not token:
        raise InvalidRequestError("Invalid token")
    record = session.exec(select(VerificationToken).where(VerificationToken.token == token)).first()
    if record is None:
        raise InvalidRequestError("Token not found or already used")
    if datetime.utcnow() > record.expires:
        session.delete(record)
        session.commit()
        raise InvalidRequestError("Verification token has expired, request a new one")

    user = session.exec(select(User).where(User.email == record.identifier)).first()
    if user is None:
        raise NotFoundError("User not found")
    user.email_verified = datetime.utcnow()
    session.add(user)
    session.delete(record)
    session.commit()
    session.refresh(user)
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    user = session.exec(select(User).where(User.email == normalize_email(email))).first()
    if not user or not password or not verify_password(password, user.hashed_password):
        logger.warning("Failed login for %s", normalize_email(email))
        raise AuthenticationError("Invalid credentials")
    if REQUIRE_EMAIL_VERIFICATION and not user.email_verified:
        raise ForbiddenError("Email not verified")
    return user


def update_role(session: Session, user: User, role) -> User:
    user.role = parse_user_role(role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_settings(session: Session, user: User) -> UserSettings:
    settings = session.get(UserSettings, user.id)
    if settings is None:
        settings = UserSettings(user_id=user.id)
        session.add(settings)
        session.commit()
        session.refresh(settings)
    return settings


def update_settings(
    session: Session, user: User, email_notifications: Optional[bool] = None, theme: Optional[str] = None
) -> UserSettings:
    settings = get_settings(session, user)
    if email_notifications is not None:
        settings.email_notifications = email_notifications
    if theme is not None:
        settings.theme = theme
    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings


def delete_account(session: Session, user: User) -> None:
    """Remove ``user`` and everything they own in a single transaction."""
    user_id = user.id
    for board in session.exec(select(Board).where(Board.created_by_id == user_id)).all():
        purge_board(session, board)

    # Their footprint on boards owned by others
    foreign_tasks = session.exec(select(Task.id).where(Task.created_by_id == user_id)).all()
    purge_tasks(session, list(foreign_tasks))
    purge_comments(session, list(session.exec(select(Comment).where(Comment.user_id == user_id)).all()))
    for model, column in (
        (Attachment, Attachment.user_id),
        (TaskAssignee, TaskAssignee.user_id),
        (BoardMember, BoardMember.user_id),
        (Assignment, Assignment.user_id),
        (Project, Project.user_id),
    ):
        for row in session.exec(select(model).where(column == user_id)).all():
            session.delete(row)
        session.flush()

    settings = session.get(UserSettings, user.id)
    if settings is not None:
        session.delete(settings)
    for token in session.exec(select(VerificationToken).where(VerificationToken.identifier == user.email)).all():
        session.delete(token)
    session.flush()

    session.delete(user)
    session.commit()
    logger.info("Deleted account %s", user_id)
