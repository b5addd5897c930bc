"""Daily deadline reminders.

Collects, per user, the assignments and projects whose deadline falls
between now and ``DEADLINE_WINDOW_DAYS`` from now, and mails one summary to
each user that has not switched notifications off.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from ciao.config import DEADLINE_WINDOW_DAYS
from ciao.mailer import Mailer
from ciao.models import (
    Assignment,
    AssignmentStatus,
    Project,
    ProjectStatus,
    User,
    UserRole,
    UserSettings,
)

logger = logging.getLogger(__name__)

DAY = timedelta(days=1)


@dataclass
class DeadlineItem:
    kind: str
    title: str
    deadline: datetime
    days_left: int


@dataclass
class DeadlineReminder:
    user: User
    items: List[DeadlineItem] = field(default_factory=list)


def days_left(deadline: datetime, now: datetime) -> int:
    return math.ceil((deadline - now) / DAY)


def _notifications_enabled(session: Session, user: User) -> bool:
    settings = session.get(UserSettings, user.id)
    return settings is None or settings.email_notifications


def find_upcoming_deadlines(
    session: Session, now: Optional[datetime] = None, window_days: int = DEADLINE_WINDOW_DAYS
) -> List[DeadlineReminder]:
    now = now or datetime.utcnow()
    until = now + timedelta(days=window_days)
    reminders = []
    for user in session.exec(select(User).order_by(User.id)).all():
        if not _notifications_enabled(session, user):
            continue
        reminder = DeadlineReminder(user=user)

        if user.role == UserRole.STUDENT:
            assignments = session.exec(
                select(Assignment)
                .where(
                    Assignment.user_id == user.id,
                    Assignment.status != AssignmentStatus.COMPLETED,
                    Assignment.due_date >= now,
                    Assignment.due_date <= until,
                )
                .order_by(Assignment.due_date)
            ).all()
            reminder.items.extend(
                DeadlineItem("assignment", a.title, a.due_date, days_left(a.due_date, now)) for a in assignments
            )

        projects = session.exec(
            select(Project)
            .where(
                Project.user_id == user.id,
                Project.status == ProjectStatus.ACTIVE,
                Project.end_date >= now,
                Project.end_date <= until,
            )
            .order_by(Project.end_date)
        ).all()
        reminder.items.extend(
            DeadlineItem("project", p.title, p.end_date, days_left(p.end_date, now)) for p in projects
        )

        if reminder.items:
            reminders.append(reminder)
    return reminders


def render_reminder(reminder: DeadlineReminder) -> str:
    lines = [f"Hello {reminder.user.name or 'there'},", ""]
    lines.append(f"You have {len(reminder.items)} deadline(s) coming up:")
    for item in reminder.items:
        lines.append(
            f"- {item.title} ({item.kind}) due {item.deadline:%Y-%m-%d %H:%M} UTC, {item.days_left} day(s) left"
        )
    return "\n".join(lines)


def send_deadline_reminders(session: Session, mailer: Mailer, now: Optional[datetime] = None) -> int:
    sent = 0
    for reminder in find_upcoming_deadlines(session, now):
        try:
            mailer.send(reminder.user.email, "Upcoming deadlines", render_reminder(reminder))
        except Exception:
            logger.exception("Failed to send deadline reminder to user %s", reminder.user.id)
            continue
        sent += 1
    logger.info("Deadline sweep sent %d reminder(s)", sent)
    return sent
