from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Column, Field, SQLModel


class UserRole(str, Enum):
    STUDENT = "student"
    FREELANCER = "freelancer"


class MemberRole(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AssignmentStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Users

class UserBase(SQLModel):
    email: str = Field(unique=True, index=True)
    name: str

class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    hashed_password: str
    role: UserRole = Field(default=UserRole.STUDENT)
    email_verified: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.STUDENT

class UserLogin(SQLModel):
    email: str
    password: str

class UserRead(UserBase):
    id: int
    role: UserRole
    email_verified: Optional[datetime] = None

class UserSummary(SQLModel):
    id: int
    name: str
    email: str

class RoleUpdate(SQLModel):
    role: str


class VerificationToken(SQLModel, table=True):
    __tablename__ = "verification_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    identifier: str = Field(index=True)
    token: str = Field(unique=True, index=True)
    expires: datetime

class VerificationRequest(SQLModel):
    email: str


class UserSettings(SQLModel, table=True):
    __tablename__ = "user_settings"

    user_id: int = Field(foreign_key="users.id", primary_key=True)
    email_notifications: bool = True
    theme: str = "system"

class SettingsUpdate(SQLModel):
    email_notifications: Optional[bool] = None
    theme: Optional[str] = None


# Boards

class BoardBase(SQLModel):
    title: str
    description: Optional[str] = None

class Board(BoardBase, table=True):
    __tablename__ = "boards"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_by_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class BoardCreate(BoardBase):
    pass

class BoardUpdate(BoardBase):
    pass

class BoardRead(BoardBase):
    id: int
    created_by_id: int
    created_at: datetime
    updated_at: datetime


class BoardMember(SQLModel, table=True):
    __tablename__ = "board_members"
    __table_args__ = (UniqueConstraint("board_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    board_id: int = Field(foreign_key="boards.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: MemberRole = Field(default=MemberRole.VIEWER)
    created_at: datetime = Field(default_factory=datetime.utcnow)

class MemberUpsert(SQLModel):
    email: str
    role: str

class MemberRead(SQLModel):
    id: int
    board_id: int
    user_id: int
    role: MemberRole
    user: UserSummary


class BoardColumn(SQLModel, table=True):
    __tablename__ = "board_columns"
    __table_args__ = (UniqueConstraint("board_id", "order"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    order: int
    board_id: int = Field(foreign_key="boards.id", index=True)

class ColumnCreate(SQLModel):
    title: str

class ColumnRead(SQLModel):
    id: int
    title: str
    order: int
    board_id: int


# Tasks

class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    priority: Priority = Field(default=Priority.MEDIUM)
    due_date: Optional[datetime] = None
    labels: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    column_id: int = Field(foreign_key="board_columns.id", index=True)
    created_by_id: int = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class TaskCreate(SQLModel):
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assignee_ids: Optional[List[int]] = None
    labels: Optional[List[str]] = None

class TaskUpdate(SQLModel):
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    column_id: Optional[int] = None
    assignee_ids: Optional[List[int]] = None
    labels: Optional[List[str]] = None

class TaskMove(SQLModel):
    destination_column_id: int


class TaskAssignee(SQLModel, table=True):
    __tablename__ = "task_assignees"

    task_id: int = Field(foreign_key="tasks.id", primary_key=True)
    user_id: int = Field(foreign_key="users.id", primary_key=True)


class Comment(SQLModel, table=True):
    __tablename__ = "comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    content: str
    task_id: int = Field(foreign_key="tasks.id", index=True)
    user_id: int = Field(foreign_key="users.id")
    parent_id: Optional[int] = Field(default=None, foreign_key="comments.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class CommentCreate(SQLModel):
    content: str
    parent_id: Optional[int] = None

class CommentRead(SQLModel):
    id: int
    content: str
    task_id: int
    user_id: int
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None

class CommentThread(CommentRead):
    replies: List[CommentRead] = []


class Attachment(SQLModel, table=True):
    __tablename__ = "attachments"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="tasks.id", index=True)
    user_id: int = Field(foreign_key="users.id")
    name: str
    type: str
    size: int
    url: str
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)

class AttachmentCreate(SQLModel):
    name: str
    type: str
    size: int
    url: str

class AttachmentRead(SQLModel):
    id: int
    task_id: int
    user_id: int
    name: str
    type: str
    size: int
    url: str
    uploaded_at: datetime


class TaskRead(SQLModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: Priority
    due_date: Optional[datetime] = None
    labels: List[str] = []
    column_id: int
    created_by_id: int
    created_at: datetime
    updated_at: datetime
    assignees: List[UserSummary] = []

class TaskDetail(TaskRead):
    comments: List[CommentThread] = []
    attachments: List[AttachmentRead] = []


class ColumnDetail(ColumnRead):
    tasks: List[TaskDetail] = []

class BoardSummary(BoardRead):
    role: MemberRole
    column_count: int

class BoardDetail(BoardRead):
    created_by: Optional[UserSummary] = None
    columns: List[ColumnDetail] = []
    members: List[MemberRead] = []


# Assignments and projects

class Assignment(SQLModel, table=True):
    __tablename__ = "assignments"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    course: Optional[str] = None
    status: AssignmentStatus = Field(default=AssignmentStatus.NOT_STARTED)
    due_date: Optional[datetime] = None
    user_id: int = Field(foreign_key="users.id", index=True)
    kanban_board_id: Optional[int] = Field(default=None, foreign_key="boards.id", unique=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class AssignmentCreate(SQLModel):
    title: str
    description: Optional[str] = None
    course: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None
    create_kanban_board: bool = True

class AssignmentUpdate(SQLModel):
    title: str
    description: Optional[str] = None
    course: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None

class AssignmentRead(SQLModel):
    id: int
    title: str
    description: Optional[str] = None
    course: Optional[str] = None
    status: AssignmentStatus
    due_date: Optional[datetime] = None
    user_id: int
    kanban_board_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING)
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_id: int = Field(foreign_key="users.id", index=True)
    kanban_board_id: Optional[int] = Field(default=None, foreign_key="boards.id", unique=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class ProjectCreate(SQLModel):
    title: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    status: Optional[str] = None
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    create_kanban_board: bool = False

class ProjectUpdate(SQLModel):
    title: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    status: Optional[str] = None
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class ProjectRead(SQLModel):
    id: int
    title: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    status: ProjectStatus
    budget: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_id: int
    kanban_board_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
