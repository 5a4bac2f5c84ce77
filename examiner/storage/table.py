import datetime

from sqlalchemy import ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, Text

from examiner.model import BlueprintID, ExamSessionID, MessageID, QuestionID, ThreadID, UserID

from .type import ShortUUIDKeyType

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        QuestionID: ShortUUIDKeyType(QuestionID),
        BlueprintID: ShortUUIDKeyType(BlueprintID),
        ExamSessionID: ShortUUIDKeyType(ExamSessionID),
        ThreadID: ShortUUIDKeyType(ThreadID),
        MessageID: ShortUUIDKeyType(MessageID),
        datetime.datetime: DateTime(timezone=True),
    }


# Question bank


class questions(base):
    __tablename__ = "questions"

    question_id: Mapped[QuestionID] = mapped_column(primary_key=True)
    text: Mapped[str] = mapped_column(Text)
    difficulty: Mapped[str]
    topic: Mapped[str] = mapped_column(index=True)
    max_points: Mapped[int]
    position: Mapped[int]
    rubric: Mapped[str] = mapped_column(Text, default="")
    reference_answer: Mapped[str] = mapped_column(Text, default="")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class blueprints(base):
    __tablename__ = "blueprints"

    blueprint_id: Mapped[BlueprintID] = mapped_column(primary_key=True)
    name: Mapped[str]
    max_followups: Mapped[int]
    time_limit_minutes: Mapped[int | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class imported_files(base):
    __tablename__ = "imported_files"

    path: Mapped[str] = mapped_column(primary_key=True)
    sha256: Mapped[str]
    imported_at: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Sessions


class exam_sessions(base):
    __tablename__ = "exam_sessions"

    session_id: Mapped[ExamSessionID] = mapped_column(primary_key=True)
    blueprint_id: Mapped[BlueprintID] = mapped_column(ForeignKey("blueprints.blueprint_id"))
    respondent_id: Mapped[UserID] = mapped_column(index=True)
    status: Mapped[str] = mapped_column(default="in_progress")
    started_at: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    submitted_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class threads(base):
    __tablename__ = "threads"
    __table_args__ = (UniqueConstraint("session_id", "position"),)

    thread_id: Mapped[ThreadID] = mapped_column(primary_key=True)
    session_id: Mapped[ExamSessionID] = mapped_column(ForeignKey("exam_sessions.session_id", ondelete="CASCADE"))
    question_id: Mapped[QuestionID] = mapped_column(ForeignKey("questions.question_id"))
    position: Mapped[int]
    status: Mapped[str] = mapped_column(default="open")
    revision: Mapped[int] = mapped_column(default=0)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class messages(base):
    __tablename__ = "messages"
    __table_args__ = (UniqueConstraint("thread_id", "position"),)

    message_id: Mapped[MessageID] = mapped_column(primary_key=True)
    thread_id: Mapped[ThreadID] = mapped_column(ForeignKey("threads.thread_id", ondelete="CASCADE"))
    role: Mapped[str]
    content: Mapped[str] = mapped_column(Text)
    position: Mapped[int]
    token_count: Mapped[int] = mapped_column(default=0)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Results


class scores(base):
    __tablename__ = "scores"

    thread_id: Mapped[ThreadID] = mapped_column(ForeignKey("threads.thread_id", ondelete="CASCADE"), primary_key=True)
    auto_score: Mapped[float]
    auto_feedback: Mapped[str] = mapped_column(Text)
    override_score: Mapped[float | None] = mapped_column(default=None)
    override_comment: Mapped[str | None] = mapped_column(Text, default=None)
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class grades(base):
    __tablename__ = "grades"

    session_id: Mapped[ExamSessionID] = mapped_column(
        ForeignKey("exam_sessions.session_id", ondelete="CASCADE"), primary_key=True
    )
    auto_percentage: Mapped[float]
    final_percentage: Mapped[float | None] = mapped_column(default=None)
    reviewed_by: Mapped[UserID | None] = mapped_column(default=None)
    reviewed_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
