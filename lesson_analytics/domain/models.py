# -*- coding: utf-8 -*-
"""
lesson_analytics/domain/models.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
ORM-модели SQLAlchemy 2.0.

Таблица ``lesson_views`` принадлежит ядру трекинга. Каталог курсов, пользователи,
результаты экзаменов, записи на курсы и настройки кошельков для ядра являются
внешними хранилищами только для чтения.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (JSON, Boolean, DateTime, Enum, Float, ForeignKey,
                        Index, Integer, String, Text, UniqueConstraint)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from lesson_analytics.domain.enums import PaymentStatus, Role

# Уникальный ключ записи просмотра
VIEW_KEY_CONSTRAINT = "uq_lesson_views_key"


class Base(DeclarativeBase):
    """Базовый класс для всех моделей."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


# ---------------------------------------------------------------------------
# Пользователи
# ---------------------------------------------------------------------------


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, values_callable=lambda enum: [e.value for e in enum]),
        default=Role.STUDENT,
        nullable=False,
    )
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    government: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    level: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (Index("ix_users_role_last_active", "role", "last_active"),)


# ---------------------------------------------------------------------------
# Каталог курсов
# ---------------------------------------------------------------------------


class Course(TimestampMixin, Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    level: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    chapters: Mapped[List["Chapter"]] = relationship(
        back_populates="course",
        order_by="Chapter.position",
        cascade="all, delete-orphan",
    )


class Chapter(TimestampMixin, Base):
    __tablename__ = "chapters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    course: Mapped["Course"] = relationship(back_populates="chapters")
    lessons: Mapped[List["Lesson"]] = relationship(
        back_populates="chapter",
        order_by="Lesson.position",
        cascade="all, delete-orphan",
    )


class Lesson(Base):
    """Урок существует только внутри своей главы."""

    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_free: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    chapter: Mapped["Chapter"] = relationship(back_populates="lessons")


# ---------------------------------------------------------------------------
# Просмотры уроков
# ---------------------------------------------------------------------------


class LessonView(TimestampMixin, Base):
    """Накопленное состояние просмотра одного урока одним студентом."""

    __tablename__ = "lesson_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False
    )
    lesson_id: Mapped[int] = mapped_column(Integer, nullable=False)
    lesson_title: Mapped[str] = mapped_column(String(255), nullable=False)
    view_duration: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    watch_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_viewed_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    student: Mapped["User"] = relationship(lazy="raise")
    course: Mapped["Course"] = relationship(lazy="raise")
    chapter: Mapped["Chapter"] = relationship(lazy="raise")

    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "course_id",
            "chapter_id",
            "lesson_id",
            name=VIEW_KEY_CONSTRAINT,
        ),
        Index("ix_lesson_views_lesson", "course_id", "chapter_id", "lesson_id"),
        Index("ix_lesson_views_created_at", "created_at"),
        Index("ix_lesson_views_last_viewed_at", "last_viewed_at"),
    )


# ---------------------------------------------------------------------------
# Экзамены
# ---------------------------------------------------------------------------


class ExamResult(TimestampMixin, Base):
    """Документ результатов экзаменов студента."""

    __tablename__ = "exam_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    attempts: Mapped[List["ExamAttempt"]] = relationship(
        back_populates="exam_result",
        order_by="ExamAttempt.position",
        cascade="all, delete-orphan",
    )


class ExamAttempt(Base):
    __tablename__ = "exam_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exam_result_id: Mapped[int] = mapped_column(
        ForeignKey("exam_results.id", ondelete="CASCADE"), nullable=False, index=True
    )
    correct_answers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    exam_date: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    exam_result: Mapped["ExamResult"] = relationship(back_populates="attempts")


# ---------------------------------------------------------------------------
# Записи на курсы
# ---------------------------------------------------------------------------


class Enrollment(TimestampMixin, Base):
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, values_callable=lambda enum: [e.value for e in enum]),
        default=PaymentStatus.PENDING,
        nullable=False,
    )


# ---------------------------------------------------------------------------
# Настройки кошельков
# ---------------------------------------------------------------------------


class WalletSettings(Base):
    """Единственная запись настроек, адресуемая фиксированным ключом."""

    __tablename__ = "wallet_settings"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    wallets: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
