# -*- coding: utf-8 -*-
"""
Pydantic-схемы для трекинга и аналитики просмотров уроков.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrackViewRequest(BaseModel):
    """Событие просмотра урока от клиента."""

    course_id: int
    chapter_id: int
    lesson_id: int
    lesson_title: Optional[str] = None
    view_duration: Optional[int] = Field(None, ge=0, description="Секунды")
    is_completed: Optional[bool] = None


class LessonViewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    chapter_id: int
    lesson_id: int
    lesson_title: str
    view_duration: int
    is_completed: bool
    watch_count: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    last_viewed_at: datetime
    created_at: datetime
    updated_at: datetime


class StudentRef(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


class LessonViewWithStudent(LessonViewRead):
    student: Optional[StudentRef] = None


class ViewsSummary(BaseModel):
    """Пять базовых метрик по набору записей просмотра."""

    total_views: int = 0
    unique_viewers: int = 0
    completed_views: int = 0
    completion_rate: float = 0
    total_duration: int = 0
    avg_duration: float = 0


class LessonAnalytics(ViewsSummary):
    lesson_id: int
    lesson_title: str
    is_free: bool = False


class ChapterAnalytics(ViewsSummary):
    chapter_id: int
    chapter_title: str
    lessons_count: int
    lessons: List[LessonAnalytics]


class CourseInfo(BaseModel):
    id: int
    name: str
    chapters_count: int
    total_lessons: int


class CourseViewsAnalytics(BaseModel):
    course: CourseInfo
    overall_analytics: ViewsSummary
    chapters: List[ChapterAnalytics]


class LessonViewsAnalytics(BaseModel):
    views: List[LessonViewWithStudent]
    analytics: ViewsSummary


class ChapterLessonViews(LessonAnalytics):
    views: List[LessonViewWithStudent] = []


class ChapterInfo(BaseModel):
    id: int
    course_id: int
    title: str
    lessons_count: int


class ChapterViewsAnalytics(BaseModel):
    chapter: ChapterInfo
    overall_analytics: ViewsSummary
    lessons: List[ChapterLessonViews]


class HistoryEntry(LessonViewRead):
    course_name: Optional[str] = None
    course_image_url: Optional[str] = None
    chapter_title: Optional[str] = None


class HistorySummary(BaseModel):
    total_views: int
    lessons_viewed: int
    completed_lessons: int
    total_watch_time: int
    courses_viewed: int


class UserViewHistory(BaseModel):
    view_history: List[HistoryEntry]
    analytics: HistorySummary
