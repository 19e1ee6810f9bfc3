# -*- coding: utf-8 -*-
"""
Схемы для аналитики студентов и платформы.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

from lesson_analytics.api.v1.lesson_views.schemas import HistoryEntry


class ExamAttemptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    correct_answers: int
    total_questions: int
    exam_date: datetime


class ExamStats(BaseModel):
    total_exams: int
    average_score: float
    last_exam_date: Optional[datetime] = None


class GroupedLesson(BaseModel):
    lesson_id: int
    lesson_title: str
    watch_count: int
    view_duration: int
    is_completed: bool
    last_viewed_at: datetime


class ChapterLessons(BaseModel):
    """Просмотренные уроки студента внутри одной главы."""

    chapter_id: int
    chapter_title: Optional[str] = None
    course_id: int
    course_name: Optional[str] = None
    lessons: List[GroupedLesson]


class StudentProgressStats(BaseModel):
    total_views: int
    unique_lessons: int
    last_activity: Optional[datetime] = None
    exam_stats: Optional[ExamStats] = None


class StudentProgress(BaseModel):
    watch_history: List[HistoryEntry]
    grouped_lessons: List[ChapterLessons]
    exam_results: List[ExamAttemptRead]
    stats: StudentProgressStats


class StudentInfo(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    last_active: Optional[datetime] = None


class StudentSummaryStats(BaseModel):
    total_views: int
    unique_lessons_count: int
    last_watched_at: Optional[datetime] = None
    exams_taken: int = 0
    average_score: float = 0


class StudentProgressSummary(BaseModel):
    student: StudentInfo
    stats: StudentSummaryStats
    # Прогресс пока не вычисляется, всегда TrackingConfig.PROGRESS_PLACEHOLDER
    progress: int


class MostActiveStudent(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    total_views: int


class MostViewedLesson(BaseModel):
    lesson_id: int
    lesson_title: str
    course_name: Optional[str] = None
    chapter_title: Optional[str] = None
    total_views: int


class ViewsStatistics(BaseModel):
    total_views: int
    last_24_hours: int
    last_week: int
    last_month: int
    most_active_student: Optional[MostActiveStudent] = None
    most_viewed_lesson: Optional[MostViewedLesson] = None


class DistributionItem(BaseModel):
    id: Optional[Any] = None
    value: int


class StudentsAnalytics(BaseModel):
    total_students: int
    active_students: int
    banned_students: int
    last_week_active: int
    monthly_active_users: int
    high_engagement: int
    average_exam_score: int
    government_distribution: List[DistributionItem]
    level_distribution: List[DistributionItem]


class SignupsByDay(BaseModel):
    date: str
    count: int


class DashboardOverview(BaseModel):
    new_students: int
    signups_by_day: List[SignupsByDay]
    total_revenue: float
    pending_enrollments: int
    views: ViewsStatistics
    students: StudentsAnalytics
