# -*- coding: utf-8 -*-
"""
Аналитика просмотров уроков.

Модуль экспортирует все публичные функции агрегации: по уроку, главе и
курсу, по студентам и по платформе в целом.
"""

from lesson_analytics.service.analytics.platform import (
    calculate_total_revenue, get_dashboard_overview, get_new_students_count,
    get_pending_enrollments, get_student_signups_by_day,
    get_students_analytics, get_views_statistics)
from lesson_analytics.service.analytics.rollups import (
    get_chapter_views_analytics, get_course_views_analytics,
    get_lesson_views_analytics, summarize_chapter, summarize_course,
    summarize_lesson, summarize_views)
from lesson_analytics.service.analytics.students import (
    compute_exam_stats, get_all_students_progress, get_student_progress,
    get_user_view_history, group_lessons_by_chapter)

__all__ = [
    # Урок, глава, курс
    "summarize_views",
    "summarize_lesson",
    "summarize_chapter",
    "summarize_course",
    "get_lesson_views_analytics",
    "get_chapter_views_analytics",
    "get_course_views_analytics",
    # Студенты
    "compute_exam_stats",
    "group_lessons_by_chapter",
    "get_student_progress",
    "get_all_students_progress",
    "get_user_view_history",
    # Платформа
    "get_views_statistics",
    "get_students_analytics",
    "get_new_students_count",
    "get_student_signups_by_day",
    "calculate_total_revenue",
    "get_pending_enrollments",
    "get_dashboard_overview",
]
