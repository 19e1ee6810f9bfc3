# -*- coding: utf-8 -*-
"""
Unit тесты трекинга просмотров уроков
"""

from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from lesson_analytics.domain.models import LessonView
from lesson_analytics.service import tracking_service
from lesson_analytics.service.tracking_service import (merge_view_event,
                                                       track_lesson_view)
from lesson_analytics.utils.exceptions import NotFoundError
from tests.fixtures import (course_lessons, create_test_course,
                            create_test_user, create_test_view)


async def count_views(session) -> int:
    return await session.scalar(select(func.count(LessonView.id)))


class TestMergeViewEvent:
    """Слияние события в существующую запись"""

    def test_keeps_max_duration_and_completion(self):
        view = LessonView(view_duration=30, is_completed=True, watch_count=2)
        now = datetime(2026, 5, 1, 12, 0)

        merge_view_event(view, view_duration=20, is_completed=False, now=now)

        assert view.view_duration == 30
        assert view.is_completed is True
        assert view.watch_count == 3
        assert view.last_viewed_at == now

    def test_missing_fields_do_not_reset_state(self):
        view = LessonView(view_duration=15, is_completed=False, watch_count=1)

        merge_view_event(view)

        assert view.view_duration == 15
        assert view.is_completed is False
        assert view.watch_count == 2


class TestTrackLessonView:
    """Регистрация просмотров через трекер"""

    @pytest.mark.asyncio
    async def test_first_view_creates_record(self, test_session):
        # Arrange
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]

        # Act
        view = await track_lesson_view(
            test_session,
            student_id=student.id,
            course_id=course.id,
            chapter_id=lesson.chapter_id,
            lesson_id=lesson.id,
            view_duration=12,
            ip_address="10.0.0.1",
            user_agent="pytest",
        )

        # Assert
        assert view.id is not None
        assert view.watch_count == 1
        assert view.view_duration == 12
        assert view.is_completed is False
        assert view.lesson_title == lesson.title
        assert view.ip_address == "10.0.0.1"

    @pytest.mark.asyncio
    async def test_repeat_view_merges_into_single_record(self, test_session):
        """Сценарий 30/20: длительность 30, урок завершен"""
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]
        key = dict(
            student_id=student.id,
            course_id=course.id,
            chapter_id=lesson.chapter_id,
            lesson_id=lesson.id,
        )

        await track_lesson_view(test_session, **key, view_duration=30, is_completed=False)
        view = await track_lesson_view(test_session, **key, view_duration=20, is_completed=True)

        assert view.view_duration == 30
        assert view.is_completed is True
        assert view.watch_count == 2
        assert await count_views(test_session) == 1

    @pytest.mark.asyncio
    async def test_merge_is_order_independent(self, test_session):
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]
        key = dict(
            student_id=student.id,
            course_id=course.id,
            chapter_id=lesson.chapter_id,
            lesson_id=lesson.id,
        )

        for duration, completed in [(5, False), (50, None), (25, True), (10, False)]:
            view = await track_lesson_view(
                test_session, **key, view_duration=duration, is_completed=completed
            )

        assert view.view_duration == 50
        assert view.is_completed is True
        assert view.watch_count == 4

    @pytest.mark.asyncio
    async def test_concurrent_insert_is_retried_as_update(self, test_session, monkeypatch):
        """Запись, созданная параллельным запросом, обновляется вместо дубля"""
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]
        await create_test_view(
            test_session, student.id, lesson, course.id, view_duration=40
        )

        real_lookup = tracking_service.get_view_by_key
        calls = {"count": 0}

        async def stale_lookup(*args, **kwargs):
            # Первый поиск не видит чужую запись, как при гонке двух запросов
            calls["count"] += 1
            if calls["count"] == 1:
                return None
            return await real_lookup(*args, **kwargs)

        monkeypatch.setattr(tracking_service, "get_view_by_key", stale_lookup)

        view = await track_lesson_view(
            test_session,
            student_id=student.id,
            course_id=course.id,
            chapter_id=lesson.chapter_id,
            lesson_id=lesson.id,
            view_duration=10,
            is_completed=True,
        )

        assert calls["count"] == 2
        assert view.watch_count == 2
        assert view.view_duration == 40
        assert view.is_completed is True
        assert await count_views(test_session) == 1

    @pytest.mark.asyncio
    async def test_foreign_key_violation_is_not_retried(self, test_session, monkeypatch):
        """Нарушение FK (студента нет в users) пробрасывается без повторного поиска"""
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]

        real_lookup = tracking_service.get_view_by_key
        calls = {"count": 0}

        async def counting_lookup(*args, **kwargs):
            calls["count"] += 1
            return await real_lookup(*args, **kwargs)

        async def failing_insert(session, view):
            raise IntegrityError(
                "INSERT INTO lesson_views", {}, Exception("FOREIGN KEY constraint failed")
            )

        monkeypatch.setattr(tracking_service, "get_view_by_key", counting_lookup)
        monkeypatch.setattr(tracking_service, "add_view", failing_insert)

        with pytest.raises(IntegrityError):
            await track_lesson_view(
                test_session,
                student_id=404,
                course_id=course.id,
                chapter_id=lesson.chapter_id,
                lesson_id=lesson.id,
            )

        assert calls["count"] == 1
        assert await count_views(test_session) == 0

    @pytest.mark.asyncio
    async def test_unknown_course_raises_not_found(self, test_session):
        student = await create_test_user(test_session, user_id=1)

        with pytest.raises(NotFoundError) as exc_info:
            await track_lesson_view(
                test_session, student_id=student.id, course_id=999, chapter_id=1, lesson_id=1
            )

        assert exc_info.value.status_code == 404
        assert exc_info.value.resource_type == "Курс"

    @pytest.mark.asyncio
    async def test_chapter_of_another_course_raises_not_found(self, test_session):
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session, name="Курс 1")
        other = await create_test_course(test_session, name="Курс 2")
        lesson = course_lessons(other)[0]

        with pytest.raises(NotFoundError) as exc_info:
            await track_lesson_view(
                test_session,
                student_id=student.id,
                course_id=course.id,
                chapter_id=lesson.chapter_id,
                lesson_id=lesson.id,
            )

        assert exc_info.value.resource_type == "Глава"
        assert exc_info.value.detail == f"Глава с ID {lesson.chapter_id} не найдена"
        assert await count_views(test_session) == 0

    @pytest.mark.asyncio
    async def test_lesson_outside_chapter_raises_not_found(self, test_session):
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(
            test_session, chapters=[("Глава 1", ["Урок 1"]), ("Глава 2", ["Урок 2"])]
        )
        first_chapter, second_chapter = course.chapters

        with pytest.raises(NotFoundError) as exc_info:
            await track_lesson_view(
                test_session,
                student_id=student.id,
                course_id=course.id,
                chapter_id=first_chapter.id,
                lesson_id=second_chapter.lessons[0].id,
            )

        assert exc_info.value.resource_type == "Урок"
        assert exc_info.value.detail.endswith("не найден")
