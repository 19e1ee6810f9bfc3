# -*- coding: utf-8 -*-
"""
Integration тесты API просмотров уроков
"""

import pytest
from httpx import AsyncClient

from lesson_analytics.domain.enums import Role
from lesson_analytics.security.security import create_access_token
from tests.fixtures import (auth_headers, course_lessons, create_test_course,
                            create_test_user, create_test_view)


class TestTrackViewAPI:
    """POST /api/v1/lesson-views/track"""

    @pytest.mark.asyncio
    async def test_track_and_merge(self, client: AsyncClient, test_session):
        # Arrange
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]
        payload = {
            "course_id": course.id,
            "chapter_id": lesson.chapter_id,
            "lesson_id": lesson.id,
            "view_duration": 30,
            "is_completed": False,
        }
        headers = {**auth_headers(student.id), "User-Agent": "pytest-client"}

        # Act
        first = await client.post("/api/v1/lesson-views/track", json=payload, headers=headers)
        second = await client.post(
            "/api/v1/lesson-views/track",
            json={**payload, "view_duration": 20, "is_completed": True},
            headers=headers,
        )

        # Assert
        assert first.status_code == 200
        body = second.json()
        assert body["success"] is True
        assert body["data"]["id"] == first.json()["data"]["id"]
        assert body["data"]["view_duration"] == 30
        assert body["data"]["is_completed"] is True
        assert body["data"]["watch_count"] == 2
        assert body["data"]["user_agent"] == "pytest-client"
        assert body["data"]["lesson_title"] == lesson.title

    @pytest.mark.asyncio
    async def test_unknown_lesson_returns_404(self, client: AsyncClient, test_session):
        student = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session)
        chapter = course.chapters[0]

        response = await client.post(
            "/api/v1/lesson-views/track",
            json={"course_id": course.id, "chapter_id": chapter.id, "lesson_id": 999},
            headers=auth_headers(student.id),
        )

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert "999" in body["message"]

    @pytest.mark.asyncio
    async def test_missing_fields_return_400(self, client: AsyncClient, test_session):
        response = await client.post(
            "/api/v1/lesson-views/track",
            json={"course_id": 1},
            headers=auth_headers(1),
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_negative_duration_returns_400(self, client: AsyncClient, test_session):
        response = await client.post(
            "/api/v1/lesson-views/track",
            json={"course_id": 1, "chapter_id": 1, "lesson_id": 1, "view_duration": -5},
            headers=auth_headers(1),
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_token_returns_401(self, client: AsyncClient, test_session):
        response = await client.post(
            "/api/v1/lesson-views/track",
            json={"course_id": 1, "chapter_id": 1, "lesson_id": 1},
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_invalid_token_returns_401(self, client: AsyncClient, test_session):
        response = await client.post(
            "/api/v1/lesson-views/track",
            json={"course_id": 1, "chapter_id": 1, "lesson_id": 1},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_numeric_subject_returns_401(self, client: AsyncClient, test_session):
        token = create_access_token({"sub": "abc", "role": Role.STUDENT.value})

        response = await client.post(
            "/api/v1/lesson-views/track",
            json={"course_id": 1, "chapter_id": 1, "lesson_id": 1},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Неверный payload токена"


class TestAnalyticsEndpoints:
    """Аналитика курса, главы и урока"""

    @pytest.mark.asyncio
    async def test_course_analytics_two_chapters(self, client: AsyncClient, test_session):
        # Arrange: 3 просмотра первого урока, остальные уроки без просмотров
        course = await create_test_course(
            test_session,
            name="Курс",
            chapters=[("Глава 1", ["Урок 1", "Урок 2"]), ("Глава 2", ["Урок 3"])],
        )
        first_lesson = course_lessons(course)[0]
        for student_id in (1, 2, 3):
            await create_test_user(test_session, user_id=student_id)
            await create_test_view(
                test_session, student_id, first_lesson, course.id,
                view_duration=10 * student_id, is_completed=student_id == 1,
            )

        # Act
        response = await client.get(
            f"/api/v1/lesson-views/course/{course.id}/analytics",
            headers=auth_headers(1),
        )

        # Assert
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["course"]["total_lessons"] == 3
        assert data["course"]["chapters_count"] == 2
        assert data["overall_analytics"]["total_views"] == 3
        assert data["overall_analytics"]["unique_viewers"] == 3
        assert data["overall_analytics"]["completion_rate"] == 33.33
        assert data["overall_analytics"]["avg_duration"] == 20.0
        assert [chapter["chapter_title"] for chapter in data["chapters"]] == ["Глава 1", "Глава 2"]
        assert data["chapters"][0]["lessons"][1]["total_views"] == 0
        assert data["chapters"][1]["lessons"][0]["total_views"] == 0
        assert data["chapters"][1]["lessons"][0]["completion_rate"] == 0

    @pytest.mark.asyncio
    async def test_course_analytics_unknown_course(self, client: AsyncClient, test_session):
        response = await client.get(
            "/api/v1/lesson-views/course/404/analytics", headers=auth_headers(1)
        )

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_chapter_analytics_unknown_chapter(self, client: AsyncClient, test_session):
        response = await client.get(
            "/api/v1/lesson-views/chapter/5/analytics", headers=auth_headers(1)
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Глава с ID 5 не найдена"

    @pytest.mark.asyncio
    async def test_chapter_analytics_lists_views_per_lesson(self, client: AsyncClient, test_session):
        student = await create_test_user(test_session, user_id=1, name="Alice")
        course = await create_test_course(test_session, chapters=[("Глава", ["A", "B"])])
        a, b = course_lessons(course)
        await create_test_view(test_session, student.id, b, course.id, view_duration=42)

        response = await client.get(
            f"/api/v1/lesson-views/chapter/{a.chapter_id}/analytics",
            headers=auth_headers(student.id),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["chapter"]["lessons_count"] == 2
        assert data["overall_analytics"]["total_duration"] == 42
        assert [lesson["lesson_title"] for lesson in data["lessons"]] == ["A", "B"]
        assert data["lessons"][0]["views"] == []
        assert data["lessons"][1]["views"][0]["student"]["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_lesson_views_admin_only(self, client: AsyncClient, test_session):
        student = await create_test_user(test_session, user_id=1, name="Alice")
        admin = await create_test_user(test_session, user_id=2, role=Role.ADMIN)
        course = await create_test_course(test_session)
        lesson = course_lessons(course)[0]
        await create_test_view(test_session, student.id, lesson, course.id, is_completed=True)
        url = f"/api/v1/lesson-views/lesson/{course.id}/{lesson.chapter_id}/{lesson.id}"

        forbidden = await client.get(url, headers=auth_headers(student.id))
        allowed = await client.get(url, headers=auth_headers(admin.id, Role.ADMIN))

        assert forbidden.status_code == 403
        assert forbidden.json()["success"] is False
        assert "data" not in forbidden.json()

        assert allowed.status_code == 200
        data = allowed.json()["data"]
        assert data["analytics"]["total_views"] == 1
        assert data["analytics"]["completion_rate"] == 100.0
        assert data["views"][0]["student"]["email"] == student.email


class TestUserHistoryAPI:
    """GET /api/v1/lesson-views/user/{user_id}/history"""

    @pytest.mark.asyncio
    async def test_foreign_history_forbidden(self, client: AsyncClient, test_session):
        owner = await create_test_user(test_session, user_id=1)
        stranger = await create_test_user(test_session, user_id=2)
        course = await create_test_course(test_session)
        await create_test_view(test_session, owner.id, course_lessons(course)[0], course.id)

        response = await client.get(
            f"/api/v1/lesson-views/user/{owner.id}/history",
            headers=auth_headers(stranger.id),
        )

        assert response.status_code == 403
        body = response.json()
        assert body["success"] is False
        assert "data" not in body

    @pytest.mark.asyncio
    async def test_own_and_admin_history(self, client: AsyncClient, test_session):
        owner = await create_test_user(test_session, user_id=1)
        course = await create_test_course(test_session, name="Курс", image_url="/img.png")
        await create_test_view(
            test_session, owner.id, course_lessons(course)[0], course.id, watch_count=3
        )

        own = await client.get(
            f"/api/v1/lesson-views/user/{owner.id}/history", headers=auth_headers(owner.id)
        )
        as_admin = await client.get(
            f"/api/v1/lesson-views/user/{owner.id}/history",
            headers=auth_headers(99, Role.ADMIN),
        )

        assert own.status_code == 200
        assert as_admin.status_code == 200
        data = own.json()["data"]
        assert data["analytics"]["total_views"] == 3
        assert data["view_history"][0]["course_name"] == "Курс"
        assert data["view_history"][0]["course_image_url"] == "/img.png"
        assert as_admin.json()["data"] == data
