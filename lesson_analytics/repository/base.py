# -*- coding: utf-8 -*-
"""
lesson_analytics/repository/base.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Общие операции над моделями: поиск по id и создание записи.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_analytics.config.logger import configure_logger
from lesson_analytics.domain.models import Base
from lesson_analytics.utils.exceptions import NotFoundError

ModelT = TypeVar("ModelT", bound=Base)

logger = configure_logger()


async def find_item(
    session: AsyncSession,
    model: Type[ModelT],
    item_id: Any,
    options: Sequence[Any] = (),
) -> Optional[ModelT]:
    stmt = select(model).where(model.id == item_id)
    if options:
        # Связи перечитываются, даже если объект уже в identity map сессии
        stmt = stmt.options(*options).execution_options(populate_existing=True)
    return (await session.execute(stmt)).scalars().first()


async def get_item(
    session: AsyncSession,
    model: Type[ModelT],
    item_id: Any,
    resource_type: str | None = None,
    options: Sequence[Any] = (),
    missing: str = "не найден",
) -> ModelT:
    """То же, что ``find_item``, но отсутствие записи даёт NotFoundError (404)."""
    item = await find_item(session, model, item_id, options=options)
    if item is None:
        raise NotFoundError(resource_type or model.__name__, item_id, missing)
    return item


async def create_item(session: AsyncSession, model: Type[ModelT], **fields: Any) -> ModelT:
    item = model(**fields)
    session.add(item)
    await session.commit()
    await session.refresh(item)
    logger.debug(f"➕ {model.__tablename__}: id={getattr(item, 'id', None)}")
    return item
