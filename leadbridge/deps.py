"""FastAPI dependencies wiring the pipeline to its collaborators."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leadbridge.config import settings
from leadbridge.db.session import get_session_factory
from leadbridge.services.dispatcher import EventDispatcher
from leadbridge.services.pipeline import ConversionPipeline


def get_dispatcher() -> EventDispatcher:
    return EventDispatcher.from_settings(settings)


def get_pipeline(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
) -> ConversionPipeline:
    return ConversionPipeline(session_factory, dispatcher)
