from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from todo_backend.config import Settings
from todo_backend.utils.email import Mailer


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.sessionmaker() as db:
        try:
            yield db
        finally:
            await db.close()


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
