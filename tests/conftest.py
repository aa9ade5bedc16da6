# tests/conftest.py

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from todo_backend.config import Settings
from todo_backend.database import build_engine, build_sessionmaker, init_models
from todo_backend.dependencies import get_mailer
from todo_backend.main import create_app

from .fakes import FakeMailer


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'todo.sqlite3'}",
        ENABLE_SCHEDULER=False,
        OTP_ECHO=True,
        EMAIL_USER=None,
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture()
async def sessionmaker(settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = build_engine(settings.async_database_url)
    await init_models(engine)
    yield build_sessionmaker(engine)
    await engine.dispose()


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
async def client(settings, sessionmaker, mailer) -> AsyncIterator[httpx.AsyncClient]:
    """
    App wired to a per-test SQLite file and a FakeMailer.

    ASGITransport does not run the lifespan, so the handles it would
    build are placed on app.state here.
    """
    app = create_app(settings)
    app.state.sessionmaker = sessionmaker
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register(client: httpx.AsyncClient, email: str, password: str) -> dict:
    payload = {"firstName": "Ada", "lastName": "Lovelace", "email": email, "password": password}
    response = await client.post("/api/register-final", json=payload)
    assert response.status_code == 201, response.text
    login = await client.post("/api/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    return login.json()["user"]


@pytest.fixture()
def register_user(client):
    """Register and log in a user; returns the login projection."""

    async def _do(email: str = "a@x.com", password: str = "p1") -> dict:
        return await _register(client, email, password)

    return _do


@pytest.fixture()
async def user(register_user) -> dict:
    return await register_user()
