"""API-specific test fixtures."""

import os
from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from prdforge.api.deps import get_llm_client
from prdforge.api.routes import api_router
from prdforge.core.exceptions import PrdForgeError
from prdforge.db import close_db, init_db
from prdforge.generation.llm_fake import FakeLLMClient
from prdforge.main import (
    domain_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from prdforge.middleware.correlation import setup_correlation_middleware


@pytest.fixture
def api_app(tmp_path) -> FastAPI:
    """App wired like create_app() but with a test lifespan and database."""
    db_url = os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'prdforge_api_test.db'}")

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Initialize DB in TestClient's event loop."""
        import prdforge.db.base as db_mod

        # Reset globals so init_db creates a fresh engine in THIS loop
        db_mod._engine = None
        db_mod._session_factory = None
        await init_db(db_url)
        yield
        await close_db()

    app = FastAPI(title="PRD Forge - Test Client", lifespan=test_lifespan)
    setup_correlation_middleware(app)

    # Exception handlers (needed for message/debug_id assertions)
    app.exception_handler(PrdForgeError)(domain_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")
    return app


@pytest.fixture
def llm():
    """FakeLLMClient injected into the app; inspect .calls in tests."""
    return FakeLLMClient(scenario="happy_path")


@pytest.fixture
def api_client(api_app, llm):
    """FastAPI test client with the fake LLM client and a fresh database."""
    api_app.dependency_overrides[get_llm_client] = lambda: llm
    with TestClient(api_app, raise_server_exceptions=False) as client:
        yield client
    api_app.dependency_overrides.clear()


@pytest.fixture
def create_prd(api_client):
    """Generate a PRD through the API and return its JSON."""

    def _create(idea: str = "A mobile app that tracks grocery expiry dates for small stores") -> dict:
        response = api_client.post("/api/generate/prd", json={"idea": idea})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
