"""Integration tests for logging middleware."""

import json
import logging
from io import StringIO

import pytest
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI

from chatserver.middleware.logging import LoggingMiddleware
from chatserver.utils.context import get_context, clear_context
from chatserver.utils.logger import ContextInjectionFilter, CustomJsonFormatter, get_logger


def create_test_app() -> FastAPI:
    """Create a test FastAPI app with logging middleware."""
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/test")
    async def test_endpoint():
        return {"message": "test"}

    @app.get("/test-error")
    async def test_error_endpoint():
        raise ValueError("Test error")

    @app.get("/test-context")
    async def test_context():
        context = get_context()
        return {
            "request_id": context.get("request_id"),
            "action": context.get("action"),
        }

    return app


@pytest.fixture
def captured_logs():
    """Capture JSON output of the middleware logger."""
    logger = get_logger("chatserver.middleware.logging")
    log_filter = ContextInjectionFilter()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(CustomJsonFormatter())
    logger.addFilter(log_filter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    def read() -> list[dict]:
        lines = [line for line in stream.getvalue().strip().split("\n") if line]
        return [json.loads(line) for line in lines]

    yield read

    logger.removeHandler(handler)
    logger.removeFilter(log_filter)
    clear_context()


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    @pytest.mark.asyncio
    async def test_logs_request_and_response(self, captured_logs):
        """Test that middleware logs both request start and completion."""
        async with AsyncClient(
            transport=ASGITransport(app=create_test_app()), base_url="http://test"
        ) as client:
            response = await client.get("/test")

        assert response.status_code == 200
        logs = captured_logs()
        started = next(log for log in logs if log["message"] == "Request started")
        completed = next(log for log in logs if log["message"] == "Request completed")

        assert started["method"] == "GET"
        assert started["path"] == "/test"
        assert completed["status_code"] == 200
        assert "duration_ms" in completed
        assert completed["request_id"] == started["request_id"]

    @pytest.mark.asyncio
    async def test_sets_request_context(self):
        """Test that handlers see the request context."""
        async with AsyncClient(
            transport=ASGITransport(app=create_test_app()), base_url="http://test"
        ) as client:
            response = await client.get(
                "/test-context", headers={"X-Request-ID": "req-abc"}
            )

        assert response.json() == {"request_id": "req-abc", "action": "http.request"}
        assert response.headers["X-Request-ID"] == "req-abc"

    @pytest.mark.asyncio
    async def test_generates_unique_request_ids(self):
        """Test that each request without an ID header gets a fresh one."""
        async with AsyncClient(
            transport=ASGITransport(app=create_test_app()), base_url="http://test"
        ) as client:
            responses = [await client.get("/test") for _ in range(3)]

        request_ids = {r.headers["X-Request-ID"] for r in responses}
        assert len(request_ids) == 3

    @pytest.mark.asyncio
    async def test_logs_errors(self, captured_logs):
        """Test that failing requests are logged."""
        async with AsyncClient(
            transport=ASGITransport(app=create_test_app()), base_url="http://test"
        ) as client:
            try:
                await client.get("/test-error")
            except Exception:
                pass  # The transport re-raises the application error

        failed = next(log for log in captured_logs() if log["message"] == "Request failed")
        assert failed["error"] == "Test error"
        assert failed["error_type"] == "ValueError"

    @pytest.mark.asyncio
    async def test_clears_context_after_request(self):
        """Test that request context does not leak past the request."""
        clear_context()
        async with AsyncClient(
            transport=ASGITransport(app=create_test_app()), base_url="http://test"
        ) as client:
            await client.get("/test")

        assert get_context() == {}
