"""
Tests for doctranslate/limits.py - request body size limit.
"""
import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient


@pytest.fixture
def echo_app():
    """Tiny app that reports how many body bytes it read."""
    from doctranslate.limits import BodySizeLimitMiddleware

    app = FastAPI()
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=100)

    @app.post("/echo")
    async def echo(request: Request):
        body = await request.body()
        return {"size": len(body)}

    return app


class TestBodySizeLimitMiddleware:

    def test_small_body_passes(self, echo_app):
        with TestClient(echo_app) as client:
            response = client.post("/echo", content=b"x" * 100)

        assert response.status_code == 200
        assert response.json()["size"] == 100

    def test_declared_length_over_limit(self, echo_app):
        with TestClient(echo_app) as client:
            response = client.post("/echo", content=b"x" * 101)

        assert response.status_code == 413

    def test_streamed_body_over_limit(self, echo_app):
        def chunks():
            for _ in range(5):
                yield b"x" * 50

        with TestClient(echo_app) as client:
            response = client.post("/echo", content=chunks())

        assert response.status_code == 413

    def test_get_without_body_passes(self, echo_app):
        @echo_app.get("/ping")
        def ping():
            return {"pong": True}

        with TestClient(echo_app) as client:
            assert client.get("/ping").status_code == 200
