"""Shared fixtures: a fake Ollama server and a mocked Gemini SDK."""

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeOllama:
    """In-memory stand-in for an Ollama server, served through httpx.MockTransport."""

    def __init__(self, models=None, response="ok"):
        self.models = list(models or [])
        self.response = response
        self.generate_status = 200
        self.tags_status = 200
        self.fail_generate_for: set[str] = set()
        self.unreachable = False
        # Raw JSON bodies that replace the normal replies when set.
        self.tags_body = None
        self.generate_body = None
        self.requests: list[httpx.Request] = []

    @property
    def generate_calls(self) -> list[dict]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path == "/api/generate"
        ]

    @property
    def tags_calls(self) -> int:
        return sum(1 for r in self.requests if r.url.path == "/api/tags")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        if request.url.path == "/api/tags":
            if self.tags_status != 200:
                return httpx.Response(self.tags_status)
            if self.tags_body is not None:
                return httpx.Response(200, json=self.tags_body)
            return httpx.Response(
                200,
                json={"models": [{"name": m, "size": 1024} for m in self.models]},
            )

        if request.url.path == "/api/generate":
            body = json.loads(request.content)
            if self.generate_status != 200 or body["model"] in self.fail_generate_for:
                status = self.generate_status if self.generate_status != 200 else 404
                return httpx.Response(status, json={"error": "model not found"})
            if self.generate_body is not None:
                return httpx.Response(200, json=self.generate_body)
            return httpx.Response(200, json={"response": self.response, "done": True})

        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_ollama():
    return FakeOllama(models=["llama3.2", "llava:7b"])


@pytest.fixture
def mock_genai():
    """Patch the Gemini SDK; the model answers "gemini says hi" by default."""
    with patch("src.llm.gemini_client.genai") as genai:
        model = genai.GenerativeModel.return_value
        model.generate_content_async = AsyncMock(return_value=Mock(text="gemini says hi"))
        yield genai


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image")
    return path


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "clip.mp3"
    path.write_bytes(b"ID3fake-audio")
    return path
