"""Tests for the Gemini adapter: payload conversion and error translation."""

import base64

import pytest
from google.api_core import exceptions as google_exceptions

from invisibrain.backend import GeminiBackend, to_contents, translate_error
from invisibrain.exceptions import FatalBackendError, TransientBackendError
from invisibrain.request_queue import ImagePart


class FakeResponse:
    def __init__(self, text=None, candidates=("candidate",), blocked=False):
        self._text = text
        self.candidates = list(candidates)
        self._blocked = blocked

    @property
    def text(self):
        if self._blocked:
            raise ValueError("The response.text quick accessor requires a valid Part")
        return self._text


class FakeModel:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.contents = []

    async def generate_content_async(self, contents):
        self.contents.append(contents)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def gemini():
    backend = GeminiBackend(api_key="test-key", config={"model": "gemini-2.5-flash-lite"})
    return backend


class TestToContents:
    def test_text_passes_through(self):
        assert to_contents("hello") == "hello"

    def test_images_become_decoded_blobs(self):
        data = base64.b64encode(b"\x89PNG").decode("ascii")
        contents = to_contents(["describe", ImagePart(data)])
        assert contents == ["describe", {"mime_type": "image/png", "data": b"\x89PNG"}]


class TestTranslateError:
    @pytest.mark.parametrize("exc_class, code", [
        (google_exceptions.ResourceExhausted, 429),
        (google_exceptions.InternalServerError, 500),
        (google_exceptions.ServiceUnavailable, 503),
    ])
    def test_retryable_statuses(self, exc_class, code):
        error = translate_error(exc_class("try later"))
        assert isinstance(error, TransientBackendError)
        assert error.status_code == code
        assert str(code) in str(error)

    def test_other_api_errors_are_fatal(self):
        error = translate_error(google_exceptions.PermissionDenied("API key not valid"))
        assert isinstance(error, FatalBackendError)
        assert error.status_code == 403
        assert "403" in str(error)

    def test_non_api_errors_are_returned_unchanged(self):
        original = ConnectionError("network down")
        assert translate_error(original) is original


class TestInvoke:
    async def test_returns_response_text(self, gemini):
        gemini.model = FakeModel(FakeResponse(text="solution"))
        assert await gemini.invoke("prompt") == "solution"
        assert gemini.model.contents == ["prompt"]

    async def test_sdk_errors_are_translated(self, gemini):
        cause = google_exceptions.ServiceUnavailable("overloaded")
        gemini.model = FakeModel(error=cause)

        with pytest.raises(TransientBackendError) as exc_info:
            await gemini.invoke("prompt")

        assert exc_info.value.status_code == 503
        assert exc_info.value.__cause__ is cause

    async def test_empty_candidates_are_fatal(self, gemini):
        gemini.model = FakeModel(FakeResponse(candidates=()))
        with pytest.raises(FatalBackendError):
            await gemini.invoke("prompt")

    async def test_blocked_response_is_fatal(self, gemini):
        gemini.model = FakeModel(FakeResponse(blocked=True))
        with pytest.raises(FatalBackendError):
            await gemini.invoke("prompt")

    def test_generation_config_from_settings(self):
        backend = GeminiBackend(api_key="test-key", config={"temperature": 0.7, "max_output_tokens": 512})
        assert backend.model_name == "gemini-2.5-flash-lite"
        assert backend.generation_config == {"temperature": 0.7, "max_output_tokens": 512}
