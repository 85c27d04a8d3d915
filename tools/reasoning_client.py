"""Clients for the remote text-generation endpoint used by the analyzer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

import google.generativeai as genai
import httpx
from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel, ValidationError

from models.errors import MalformedResponse, TransportError, UpstreamError
from tools.observability import instrument_call
from weatherwear_app.logging_config import get_logger


LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class GenerationSettings:
    """Decoding parameters; defaults are near-greedy for reproducible reports."""

    temperature: float = 0.1
    top_k: int = 1
    top_p: float = 1.0

    def to_payload(self) -> Dict[str, Any]:
        return {"temperature": self.temperature, "topK": self.top_k, "topP": self.top_p}


DETERMINISTIC = GenerationSettings()


class _Part(BaseModel):
    text: str


class _Content(BaseModel):
    parts: List[_Part]


class _Candidate(BaseModel):
    content: _Content


class _GenerateResponse(BaseModel):
    candidates: List[_Candidate]


def extract_candidate_text(payload: Any) -> str:
    """Return ``candidates[0].content.parts[0].text`` or raise MalformedResponse."""

    try:
        parsed = _GenerateResponse.model_validate(payload)
        return parsed.candidates[0].content.parts[0].text
    except (ValidationError, IndexError) as exc:
        raise MalformedResponse("Invalid API response format") from exc


class ReasoningClient(ABC):
    """Submits a single prompt and returns the generated text."""

    @abstractmethod
    async def generate(self, prompt: str, settings: GenerationSettings = DETERMINISTIC) -> str:
        """Return the text of the first candidate."""


class GeminiRestClient(ReasoningClient):
    """Calls the Gemini ``generateContent`` REST endpoint with httpx."""

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @property
    def endpoint(self) -> str:
        model = self.model if self.model.startswith("models/") else f"models/{self.model}"
        return f"{self.base_url}/{model}:generateContent"

    @instrument_call("reasoning.generate")
    async def generate(self, prompt: str, settings: GenerationSettings = DETERMINISTIC) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": settings.to_payload(),
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key or ""}
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            try:
                response = await client.post(self.endpoint, json=body, headers=headers)
            except httpx.HTTPError as exc:
                raise TransportError("Could not reach the analysis service") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        error = payload.get("error") if isinstance(payload, dict) else None
        if response.is_error:
            if error:
                raise UpstreamError(f"API Error: {_error_message(error)}")
            raise TransportError(f"Analysis service returned status {response.status_code}")
        if error:
            raise UpstreamError(f"API Error: {_error_message(error)}")
        if payload is None:
            raise MalformedResponse("Analysis service returned a non-JSON body")
        return extract_candidate_text(payload)


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or "Unknown error")
    return str(error)


class GeminiSdkClient(ReasoningClient):
    """Same contract backed by the ``google-generativeai`` SDK."""

    def __init__(self, api_key: str | None, model: str, timeout_seconds: float = 10.0) -> None:
        genai.configure(api_key=api_key)
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._model = genai.GenerativeModel(model)

    @instrument_call("reasoning.generate_sdk")
    async def generate(self, prompt: str, settings: GenerationSettings = DETERMINISTIC) -> str:
        config = genai.GenerationConfig(
            temperature=settings.temperature,
            top_k=settings.top_k,
            top_p=settings.top_p,
        )
        try:
            response = await self._model.generate_content_async(
                prompt,
                generation_config=config,
                request_options={"timeout": self.timeout_seconds},
            )
        except (google_exceptions.ServiceUnavailable, google_exceptions.DeadlineExceeded) as exc:
            raise TransportError("Could not reach the analysis service") from exc
        except google_exceptions.GoogleAPICallError as exc:
            raise UpstreamError(f"API Error: {exc.message}") from exc

        try:
            return response.candidates[0].content.parts[0].text
        except (AttributeError, IndexError) as exc:
            raise MalformedResponse("Invalid API response format") from exc


def build_reasoning_client(backend: str, api_key: str | None, model: str, **kwargs: Any) -> ReasoningClient:
    if backend == "sdk":
        return GeminiSdkClient(api_key=api_key, model=model, timeout_seconds=kwargs.get("timeout_seconds", 10.0))
    if backend == "rest":
        return GeminiRestClient(api_key=api_key, model=model, **kwargs)
    raise ValueError(f"Unsupported reasoning backend '{backend}'. Allowed: ['rest', 'sdk']")


__all__ = [
    "GenerationSettings",
    "DETERMINISTIC",
    "ReasoningClient",
    "GeminiRestClient",
    "GeminiSdkClient",
    "build_reasoning_client",
    "extract_candidate_text",
]
