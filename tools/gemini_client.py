"""Thin Gemini wrapper shared by the normalizer, comparer and explainer adapters."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

import google.generativeai as genai

from lostfound_app.config import DEFAULT_GEMINI_MODEL

LOGGER = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")


class GeminiClient:
    """Sends single-turn prompts to a Gemini model and returns the reply text.

    ``model`` may be any object exposing ``generate_content(prompt, request_options=...)``
    so tests can hand in a fake.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        timeout_seconds: float = 30.0,
        model: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self._model = model

    @property
    def model(self) -> Any:
        if self._model is None:
            if self.api_key:
                genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
            LOGGER.info("Gemini model initialised", extra={"model": self.model_name})
        return self._model

    def generate(self, prompt: str) -> str:
        response = self.model.generate_content(prompt, request_options={"timeout": self.timeout_seconds})
        return str(response.text or "").strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the first ``{...}`` block of an LLM reply parsed as JSON."""

    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ValueError("No JSON object found in model reply")
    payload = json.loads(match.group())
    if not isinstance(payload, dict):
        raise ValueError("Model reply JSON is not an object")
    return payload


def parse_leading_float(text: str) -> float | None:
    """Parse the number a reply starts with, ``None`` when it does not start with one."""

    match = _LEADING_NUMBER.match(text or "")
    if not match:
        return None
    return float(match.group())


def strip_wrapping_quotes(text: str) -> str:
    text = (text or "").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        return text[1:-1].strip()
    return text


__all__ = ["GeminiClient", "extract_json_object", "parse_leading_float", "strip_wrapping_quotes"]
