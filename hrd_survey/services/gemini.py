# hrd_survey/services/gemini.py
"""
Thin client for the Gemini ``generateContent`` REST endpoint.

The narrative analysis and the question generator only need "prompt in,
text out"; anything that parses the text lives with the caller, apart from
``extract_json_object`` which every caller shares.
"""
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any

import httpx

from hrd_survey.core.config import Settings, settings as default_settings
from hrd_survey.core.errors import AIResponseParseError, ExternalServiceError, UnconfiguredError

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str | None) -> dict[str, Any]:
    """
    Returns the JSON object found in ``text``, tolerating prose or code
    fences around it: the span from the first '{' to the last '}' is parsed.
    """
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        logger.warning("[AI] No JSON object in response (len=%d)", len(text or ""))
        raise AIResponseParseError()
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("[AI] Invalid JSON in response (len=%d): %s", len(text or ""), e)
        raise AIResponseParseError() from e
    if not isinstance(data, dict):
        raise AIResponseParseError()
    return data


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
    ):
        if not api_key:
            raise UnconfiguredError()
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "GeminiClient":
        cfg = cfg or default_settings
        if not cfg.ai_configured:
            raise UnconfiguredError()
        return cls(
            api_key=cfg.GEMINI_API_KEY.strip(),
            model=cfg.GEMINI_MODEL,
            base_url=cfg.GEMINI_API_BASE,
            timeout=cfg.GEMINI_TIMEOUT_SECONDS,
            temperature=cfg.GEMINI_TEMPERATURE,
            max_output_tokens=cfg.GEMINI_MAX_OUTPUT_TOKENS,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        """Sends one prompt and returns the first candidate's text."""
        generation_config: dict[str, Any] = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        started = time.monotonic()
        try:
            response = httpx.post(
                self.endpoint,
                params={"key": self.api_key},
                json={
                    "contents": [{"parts": [{"text": prompt}]}],
                    "generationConfig": generation_config,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("[AI] %s returned HTTP %s", self.model, e.response.status_code)
            raise ExternalServiceError() from e
        except httpx.HTTPError as e:
            logger.error("[AI] Request to %s failed: %s", self.model, e.__class__.__name__)
            raise ExternalServiceError() from e
        except ValueError as e:
            logger.error("[AI] %s returned a non-JSON body", self.model)
            raise ExternalServiceError() from e

        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            logger.error("[AI] Empty response from %s", self.model)
            raise ExternalServiceError()

        logger.info(
            "[AI] %s prompt=%d chars, response=%d chars, %.2fs",
            self.model, len(prompt), len(text), time.monotonic() - started,
        )
        return text
