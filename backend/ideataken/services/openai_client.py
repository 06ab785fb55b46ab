"""Centralized OpenAI client for the synthesis step.

All JSON-producing model calls MUST go through `call_openai_chat_async()`.
This ensures:
  - Model, temperature, timeout, and token limits are read from env.
  - Strict JSON output is requested via response_format.
  - The free-text extraction path (`sanitize_json`) still runs on the
    returned content, for models or proxies that ignore JSON mode.
  - 1 retry on a timeout, 5xx/429 or unparseable reply, then None.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from typing import Any, Dict, List, Optional

import httpx

from ..constants import _env_float, _env_int
from .http_client import is_non_retryable_error

logger = logging.getLogger(__name__)

_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

MAX_RETRIES = 1


def get_openai_key() -> str:
    """Read OPENAI_API_KEY from the environment. Raises EnvironmentError if missing."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        logger.warning("[OPENAI] API key missing (OPENAI_API_KEY)")
        raise EnvironmentError("OPENAI_API_KEY environment variable not set")
    return key


def get_openai_model() -> str:
    """Read OPENAI_MODEL from the environment (default: gpt-4.1-mini)."""
    return os.getenv("OPENAI_MODEL", "gpt-4.1-mini").strip()


def _get_temperature() -> float:
    return _env_float("OPENAI_TEMPERATURE", 0.4)


def _get_timeout() -> float:
    return _env_float("OPENAI_REQUEST_TIMEOUT", 30.0)


def _get_default_max_tokens() -> int:
    return _env_int("OPENAI_MAX_COMPLETION_TOKENS", 2000)


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------
def sanitize_json(raw: str) -> str:
    """Cut the JSON object out of a free-text model reply.

    Looks inside the first fenced block holding an object, then keeps
    the span from the first '{' to the last '}' and drops trailing
    commas before a closing bracket.  Raises ValueError when there is no
    object to cut out.
    """
    text = raw.strip().lstrip("\ufeff")

    fenced = next((b.strip() for b in _FENCE_RE.findall(text) if "{" in b), None)
    if fenced is not None:
        text = fenced

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        raise ValueError("Model reply contains no JSON object")
    return _TRAILING_COMMA_RE.sub(r"\1", text[start: end + 1])


def parse_json_content(raw: str) -> Dict[str, Any]:
    """Parse a model reply into a dict.  Raises ValueError when impossible."""
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        try:
            parsed = json.loads(sanitize_json(raw))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in model output: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Model output is JSON but not an object")
    return parsed


def validate_required_keys(
    parsed: dict,
    required_keys: list[str],
    context: str = "OpenAI",
) -> bool:
    """True when every required key is present; logs the missing ones otherwise."""
    missing = [k for k in required_keys if k not in parsed]
    if missing:
        logger.warning("[%s] Missing required keys: %s", context, missing)
        return False
    return True


def build_payload(
    *,
    model: str,
    messages: List[Dict[str, str]],
    max_completion_tokens: int,
    temperature: float,
    json_mode: bool = True,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_completion_tokens,
        "temperature": temperature,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}
    return payload


def _reply_text(data: Dict[str, Any]) -> str:
    usage = data.get("usage") or {}
    if usage:
        logger.info(
            "[OPENAI] Tokens: prompt=%s completion=%s",
            usage.get("prompt_tokens", "?"),
            usage.get("completion_tokens", "?"),
        )
    return (data["choices"][0]["message"]["content"] or "").strip()


async def call_openai_chat_async(
    *,
    messages: List[Dict[str, str]],
    max_completion_tokens: int = 0,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    json_mode: bool = True,
) -> Optional[Dict[str, Any]]:
    """Call OpenAI chat completions and return the parsed JSON dict, or None on failure.

    Raises EnvironmentError only when no API key is configured; every
    transport, HTTP, or parse failure is logged and returns None.
    """
    api_key = api_key or get_openai_key()
    model = model or get_openai_model()
    payload = build_payload(
        model=model,
        messages=messages,
        max_completion_tokens=max_completion_tokens or _get_default_max_tokens(),
        temperature=_get_temperature(),
        json_mode=json_mode,
    )
    headers = {"Authorization": f"Bearer {api_key}"}

    async with httpx.AsyncClient(timeout=_get_timeout()) as client:
        for attempt in range(1, MAX_RETRIES + 2):
            t0 = time.perf_counter()
            try:
                response = await client.post(_OPENAI_API_URL, headers=headers, json=payload)
            except httpx.TimeoutException:
                logger.warning("[OPENAI] %s timed out after %.1fs (attempt %d)", model, time.perf_counter() - t0, attempt)
                continue
            except httpx.HTTPError as exc:
                logger.warning("[OPENAI] Transport error: %s", exc)
                return None

            logger.info("[OPENAI] %s HTTP %d in %.1fs (attempt %d)", model, response.status_code, time.perf_counter() - t0, attempt)
            if response.status_code != 200:
                logger.warning("[OPENAI] Error body: %s", response.text[:400])
                if is_non_retryable_error(response.status_code):
                    return None
                continue

            try:
                content = _reply_text(response.json())
            except (KeyError, IndexError, TypeError, ValueError) as exc:
                logger.warning("[OPENAI] Malformed completion envelope: %s", exc)
                return None
            if not content:
                logger.warning("[OPENAI] Empty reply (attempt %d)", attempt)
                continue

            try:
                return parse_json_content(content)
            except ValueError as exc:
                logger.warning("[OPENAI] Unparseable reply: %s; first 300 chars: %s", exc, content[:300])

    logger.warning("[OPENAI] All attempts exhausted")
    return None
