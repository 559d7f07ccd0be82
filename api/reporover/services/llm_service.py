"""
Helper functions for Gemini API calls.
"""
import json
import logging
import re
from typing import Any, Optional, Tuple

import requests

from reporover.core.config import settings
from reporover.core.exceptions import (
    ConfigurationError,
    GenerationFailedError,
    UpstreamError,
)
from reporover.services.http_client import send_request

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def calculate_gemini_cost(prompt_tokens: int, output_tokens: int, model_name: str = "gemini-2.5-flash") -> float:
    """
    Calculate cost for a Gemini API call based on token usage.

    Pricing per 1M tokens:
    - flash models: $0.075 input, $0.30 output
    - pro models: $0.125 input, $0.50 output

    Returns:
        Cost in USD
    """
    if "pro" in model_name.lower() and "flash" not in model_name.lower():
        input_price_per_million = 0.125
        output_price_per_million = 0.50
    else:
        input_price_per_million = 0.075
        output_price_per_million = 0.30

    input_cost = (prompt_tokens / 1_000_000) * input_price_per_million
    output_cost = (output_tokens / 1_000_000) * output_price_per_million
    return input_cost + output_cost


def is_configured() -> bool:
    return bool(settings.google_gemini_api_key)


def call_gemini_text(
    prompt: str,
    system_instruction: Optional[str] = None,
    temperature: float = 0.7,
    max_output_tokens: int = 4096
) -> Tuple[str, dict]:
    """
    Call the Gemini API and return the generated text.

    Args:
        prompt: The prompt to send to the model
        system_instruction: Optional system instruction
        temperature: Sampling temperature
        max_output_tokens: Cap on generated tokens

    Returns:
        Tuple of (generated text, token usage dict with keys
        'prompt_tokens', 'output_tokens', 'total_tokens', 'cost_usd', 'model_name')

    Raises:
        ConfigurationError: If no API key is configured
        UpstreamError: If the request fails or Gemini returns an error status
        GenerationFailedError: If the response carries no text
    """
    api_key = settings.google_gemini_api_key
    if not api_key:
        raise ConfigurationError("AI service is not configured", "AI_NOT_CONFIGURED")

    model_name = settings.gemini_model
    payload: dict = {
        "contents": [{
            "parts": [{
                "text": prompt
            }]
        }],
        "generationConfig": {
            "temperature": temperature,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": max_output_tokens,
        }
    }
    if system_instruction:
        payload["systemInstruction"] = {
            "parts": [{
                "text": system_instruction
            }]
        }

    try:
        response = send_request(
            "POST",
            f"{GEMINI_BASE_URL}/{model_name}:generateContent",
            params={"key": api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=60,
        )
    except requests.RequestException as e:
        logger.error(f"Gemini API request failed: {e}")
        raise UpstreamError(f"Gemini API request failed: {e}", "AI_REQUEST_FAILED") from e

    if not response.ok:
        error_msg = f"Gemini API request failed - Status: {response.status_code}"
        try:
            error_msg += f" - {response.json()}"
        except ValueError:
            pass
        logger.error(error_msg)
        raise UpstreamError(error_msg, "AI_REQUEST_FAILED")

    try:
        data = response.json()
    except ValueError as e:
        raise GenerationFailedError("Gemini returned an unreadable response") from e

    usage_metadata = data.get("usageMetadata", {})
    prompt_tokens = usage_metadata.get("promptTokenCount", 0)
    output_tokens = usage_metadata.get("candidatesTokenCount", 0)
    token_usage = {
        "prompt_tokens": prompt_tokens,
        "output_tokens": output_tokens,
        "total_tokens": usage_metadata.get("totalTokenCount", prompt_tokens + output_tokens),
        "cost_usd": calculate_gemini_cost(prompt_tokens, output_tokens, model_name),
        "model_name": model_name,
    }

    candidates = data.get("candidates") or []
    if not candidates:
        raise GenerationFailedError("AI response missing candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts).strip()
    if not text:
        raise GenerationFailedError("AI returned an empty response")

    logger.info(
        f"Gemini call used {token_usage['total_tokens']} tokens "
        f"(${token_usage['cost_usd']:.6f}, {model_name})"
    )
    return text, token_usage


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:])
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def extract_json_array(text: str) -> Any:
    """
    Parse the first JSON array found in model output.

    Raises:
        GenerationFailedError: If no JSON array can be parsed
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
        if isinstance(parsed, list):
            return parsed
    except json.JSONDecodeError:
        pass

    match = JSON_ARRAY_PATTERN.search(cleaned)
    if not match:
        logger.error(f"No JSON array in AI response: {text[:500]}")
        raise GenerationFailedError("Failed to parse quiz questions from AI response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI JSON response: {e}")
        logger.error(f"Response text: {text[:500]}")
        raise GenerationFailedError(f"AI returned invalid JSON: {e}") from e
