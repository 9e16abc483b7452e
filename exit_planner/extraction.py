from __future__ import annotations

import json
from typing import Any, Dict, Optional

from loguru import logger

from .issues import Failure, IssueCode, PayloadResult

STRATEGIES_KEY = "strategies"


def _isolate_json_text(response_text: str) -> Optional[str]:
    text = response_text.strip()
    if text.startswith("{"):
        return text
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def extract_json_object(response_text: str) -> Optional[Dict[str, Any]]:
    """Return the first ``{...}`` object found in free text, or None."""
    json_text = _isolate_json_text(response_text)
    if json_text is None:
        return None
    try:
        decoded = json.loads(json_text)
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.debug("Model response is not valid JSON", error=str(exc))
        return None
    return decoded if isinstance(decoded, dict) else None


def _malformed(message: str) -> PayloadResult:
    logger.debug("Rejected model response", reason=message)
    return PayloadResult(failure=Failure(IssueCode.MALFORMED_RESPONSE, message))


def extract_payload(response_text: str) -> PayloadResult:
    if _isolate_json_text(response_text) is None:
        return _malformed("No JSON found in response")
    payload = extract_json_object(response_text)
    if payload is None:
        return _malformed("Response JSON could not be decoded into an object")
    if not isinstance(payload.get(STRATEGIES_KEY), list):
        return _malformed(f"Response is missing a '{STRATEGIES_KEY}' list")
    return PayloadResult(payload=payload)
