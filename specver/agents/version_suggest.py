# specver/agents/version_suggest.py
"""
Version-suggestion agent for SpecVer.
Given the current version label and a free-text change description, asks an
Azure OpenAI chat deployment for the next version, a formal release note and
an impact level.

Strictly advisory: every failure (no credentials, transport error, bad JSON,
wrong shape) is logged and returns None. Callers never see an exception.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Optional

from openai.types.chat import ChatCompletionMessageParam
from pydantic import ValidationError

from specver.core.config import Settings
from specver.llm.azure_client import get_azure_openai
from specver.models.history import Suggestion

log = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.S | re.I)

SCHEMA = """
Return ONLY valid JSON with keys:
- suggestedVersion: string, the next semantic version number
- formalDescription: string, a professional summarized release note (≤60 words)
- impactLevel: one of "Low", "Medium", "High"
"""

_SYSTEM = (
    "Role: You maintain version history for SAP functional specification documents (RICEFW objects).\n"
    "Goal: Given the current document version and an informal change description, propose the next "
    "semantic version number and rewrite the change as a formal release note for functional documentation.\n"
    "Bump the major version for scope or design changes, minor for new requirements, patch for corrections "
    "and wording fixes. If the current version is not semantic, pick the closest sensible next label.\n"
    + SCHEMA
)


def _messages(current_version: str, change_description: str) -> list[ChatCompletionMessageParam]:
    return [
        {"role": "system", "content": _SYSTEM},
        {
            "role": "user",
            "content": f"Current Version: {current_version or '1.0.0'}. Change Description: {change_description}",
        },
    ]


def _parse_reply(content: str) -> dict:
    """Model reply -> JSON object; a ``` fenced block around it is tolerated"""
    content = content.strip()
    if not content.startswith("{"):
        m = _FENCE.search(content)
        if m:
            content = m.group(1).strip()
    return json.loads(content)


def suggest_next_version(
    settings: Settings,
    current_version: str,
    change_description: str,
    client=None,
) -> Optional[Suggestion]:
    if not (change_description or "").strip():
        return None
    try:
        client = client or get_azure_openai(settings)
        if client is None:
            log.info("Suggestion skipped: Azure OpenAI not configured")
            return None

        resp = client.chat.completions.create(
            model=settings.suggest_model,
            messages=_messages(current_version, change_description),
            max_completion_tokens=600,
            response_format={"type": "json_object"},
        )
        return Suggestion.model_validate(_parse_reply(resp.choices[0].message.content or ""))
    except json.JSONDecodeError:
        log.exception("Version suggestion returned invalid JSON")
        return None
    except ValidationError:
        log.exception("Version suggestion returned an unexpected shape")
        return None
    except Exception:
        log.exception("Version suggestion failed")
        return None
