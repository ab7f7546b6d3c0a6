"""
Narrative insights over aggregate report data.

These functions only receive summaries built by
apps.reports.insights.build_narrative_request (counts, top-K distributions,
FTE totals). Client PII never reaches this module.

Failures are raised, not hidden:
    NarrativeUnavailableError  no provider is configured
    NarrativeServiceError      the provider could not be reached or refused
    ContractViolationError     the provider answered with something other
                               than a JSON array of insights
"""
import json
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

# Shared safety instruction appended to all system prompts
_SAFETY_FOOTER = (
    "\n\nIMPORTANT: You are a public health program reporting assistant. "
    "Never ask for, guess, or reference any client identifying information "
    "(names, dates of birth, addresses, or record IDs). "
    "Work only with the aggregate summaries provided."
)

_RESPONSE_FORMAT = (
    "Your response MUST be a valid JSON array of objects. Do not include any "
    "text or markdown formatting before or after the JSON array. Each object "
    "must have \"title\" (string), \"insight\" (string), and an optional "
    "\"recommendation\" (string) key."
)


class NarrativeServiceError(Exception):
    """The narrative provider failed (network, HTTP status, timeout)."""


class NarrativeUnavailableError(NarrativeServiceError):
    """No narrative provider credential is configured."""


class ContractViolationError(Exception):
    """The provider's reply does not match the insight list contract."""


def is_ai_available():
    """Return True if a custom insights endpoint or an OpenRouter key is configured."""
    return bool(
        getattr(settings, "INSIGHTS_API_BASE", "")
        or getattr(settings, "OPENROUTER_API_KEY", "")
    )


def _provider():
    """Return (url, headers, model) for the configured provider.

    INSIGHTS_API_BASE (any OpenAI-compatible endpoint, e.g. a local Ollama)
    takes precedence over OpenRouter.
    """
    insights_base = getattr(settings, "INSIGHTS_API_BASE", "")
    if insights_base:
        headers = {"Content-Type": "application/json"}
        api_key = getattr(settings, "INSIGHTS_API_KEY", "")
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return (
            f"{insights_base.rstrip('/')}/chat/completions",
            headers,
            getattr(settings, "INSIGHTS_MODEL", "llama3"),
        )

    api_key = getattr(settings, "OPENROUTER_API_KEY", "")
    if not api_key:
        raise NarrativeUnavailableError(
            "AI insights are not configured. Set OPENROUTER_API_KEY or INSIGHTS_API_BASE."
        )
    return (
        OPENROUTER_URL,
        {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": getattr(settings, "OPENROUTER_SITE_URL", ""),
            "X-Title": "MultiNav",
        },
        getattr(settings, "OPENROUTER_MODEL", "anthropic/claude-sonnet-4-20250514"),
    )


def _call_chat(system_prompt, user_message, max_tokens=2048):
    """POST one chat-completions request and return the reply text. No retry."""
    url, headers, model = _provider()
    try:
        resp = requests.post(
            url,
            headers=headers,
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt + _SAFETY_FOOTER},
                    {"role": "user", "content": user_message},
                ],
                "max_tokens": max_tokens,
                "temperature": 0.3,
            },
            timeout=getattr(settings, "NARRATIVE_TIMEOUT_SECONDS", 30),
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Narrative provider call failed: %s", exc.__class__.__name__)
        raise NarrativeServiceError("The AI insights service could not be reached.") from exc

    try:
        return resp.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        logger.warning("Narrative provider returned an unexpected envelope")
        raise ContractViolationError("The AI insights service returned an unexpected response.") from exc


def _parse_json_reply(text):
    """Parse the reply, allowing only a surrounding markdown code fence."""
    if not isinstance(text, str):
        raise ContractViolationError("The AI insights reply was empty.")
    text = text.strip()
    if text.startswith("```"):
        lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
        text = "\n".join(lines).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Could not parse narrative reply as JSON (%d chars)", len(text))
        raise ContractViolationError("The AI insights reply was not valid JSON.") from exc


def _insights_from(system_prompt, user_message):
    from apps.reports.insights import validate_insights

    return validate_insights(_parse_json_reply(_call_chat(system_prompt, user_message)))


# ── Public functions ────────────────────────────────────────────────


def generate_report_insights(narrative_request):
    """
    Summarise one report period as insight/recommendation pairs.

    Args:
        narrative_request: dict from build_narrative_request() with keys
            client_summary, activity_summary, workforce_summary, date_range

    Returns:
        list of dicts {title, insight, recommendation?}
    """
    date_range = narrative_request.get("date_range") or {}
    system = (
        "You are an expert public health analyst. Your goal is to generate a "
        "high-level summary with key insights and actionable recommendations "
        "for a program report.\n\n"
        f"{_RESPONSE_FORMAT}\n\n"
        "Focus on trends, significant findings, and potential gaps identified "
        "within the specified date range. Keep insights concise, data-driven, "
        "and suitable for a formal report."
    )
    user_msg = (
        f"Period: {date_range.get('start', '')} to {date_range.get('end', '')}\n\n"
        f"Client summary (for the period):\n"
        f"{json.dumps(narrative_request.get('client_summary', {}), indent=2)}\n\n"
        f"Activity summary (for the period):\n"
        f"{json.dumps(narrative_request.get('activity_summary', {}), indent=2)}\n\n"
        f"Workforce snapshot (current):\n"
        f"{json.dumps(narrative_request.get('workforce_summary', {}), indent=2)}"
    )
    return _insights_from(system, user_msg)


def generate_program_insights(narrative_request, focus=""):
    """Program-wide trends, gaps and recommendations for the AI insights page.

    Same request shape as generate_report_insights(); focus is an optional
    staff question appended to the prompt.
    """
    system = (
        "You are an expert public health analyst specialising in multicultural "
        "health. Analyse summarised health navigation service data for Perth, "
        "Western Australia. Provide trends, identify gaps, and suggest "
        "recommendations.\n\n"
        f"{_RESPONSE_FORMAT}\n\n"
        "Base your analysis on service usage patterns by demographic group, "
        "common health needs and service gaps suggested by the top services, "
        "and workforce capacity and language diversity relative to the client "
        "population."
    )
    user_msg = (
        f"Client demographics summary:\n"
        f"{json.dumps(narrative_request.get('client_summary', {}), indent=2)}\n\n"
        f"Health navigation activities summary:\n"
        f"{json.dumps(narrative_request.get('activity_summary', {}), indent=2)}\n\n"
        f"Workforce data:\n"
        f"{json.dumps(narrative_request.get('workforce_summary', {}), indent=2)}"
    )
    if focus:
        user_msg += f"\n\nStaff question to focus on: {focus}"
    return _insights_from(system, user_msg)
