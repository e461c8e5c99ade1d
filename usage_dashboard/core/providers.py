"""
Provider classification.

Infers the upstream API vendor from a model identifier.
"""

from enum import Enum
from typing import Optional

from .events import UNKNOWN_MODEL


class Provider(Enum):
    """Provider labels shown on the dashboard."""
    ANTHROPIC = "Anthropic"
    OPENAI_CODEX = "OpenAI Codex"
    OPENAI = "OpenAI"
    GOOGLE = "Google"
    XAI = "xAI"
    OTHER = "Other"


# Order matters: the first matching rule wins
_PREFIX_RULES = (
    ("openai-codex/", Provider.OPENAI_CODEX),
    ("openai/", Provider.OPENAI),
    ("google/", Provider.GOOGLE),
    ("xai/", Provider.XAI),
)


def classify_provider(model: Optional[str]) -> Provider:
    """Classify a model identifier.

    Rules, first match wins:
    - starts with "anthropic/" or contains "claude" -> Anthropic
    - "openai-codex/" -> OpenAI Codex
    - "openai/" -> OpenAI
    - "google/" -> Google
    - "xai/" -> xAI
    - anything else -> Other

    Args:
        model: Model identifier; None or empty is read as "unknown"

    Returns:
        The matching Provider
    """
    model = model or UNKNOWN_MODEL

    if model.startswith("anthropic/") or "claude" in model:
        return Provider.ANTHROPIC
    for prefix, provider in _PREFIX_RULES:
        if model.startswith(prefix):
            return provider
    return Provider.OTHER


def provider_from_model(model: Optional[str]) -> str:
    """Provider label for a model identifier."""
    return classify_provider(model).value
