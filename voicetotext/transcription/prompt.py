"""Initial prompt composition and supported languages."""

from typing import Dict, Optional

SUPPORTED_LANGUAGES: Dict[str, str] = {
    "auto": "Auto",
    "en": "English",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "zh": "中文",
    "ja": "日本語",
    "ko": "한국어",
    "ru": "Русский",
    "ar": "العربية",
    "hi": "हिन्दी",
    "nl": "Nederlands",
    "pl": "Polski",
    "tr": "Türkçe",
}

PROMPT_FIELDS = (
    ("context", "Context"),
    ("vocabulary", "Vocabulary"),
    ("style", "Style"),
    ("punctuation", "Punctuation"),
    ("instructions", "Instructions"),
)


def compose_prompt(fields: Optional[Dict[str, str]]) -> str:
    """Join the non-empty prompt fields into one initial prompt.

    Each field becomes a "# Heading" section; empty fields are skipped.
    """
    if not fields:
        return ""
    parts = []
    for key, heading in PROMPT_FIELDS:
        value = (fields.get(key) or "").strip()
        if value:
            parts.append(f"# {heading}\n{value}")
    return "\n\n".join(parts)
