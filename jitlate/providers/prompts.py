"""
System prompts for LLM-backed providers.

Context, glossary and style travel as separate instructions here instead of
being mixed into the texts being translated.
"""

from __future__ import annotations

from jitlate.core.models import TranslationStyle
from jitlate.languages import get_language_name


STYLE_GUIDANCE: dict[TranslationStyle, str] = {
    TranslationStyle.FORMAL: "Use a formal, polite register.",
    TranslationStyle.NEUTRAL: "Use a neutral register that fits general website copy.",
    TranslationStyle.CASUAL: "Use a relaxed, conversational register.",
    TranslationStyle.MARKETING: "Use persuasive, natural marketing language; adapt idioms instead of translating them literally.",
    TranslationStyle.TECHNICAL: "Use precise technical language and keep established technical terms.",
}


BATCH_FORMAT = (
    'Return ONLY a JSON object of the form {"translations": [...]} holding one '
    "translated string per input string, in the exact same order as the input."
)

STREAM_FORMAT = (
    "Output one JSON object per line and nothing else, one line per input string: "
    '{"index": <position in the input array>, "translation": "<translated text>"}'
)


def build_hints(
    excluded_terms: list[str] | None = None,
    context: str | None = None,
    glossary: dict[str, str] | None = None,
    style: TranslationStyle | None = None,
) -> list[str]:
    """Turn translation hints into prompt lines."""
    lines: list[str] = []

    if context:
        lines.append(f"Context: {context}")
    if style:
        lines.append(STYLE_GUIDANCE[TranslationStyle(style)])
    if excluded_terms:
        terms = ", ".join(f'"{t}"' for t in excluded_terms)
        lines.append(f"Never translate these terms, keep them exactly as written: {terms}.")
    if glossary:
        lines.append("Use these preferred translations:")
        lines.extend(f'- "{source}" → "{target}"' for source, target in glossary.items())

    return lines


def build_system_prompt(
    target_language: str,
    excluded_terms: list[str] | None = None,
    context: str | None = None,
    glossary: dict[str, str] | None = None,
    style: TranslationStyle | None = None,
    streaming: bool = False,
) -> str:
    lines = [
        "You are a professional translation engine.",
        f"Translate the provided JSON array of strings to {get_language_name(target_language)}.",
        "Do not translate HTML tags, class names, placeholders or variables.",
        "Maintain the original tone and meaning.",
        *build_hints(excluded_terms, context, glossary, style),
        STREAM_FORMAT if streaming else BATCH_FORMAT,
    ]
    return "\n".join(lines)
