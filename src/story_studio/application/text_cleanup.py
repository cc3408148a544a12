"""
Text Cleanup — pure transformations applied to model output.

Covers prompt templating, end-of-story sentinel detection, per-part
markup stripping, narration preparation and project folder naming.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from story_studio.domain.value_objects import END_SENTINEL

TITLE_PLACEHOLDER = "{TITLE}"
LANGUAGE_PLACEHOLDER = "{LANGUAGE}"

_QUOTES = "'\"‘’“”`"

TITLE_LINE_RE = re.compile(r"^\*\*Title\*\*:.*$", re.IGNORECASE | re.MULTILINE)
CONTINUE_HINT_RE = re.compile(
    rf"Type [{_QUOTES}]?Continue[{_QUOTES}]? to receive the next part\.?",
    re.IGNORECASE,
)
CURLY_QUOTES_RE = re.compile("[“”‘’]")
UNSAFE_PATH_CHARS_RE = re.compile(r"[:.]")


def build_first_message(template: str, title: str, language: str) -> str:
    """Substitute the title and language into a prompt template.

    Only the first occurrence of each placeholder is replaced; leftover
    ``{LANGUAGE}`` echoes are removed from replies by :func:`clean_part`.
    """
    return template.replace(TITLE_PLACEHOLDER, title, 1).replace(
        LANGUAGE_PLACEHOLDER, language, 1
    )


def split_sentinel(text: str) -> tuple[str, bool]:
    """Detect and strip the end-of-story sentinel.

    Returns:
        Tuple of (text without the first sentinel, whether it was present).
    """
    # Plain substring match: "END" inside a word also terminates the story.
    if END_SENTINEL in text:
        return text.replace(END_SENTINEL, "", 1), True
    return text, False


def clean_part(text: str) -> str:
    """Remove title headers, placeholder echoes and "Continue" hints."""
    text = TITLE_LINE_RE.sub("", text)
    text = text.replace(LANGUAGE_PLACEHOLDER, "")
    text = CONTINUE_HINT_RE.sub("", text)
    return text.strip()


def prepare_for_narration(story: str) -> str:
    """Strip emphasis asterisks and flatten curly quotes for speech."""
    return CURLY_QUOTES_RE.sub("'", story.replace("*", ""))


def folder_timestamp(moment: datetime) -> str:
    """Format a run start time as ``YYYY-MM-DDTHH-MM-SS`` (UTC)."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return UNSAFE_PATH_CHARS_RE.sub("-", moment.isoformat())[:19]


def project_folder_name(project_name: str, moment: datetime) -> str:
    return f"{project_name}_{folder_timestamp(moment)}"
