"""Prompt assembly for the story assistant.

The system prompt is built from Handlebars sections, each rendered on its own
and joined with blank lines:

  1. persona + the user's request (always)
  2. past conversation, deduplicated against chapter text (when a thread exists)
  3. main story details       (include_main_details)
  4. character roster         (include_characters)
  5. chapter transcript       (include_chapters)

The raw query is also sent as the user-role message.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from fractions import Fraction
from typing import Any

import pybars

from aips.errors import ValidationError
from aips.models import Chapter, Message, PromptContext

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}

HISTORY_CHAR_LIMIT = 1000

DuplicatePredicate = Callable[[Message, Sequence[Chapter]], bool]

SYSTEM_TEMPLATE = (
    "You are AIPS, an AI assistant helping with story writing. "
    "Introduce yourself once per conversation: look for the past conversation "
    "below and only introduce yourself if you haven't already. "
    'The user has requested:\n\n"{{{query}}}".'
)

HISTORY_TEMPLATE = (
    "Here is the past conversation:\n"
    "{{#each lines}}{{{speaker}}}: {{{content}}}\n{{/each}}"
)

MAIN_DETAILS_TEMPLATE = (
    "Here are the story's main details:\n"
    "{{#each details}}{{{label}}}: {{{value}}}\n{{/each}}"
)

CHARACTERS_TEMPLATE = (
    "Here are the characters:\n"
    "{{#each characters}}- {{{name}}}: {{{description}}}\n{{/each}}"
)

CHAPTERS_TEMPLATE = (
    "Here are the previous chapters:\n"
    "{{#each chapters}}Chapter {{number}}: {{{title}}}\n{{{content}}}\n\n{{/each}}"
)


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


class ChapterOverlap:
    """Default duplicate predicate for history replay.

    A message counts as a re-fed chapter when it mentions the chapter's title
    and is at least `ratio` as long as the chapter's content. Chapters with a
    blank title or content never match.
    """

    def __init__(self, ratio: Fraction | str | float = Fraction(7, 10)) -> None:
        self.ratio = Fraction(ratio).limit_denominator(1000)

    def __call__(self, message: Message, chapters: Sequence[Chapter]) -> bool:
        content = message.content
        for chapter in chapters:
            if not chapter.title.strip() or not chapter.content:
                continue
            if chapter.title in content and len(content) >= self.ratio * len(chapter.content):
                return True
        return False


def included_details_label(context: PromptContext) -> str | None:
    """Human-readable list of what the caller chose to include, or None."""
    parts = [
        "Main details" if context.include_main_details else "",
        "Characters" if context.include_characters else "",
        "Chapters" if context.include_chapters else "",
    ]
    label = ", ".join(p for p in parts if p)
    return label or None


class PromptAssembler:
    """Builds the (system_prompt, user_prompt) pair for one request.

    Args:
        is_duplicate: predicate deciding whether a historical message is
                      suppressed from the replay. Defaults to ChapterOverlap().
        history_limit: characters kept from each replayed message.
    """

    def __init__(
        self,
        is_duplicate: DuplicatePredicate | None = None,
        history_limit: int = HISTORY_CHAR_LIMIT,
    ) -> None:
        self._is_duplicate = is_duplicate or ChapterOverlap()
        self._history_limit = history_limit

    def build(
        self,
        query: str,
        context: PromptContext,
        history: Sequence[Message] = (),
    ) -> tuple[str, str]:
        if not query.strip():
            raise ValidationError("Please enter a query for suggestions.")

        story = context.story
        sections = [render_prompt(SYSTEM_TEMPLATE, {"query": query})]

        lines = self._transcript(history, story.chapters)
        if lines:
            sections.append(render_prompt(HISTORY_TEMPLATE, {"lines": lines}))

        if context.include_main_details:
            details = [
                {"label": label, "value": value}
                for label, value in (
                    ("Title", story.title),
                    ("Description", story.description),
                    ("Genre", story.genre),
                    ("Location", story.location),
                )
                if value.strip()
            ]
            if details:
                sections.append(render_prompt(MAIN_DETAILS_TEMPLATE, {"details": details}))

        if context.include_characters and story.characters:
            characters = [
                {"name": c.name, "description": c.description or "No description provided"}
                for c in story.characters
            ]
            sections.append(render_prompt(CHARACTERS_TEMPLATE, {"characters": characters}))

        if context.include_chapters and story.chapters:
            chapters = [
                {"number": str(i), "title": ch.title, "content": ch.content}
                for i, ch in enumerate(story.chapters, start=1)
            ]
            sections.append(render_prompt(CHAPTERS_TEMPLATE, {"chapters": chapters}))

        system_prompt = "\n\n".join(s.rstrip() for s in sections)
        return system_prompt, query

    def _transcript(
        self, history: Sequence[Message], chapters: Sequence[Chapter]
    ) -> list[dict[str, str]]:
        lines = []
        for message in history:
            if self._is_duplicate(message, chapters):
                continue
            lines.append({
                "speaker": "User" if message.role == "user" else "AI",
                "content": message.content[: self._history_limit],
            })
        return lines
