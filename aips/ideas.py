"""One-shot generators: story ideas from free text, character bios for a story.

Both ask the model for a lightly formatted Markdown reply and parse it into
records. Neither touches a thread.
"""

from __future__ import annotations

import logging
import re

from aips.errors import CompletionError, ValidationError
from aips.llm import CompletionClient
from aips.models import CharacterDraft, Story, StoryIdea
from aips.prompts import render_prompt

logger = logging.getLogger(__name__)

IDEAS_SYSTEM_PROMPT = (
    "You are a creative assistant. Generate three story ideas based on the user's input. "
    "Don't include your opening sentences. Format each idea in this structure:\n"
    "**Title**\n"
    "Description"
)

CHARACTER_SYSTEM_PROMPT = (
    "You are an AI creative assistant. Based on the user's inputs and the story "
    "description, generate a fictional character. Include the following fields:\n"
    "**Name:** A unique and appropriate character name.\n"
    "**Gender:** One of Male, Female, or Other.\n"
    "**Description:** A short description of the character's background, "
    "personality, or unique traits."
)

CHARACTER_USER_TEMPLATE = (
    "Story Title: {{{title}}}\n"
    "Story Description: {{{description}}}\n"
    "Story Genre: {{{genre}}}\n"
    "Story Location: {{{location}}}\n"
    "Character Name: {{{name}}}\n"
    "Character Description: {{{character_description}}}"
)

_IDEA_SPLIT = re.compile(r"\n(?=\*\*[^*]+?\*\*)")
_IDEA_ENTRY = re.compile(r"\*\*(.+?)\*\*\s*(.+)", re.DOTALL)
_CHARACTER = re.compile(
    r"\*\*Name:\*\*\s*([\s\S]+?)\n\*\*Gender:\*\*\s*([\s\S]+?)\n\*\*Description:\*\*\s*([\s\S]+)"
)


def parse_story_ideas(text: str) -> list[StoryIdea]:
    """Split a reply of `**Title**` headed blocks into ideas. Unparseable blocks are dropped."""
    ideas = []
    for entry in _IDEA_SPLIT.split(text.strip()):
        match = _IDEA_ENTRY.search(entry)
        if match:
            ideas.append(StoryIdea(
                title=match.group(1).strip(),
                description=match.group(2).strip(),
            ))
    return ideas


def parse_character(text: str) -> CharacterDraft:
    match = _CHARACTER.search(text)
    if not match:
        raise CompletionError("Unexpected AI response format.")
    return CharacterDraft(
        name=match.group(1).strip(),
        gender=match.group(2).strip(),
        description=match.group(3).strip(),
    )


async def generate_story_ideas(client: CompletionClient, text: str) -> list[StoryIdea]:
    if not text.strip():
        raise ValidationError("Please write some text to let AIPS help you here!")
    completion = await client.complete(IDEAS_SYSTEM_PROMPT, text)
    ideas = parse_story_ideas(completion.content)
    logger.debug("parsed %d story ideas", len(ideas))
    return ideas


async def generate_character(
    client: CompletionClient,
    story: Story,
    name: str = "",
    description: str = "",
) -> CharacterDraft:
    """Ask for a character that fits the story, seeded by a partial name or description."""
    if not name.strip() and not description.strip():
        raise ValidationError(
            "Please provide a name or partial description to get AI suggestions."
        )
    user_prompt = render_prompt(CHARACTER_USER_TEMPLATE, {
        "title": story.title,
        "description": story.description or "No description provided.",
        "genre": story.genre or "No genre specified.",
        "location": story.location or "No location specified.",
        "name": name or "Unknown",
        "character_description": description or "No initial description provided.",
    })
    completion = await client.complete(CHARACTER_SYSTEM_PROMPT, user_prompt)
    return parse_character(completion.content)
