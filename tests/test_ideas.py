"""Tests for story idea and character generation."""

import pytest

from aips.errors import CompletionError, ValidationError
from aips.ideas import (
    CHARACTER_SYSTEM_PROMPT,
    IDEAS_SYSTEM_PROMPT,
    generate_character,
    generate_story_ideas,
    parse_character,
    parse_story_ideas,
)
from aips.models import Story

IDEAS_REPLY = """**The Clockwork Orchard**
An apprentice discovers the fruit trees are counting down.

**Salt and Static**
A lighthouse keeper picks up radio signals from a drowned city.
**Third Bell**
A monk hears a bell nobody else can."""


# ── parse_story_ideas ────────────────────────────────────────


def test_parse_story_ideas():
    ideas = parse_story_ideas(IDEAS_REPLY)
    assert [i.title for i in ideas] == ["The Clockwork Orchard", "Salt and Static", "Third Bell"]
    assert ideas[0].description == "An apprentice discovers the fruit trees are counting down."
    assert ideas[2].description == "A monk hears a bell nobody else can."


def test_parse_story_ideas_drops_unformatted_text():
    assert parse_story_ideas("Sure! Here are some ideas.") == []


def test_parse_story_ideas_multiline_description():
    ideas = parse_story_ideas("**Title**\nLine one.\nLine two.")
    assert ideas[0].description == "Line one.\nLine two."


# ── parse_character ──────────────────────────────────────────


def test_parse_character():
    draft = parse_character(
        "**Name:** Mira Vell\n**Gender:** Female\n**Description:** Stubborn apprentice."
    )
    assert draft.name == "Mira Vell"
    assert draft.gender == "Female"
    assert draft.description == "Stubborn apprentice."


def test_parse_character_bad_format():
    with pytest.raises(CompletionError, match="Unexpected AI response format"):
        parse_character("Mira, a stubborn apprentice.")


# ── generators ───────────────────────────────────────────────


async def test_generate_story_ideas(client):
    client.queue(IDEAS_REPLY)
    ideas = await generate_story_ideas(client, "a story about clocks")
    assert len(ideas) == 3
    assert client.calls == [(IDEAS_SYSTEM_PROMPT, "a story about clocks")]


async def test_generate_story_ideas_rejects_empty(client):
    with pytest.raises(ValidationError):
        await generate_story_ideas(client, "  ")
    assert client.calls == []


async def test_generate_character(client):
    client.queue("**Name:** Mira\n**Gender:** Female\n**Description:** Curious.")
    story = Story(id="s1", user_id="u1", title="Orchard", genre="Fantasy")
    draft = await generate_character(client, story, name="Mira")
    assert draft.name == "Mira"
    system, user = client.calls[0]
    assert system == CHARACTER_SYSTEM_PROMPT
    assert "Story Title: Orchard" in user
    assert "Story Genre: Fantasy" in user
    assert "Story Location: No location specified." in user
    assert "Character Name: Mira" in user
    assert "Character Description: No initial description provided." in user


async def test_generate_character_needs_seed(client):
    with pytest.raises(ValidationError):
        await generate_character(client, Story(id="s1", user_id="u1"))
    assert client.calls == []
