"""Tests for story and user documents."""

from datetime import datetime, timezone

import pytest

from aips.errors import NotFoundError
from aips.models import Chapter, Character, User


def test_create_story_defaults(storage):
    story = storage.create_story("u1", title="Orchard")
    assert story.user_id == "u1"
    assert [c.title for c in story.chapters] == ["Prologue"]
    assert story.characters == []
    assert story.thread_id is None
    assert storage.get_story(story.id) == story


def test_create_story_ignores_unknown_fields(storage):
    story = storage.create_story("u1", title="T", thread_id="forged", id="forged")
    assert story.thread_id is None
    assert story.id != "forged"


def test_get_story_missing(storage):
    assert storage.get_story("nope") is None
    assert storage.get_story("") is None


def test_update_story(storage):
    story = storage.create_story("u1", title="Old")
    updated = storage.update_story(story.id, {
        "title": "New",
        "characters": [{"name": "Ada", "description": "a coder"}],
        "chapters": [Chapter(title="Chapter 1", content="Once.")],
        "thread_id": "forged",
    })
    assert updated.title == "New"
    assert updated.characters == [Character(name="Ada", description="a coder")]
    assert updated.chapters[0].content == "Once."
    assert updated.thread_id is None
    assert updated.updated_at is not None
    assert storage.get_story(story.id).title == "New"


def test_update_story_missing(storage):
    with pytest.raises(NotFoundError):
        storage.update_story("nope", {"title": "X"})


def test_list_stories_for_user(storage):
    storage.create_story("u1", title="A")
    storage.create_story("u2", title="B")
    storage.create_story("u1", title="C")
    assert sorted(s.title for s in storage.list_stories_for_user("u1")) == ["A", "C"]


def _stamp(storage, story, created, updated=None):
    storage._save_story(story.model_copy(update={
        "created_at": datetime(2024, 1, created, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 2, updated, tzinfo=timezone.utc) if updated else None,
    }))


def test_list_stories_most_recent_first(storage):
    stories = {title: storage.create_story("u1", title=title) for title in "ABCD"}
    _stamp(storage, stories["A"], created=1)
    _stamp(storage, stories["B"], created=3)
    _stamp(storage, stories["C"], created=2, updated=1)
    _stamp(storage, stories["D"], created=4, updated=5)
    titles = [s.title for s in storage.list_stories_for_user("u1")]
    assert titles == ["D", "C", "B", "A"]


def test_list_stories_edit_moves_to_front(storage):
    older = storage.create_story("u1", title="Older")
    _stamp(storage, older, created=1)
    newer = storage.create_story("u1", title="Newer")
    _stamp(storage, newer, created=2)
    storage.update_story(older.id, {"genre": "Fantasy"})
    assert [s.title for s in storage.list_stories_for_user("u1")] == ["Older", "Newer"]


def test_delete_story_removes_thread(storage):
    story = storage.create_story("u1", title="A")
    thread_id = storage.create_thread("u1", story.id)
    storage.delete_story(story.id)
    assert storage.get_story(story.id) is None
    assert storage.get_thread(thread_id) is None


def test_delete_story_missing(storage):
    with pytest.raises(NotFoundError):
        storage.delete_story("nope")


def test_users(storage):
    storage.save_user(User(id="u1", username="ada", email="ada@example.com",
                           first_name="Ada", last_name="Lovelace"))
    user = storage.get_user("u1")
    assert user.full_name == "Ada Lovelace"
    assert storage.find_user_by_username("ada").id == "u1"
    assert storage.find_user_by_username("bob") is None
    assert storage.get_user("u2") is None


def test_wipe(storage):
    story = storage.create_story("u1", title="A")
    storage.save_user(User(id="u1"))
    storage.wipe()
    assert storage.get_story(story.id) is None
    assert storage.get_user("u1") is None
    assert storage.list_stories_for_user("u1") == []
