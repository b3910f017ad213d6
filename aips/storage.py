"""JSON file document store.

All state is stored in flat JSON files under a configurable base directory,
one file per document, standing in for a hosted document database. Ids are
opaque hex strings. Query-by-field is a scan over the collection.

Directory layout:

    {base}/
      stories/{id}.json    ← Story documents (thread_id back-reference)
      threads/{id}.json    ← Thread documents (append-only message log)
      users/{id}.json      ← User profile documents

Threads and stories are linked 1:1: `story.thread_id` is either null or the
id of a thread whose `story_id` is that story.
"""

from __future__ import annotations

import json
import logging
import shutil
import uuid
from pathlib import Path
from typing import Any

from aips.errors import ConflictError, NotFoundError, PersistenceError
from aips.models import Message, Story, Thread, User, utcnow

logger = logging.getLogger(__name__)

COLLECTIONS = ("stories", "threads", "users")

STORY_FIELDS = {
    "title", "description", "author", "genre", "location", "characters", "chapters",
}


def new_id() -> str:
    return uuid.uuid4().hex


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        for name in COLLECTIONS:
            (base_path / name).mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _doc(self, collection: str, doc_id: str) -> Path:
        return self._base / collection / f"{doc_id}.json"

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text())

    def _write_json(self, path: Path, data: Any) -> None:
        try:
            path.write_text(json.dumps(data, indent=2))
        except OSError as e:
            raise PersistenceError(f"Failed to write {path.name}") from e

    def _scan(self, collection: str) -> list[Any]:
        return [
            self._read_json(path)
            for path in sorted((self._base / collection).glob("*.json"))
        ]

    def _save_story(self, story: Story) -> None:
        self._write_json(self._doc("stories", story.id), story.model_dump(mode="json"))

    def _save_thread(self, thread: Thread) -> None:
        self._write_json(self._doc("threads", thread.id), thread.model_dump(mode="json"))

    def _require_story(self, story_id: str) -> Story:
        story = self.get_story(story_id)
        if story is None:
            raise NotFoundError(f"Story {story_id} not found")
        return story

    def _require_thread(self, thread_id: str) -> Thread:
        thread = self.get_thread(thread_id)
        if thread is None:
            raise NotFoundError(f"Thread {thread_id} not found")
        return thread

    # ------------------------------------------------------------------
    # Stories
    # ------------------------------------------------------------------

    def create_story(self, user_id: str, **fields: Any) -> Story:
        """Create a story document. Unknown fields are ignored."""
        allowed = {k: v for k, v in fields.items() if k in STORY_FIELDS}
        story = Story(id=new_id(), user_id=user_id, **allowed)
        self._save_story(story)
        return story

    def get_story(self, story_id: str) -> Story | None:
        if not story_id:
            return None
        path = self._doc("stories", story_id)
        if not path.is_file():
            return None
        return Story.model_validate(self._read_json(path))

    def update_story(self, story_id: str, fields: dict[str, Any]) -> Story:
        """Update mutable story fields. `id`, `user_id` and `thread_id` are never touched here."""
        story = self._require_story(story_id)
        data = story.model_dump()
        for key, value in fields.items():
            if key in STORY_FIELDS:
                data[key] = value
        data["updated_at"] = utcnow()
        updated = Story.model_validate(data)
        self._save_story(updated)
        return updated

    def list_stories_for_user(self, user_id: str) -> list[Story]:
        """A user's stories, most recently edited first.

        Edited stories come before never-edited ones; the latter are ordered
        by creation time, newest first.
        """
        stories = [
            Story.model_validate(doc)
            for doc in self._scan("stories")
            if doc.get("user_id") == user_id
        ]
        return sorted(
            stories,
            key=lambda s: (s.updated_at is not None, s.updated_at or s.created_at),
            reverse=True,
        )

    def delete_story(self, story_id: str) -> None:
        """Delete a story and the thread linked to it."""
        story = self._require_story(story_id)
        if story.thread_id:
            self._doc("threads", story.thread_id).unlink(missing_ok=True)
        self._doc("stories", story_id).unlink()

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    def create_thread(self, user_id: str, story_id: str) -> str:
        """Create an empty thread and link it to its story. Returns the thread id."""
        story = self._require_story(story_id)
        if story.thread_id and self._doc("threads", story.thread_id).is_file():
            raise ConflictError(f"Story {story_id} already has thread {story.thread_id}")
        thread = Thread(id=new_id(), story_id=story_id, user_id=user_id)
        self._save_thread(thread)
        story.thread_id = thread.id
        self._save_story(story)
        logger.info("created thread %s for story %s", thread.id, story_id)
        return thread.id

    def get_thread(self, thread_id: str | None) -> Thread | None:
        """Load a thread. No id, or an id that no longer exists, yields None."""
        if not thread_id:
            return None
        path = self._doc("threads", thread_id)
        if not path.is_file():
            return None
        return Thread.model_validate(self._read_json(path))

    def append_message(
        self,
        thread_id: str,
        message: Message,
        expected_count: int | None = None,
    ) -> Thread:
        """Append one message to the end of a thread's log.

        With `expected_count`, the append only happens if the thread still
        holds exactly that many messages.
        """
        thread = self._require_thread(thread_id)
        if expected_count is not None and len(thread.messages) != expected_count:
            raise ConflictError(
                f"Thread {thread_id} has {len(thread.messages)} messages, expected {expected_count}"
            )
        thread.messages.append(message)
        self._save_thread(thread)
        return thread

    def delete_thread(self, thread_id: str, story_id: str) -> None:
        """Remove a thread and clear its story's back-reference."""
        story = self._require_story(story_id)
        self._require_thread(thread_id)
        self._doc("threads", thread_id).unlink()
        if story.thread_id == thread_id:
            story.thread_id = None
            self._save_story(story)
        logger.info("deleted thread %s of story %s", thread_id, story_id)

    def get_thread_id_for_story(self, story_id: str) -> str | None:
        story = self._require_story(story_id)
        if not story.thread_id:
            return None
        if not self._doc("threads", story.thread_id).is_file():
            logger.warning("story %s points at missing thread %s", story_id, story.thread_id)
            return None
        return story.thread_id

    def list_threads_for_user(self, user_id: str) -> list[Thread]:
        return [
            Thread.model_validate(doc)
            for doc in self._scan("threads")
            if doc.get("user_id") == user_id
        ]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def save_user(self, user: User) -> User:
        """Upsert a user profile by id."""
        self._write_json(self._doc("users", user.id), user.model_dump(mode="json"))
        return user

    def get_user(self, user_id: str) -> User | None:
        path = self._doc("users", user_id)
        if not path.is_file():
            return None
        return User.model_validate(self._read_json(path))

    def find_user_by_username(self, username: str) -> User | None:
        for doc in self._scan("users"):
            if doc.get("username") == username:
                return User.model_validate(doc)
        return None

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def wipe(self) -> None:
        """Delete every document in every collection."""
        for name in COLLECTIONS:
            shutil.rmtree(self._base / name, ignore_errors=True)
            (self._base / name).mkdir(parents=True, exist_ok=True)
