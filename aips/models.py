"""Core domain models.

Storage, prompt assembly, and the thread controller all operate on these
types. Pydantic is used for validation and serialisation at every data
boundary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

MessageRole = Literal["user", "ai"]

SessionStatus = Literal["idle", "pending", "errored"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """A single entry in a thread's append-only message log."""

    role: MessageRole
    content: str
    reasoning: str | None = None  # present on ai messages when the model returns a trace
    included_details: str | None = None  # present on user messages, e.g. "Main details, Chapters"
    created_at: datetime = Field(default_factory=utcnow)


class Thread(BaseModel):
    """The persisted AI conversation of one story."""

    id: str
    story_id: str
    user_id: str
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)


class Character(BaseModel):
    name: str
    description: str = ""
    gender: str | None = None


class Chapter(BaseModel):
    title: str
    content: str = ""


def default_chapters() -> list[Chapter]:
    return [Chapter(title="Prologue")]


class Story(BaseModel):
    """Story document. `thread_id` is the back-reference to its AI thread."""

    id: str
    user_id: str
    title: str = ""
    description: str = ""
    author: str = ""
    genre: str = ""
    location: str = ""
    characters: list[Character] = Field(default_factory=list)
    chapters: list[Chapter] = Field(default_factory=default_chapters)
    thread_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class User(BaseModel):
    """Profile document. Credentials live with the identity provider, not here."""

    id: str
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    bio: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PromptContext(BaseModel):
    """Story snapshot plus the caller's include flags for one outbound request."""

    story: Story
    include_main_details: bool = False
    include_characters: bool = False
    include_chapters: bool = False


class Completion(BaseModel):
    content: str
    reasoning: str | None = None


class SessionState(BaseModel):
    """Explicit state of one story-editing session.

    `refresh` flips on every change to the thread so a viewer knows to re-fetch
    without depending on controller internals.
    """

    story_id: str
    status: SessionStatus = "idle"
    thread_id: str | None = None
    error: str | None = None
    draft: str = ""
    refresh: bool = False

    @property
    def loading(self) -> bool:
        return self.status == "pending"


class StoryIdea(BaseModel):
    title: str
    description: str


class CharacterDraft(BaseModel):
    name: str
    gender: str
    description: str
