"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel

from aips.models import Chapter, Character, Message, SessionState


class CreateStory(BaseModel):
    user_id: str
    title: str = ""
    description: str = ""
    author: str = ""
    genre: str = ""
    location: str = ""
    characters: list[Character] | None = None
    chapters: list[Chapter] | None = None


class UpdateStory(BaseModel):
    title: str | None = None
    description: str | None = None
    author: str | None = None
    genre: str | None = None
    location: str | None = None
    characters: list[Character] | None = None
    chapters: list[Chapter] | None = None


class QueryBody(BaseModel):
    user_id: str
    query: str
    include_main_details: bool = False
    include_characters: bool = False
    include_chapters: bool = False
    # Unsaved editor state; the stored story is used when omitted.
    story: UpdateStory | None = None


class QueryResult(BaseModel):
    session: SessionState
    message: Message


class GenerateCharacterBody(BaseModel):
    name: str = ""
    description: str = ""


class IdeasBody(BaseModel):
    text: str


class UpsertUser(BaseModel):
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    bio: str = ""
