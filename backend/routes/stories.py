"""Story document endpoints: create, read, update, delete, and character add/generate."""

from fastapi import APIRouter, Depends, HTTPException

from aips.errors import CompletionError, NotFoundError, PersistenceError, ValidationError
from aips.ideas import generate_character
from aips.llm import CompletionClient
from aips.models import Character
from aips.storage import Storage

from .deps import get_client, get_sessions, get_storage
from .models import CreateStory, GenerateCharacterBody, UpdateStory

router = APIRouter()


def _validate_story(title: str, description: str, chapters: list) -> None:
    if not title or not description or not chapters:
        raise ValidationError(
            "Please fill in all fields and ensure there is at least one chapter."
        )


@router.get("/stories")
async def list_stories(user_id: str, storage: Storage = Depends(get_storage)):
    """List a user's stories."""
    return storage.list_stories_for_user(user_id)


@router.post("/stories", status_code=201)
async def create_story(body: CreateStory, storage: Storage = Depends(get_storage)):
    """Create a story. Author defaults to the user's full name, then email."""
    fields = body.model_dump(exclude={"user_id"}, exclude_none=True)
    if not fields.get("author"):
        user = storage.get_user(body.user_id)
        if user:
            fields["author"] = user.full_name or user.email
    try:
        return storage.create_story(body.user_id, **fields)
    except PersistenceError as e:
        raise HTTPException(500, str(e))


@router.get("/stories/{story_id}")
async def get_story(story_id: str, storage: Storage = Depends(get_storage)):
    """Get a single story by id."""
    story = storage.get_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    return story


@router.patch("/stories/{story_id}")
async def update_story(
    story_id: str, body: UpdateStory, storage: Storage = Depends(get_storage)
):
    """Save editor state. Title, description, and at least one chapter are required."""
    story = storage.get_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    fields = body.model_dump(exclude_none=True)
    try:
        _validate_story(
            fields.get("title", story.title),
            fields.get("description", story.description),
            fields.get("chapters", story.chapters),
        )
        return storage.update_story(story_id, fields)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except PersistenceError as e:
        raise HTTPException(500, str(e))


@router.delete("/stories/{story_id}")
async def delete_story(
    story_id: str,
    storage: Storage = Depends(get_storage),
    sessions: dict = Depends(get_sessions),
):
    """Delete a story and its AI thread."""
    try:
        storage.delete_story(story_id)
    except NotFoundError:
        raise HTTPException(404, "Story not found")
    sessions.pop(story_id, None)
    return {"ok": True}


@router.post("/stories/{story_id}/characters", status_code=201)
async def add_character(
    story_id: str, body: Character, storage: Storage = Depends(get_storage)
):
    """Append a character to a story's roster."""
    story = storage.get_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    if not body.name.strip():
        raise HTTPException(400, "Character name is required")
    characters = [*story.characters, body]
    return storage.update_story(story_id, {"characters": characters})


@router.post("/stories/{story_id}/characters/generate")
async def generate_character_endpoint(
    story_id: str,
    body: GenerateCharacterBody,
    storage: Storage = Depends(get_storage),
    client: CompletionClient = Depends(get_client),
):
    """Draft a character for a story from a partial name or description."""
    story = storage.get_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    try:
        return await generate_character(client, story, body.name, body.description)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except CompletionError as e:
        raise HTTPException(502, f"Failed to generate character: {e}")
