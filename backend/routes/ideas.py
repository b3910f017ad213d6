"""Story idea generation from free text."""

from fastapi import APIRouter, Depends, HTTPException

from aips.errors import CompletionError, ValidationError
from aips.ideas import generate_story_ideas
from aips.llm import CompletionClient

from .deps import get_client
from .models import IdeasBody

router = APIRouter()


@router.post("/ideas")
async def story_ideas(body: IdeasBody, client: CompletionClient = Depends(get_client)):
    """Generate story ideas (title + description) from a prompt."""
    try:
        return await generate_story_ideas(client, body.text)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except CompletionError:
        raise HTTPException(502, "Failed to fetch suggestions. Please try again.")
