"""AI thread endpoints: view, query, delete, and per-user listing."""

from fastapi import APIRouter, Depends, HTTPException

from aips.controller import COMPLETION_FAILED, CONFLICT, ThreadController
from aips.errors import NotFoundError, SessionBusyError, ValidationError
from aips.models import PromptContext, SessionState, Story
from aips.storage import Storage

from .deps import get_controller, get_sessions, get_storage
from .models import QueryBody, QueryResult

router = APIRouter()


def _session(story_id: str, controller: ThreadController, sessions: dict) -> SessionState:
    session = sessions.get(story_id)
    if session is None:
        try:
            session = controller.open_session(story_id)
        except NotFoundError:
            raise HTTPException(404, "Story not found")
        sessions[story_id] = session
    return session


@router.get("/stories/{story_id}/session")
async def get_session(
    story_id: str,
    controller: ThreadController = Depends(get_controller),
    sessions: dict = Depends(get_sessions),
):
    """Current editing-session state (status, error, thread id, refresh flag)."""
    return _session(story_id, controller, sessions)


@router.get("/stories/{story_id}/thread")
async def get_thread(story_id: str, storage: Storage = Depends(get_storage)):
    """The story's AI thread, or null when no conversation has started."""
    try:
        thread_id = storage.get_thread_id_for_story(story_id)
    except NotFoundError:
        raise HTTPException(404, "Story not found")
    return storage.get_thread(thread_id)


@router.post("/stories/{story_id}/thread/messages", response_model=QueryResult)
async def send_query(
    story_id: str,
    body: QueryBody,
    storage: Storage = Depends(get_storage),
    controller: ThreadController = Depends(get_controller),
    sessions: dict = Depends(get_sessions),
):
    """Ask the assistant about a story; both sides of the exchange join its thread."""
    session = _session(story_id, controller, sessions)
    story = storage.get_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    if body.story is not None:
        live = body.story.model_dump(exclude_none=True)
        story = Story.model_validate({**story.model_dump(), **live})

    context = PromptContext(
        story=story,
        include_main_details=body.include_main_details,
        include_characters=body.include_characters,
        include_chapters=body.include_chapters,
    )
    try:
        message = await controller.send_query(session, body.query, context, body.user_id)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except SessionBusyError as e:
        raise HTTPException(409, str(e))

    if message is None:
        status = {COMPLETION_FAILED: 502, CONFLICT: 409}.get(session.error, 500)
        raise HTTPException(status, session.error)
    return QueryResult(session=session, message=message)


@router.delete("/stories/{story_id}/thread")
async def delete_thread(
    story_id: str,
    confirm: bool = False,
    controller: ThreadController = Depends(get_controller),
    sessions: dict = Depends(get_sessions),
):
    """Delete the story's AI thread. Nothing happens unless `confirm=true`."""
    session = _session(story_id, controller, sessions)
    try:
        deleted = controller.delete_thread(session, confirm)
    except NotFoundError:
        raise HTTPException(404, "Thread not found")
    except SessionBusyError as e:
        raise HTTPException(409, str(e))
    return {"ok": deleted, "session": session}


@router.get("/users/{user_id}/threads")
async def list_user_threads(user_id: str, storage: Storage = Depends(get_storage)):
    """All threads owned by a user."""
    return storage.list_threads_for_user(user_id)
