"""Thread controller: runs one AI query for a story-editing session.

Query flow:
  1. Reject empty input (session untouched, nothing sent).
  2. Mark the session pending.
  3. Replay the story's existing thread, if any, through the assembler.
  4. Call the completion client.
  5. Create the thread on first use, then append the user message and the
     AI message, in that order.
  6. Record the thread id, flip `refresh`, clear the draft, notify listeners.

Completion and persistence failures end the query with the session in
`errored`; the draft is kept so the user can resubmit. A thread changed by
another writer mid-query is reported as CONFLICT rather than SAVE_FAILED.
Any other exception propagates, but the session still leaves `pending`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from aips.errors import (
    CompletionError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    SessionBusyError,
    ValidationError,
)
from aips.llm import CompletionClient
from aips.models import Message, PromptContext, SessionState
from aips.prompts import PromptAssembler, PromptError, included_details_label
from aips.storage import Storage

logger = logging.getLogger(__name__)

COMPLETION_FAILED = "Failed to fetch suggestions. Please try again."
SAVE_FAILED = "Failed to save the conversation. Please try again."
CONFLICT = "This conversation was updated elsewhere. Reload it and try again."
UNEXPECTED_FAILED = "Something went wrong. Please try again."

Listener = Callable[[str, str | None], None]


class ThreadController:
    def __init__(
        self,
        storage: Storage,
        client: CompletionClient,
        assembler: PromptAssembler | None = None,
    ) -> None:
        self._storage = storage
        self._client = client
        self._assembler = assembler or PromptAssembler()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a `(story_id, thread_id)` callback fired whenever a thread changes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self, session: SessionState) -> None:
        session.refresh = not session.refresh
        for listener in list(self._listeners):
            listener(session.story_id, session.thread_id)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def open_session(self, story_id: str) -> SessionState:
        """Start a session for a story, picking up its existing thread."""
        thread_id = self._storage.get_thread_id_for_story(story_id)
        return SessionState(story_id=story_id, thread_id=thread_id)

    async def send_query(
        self,
        session: SessionState,
        query: str,
        context: PromptContext,
        user_id: str,
    ) -> Message | None:
        """Run one query. Returns the AI message, or None if the query failed."""
        if not query.strip():
            raise ValidationError("Please enter a query for suggestions.")
        if session.loading:
            raise SessionBusyError("A request is already in progress for this story.")

        session.status = "pending"
        session.error = None
        session.draft = query

        try:
            return await self._run_query(session, query, context, user_id)
        finally:
            if session.loading:
                # unexpected error on its way out; never leave the session pending
                session.status = "errored"
                session.error = UNEXPECTED_FAILED

    async def _run_query(
        self,
        session: SessionState,
        query: str,
        context: PromptContext,
        user_id: str,
    ) -> Message | None:
        try:
            thread = self._storage.get_thread(session.thread_id)
            if thread is None:
                thread = self._storage.get_thread(
                    self._storage.get_thread_id_for_story(session.story_id)
                )
            history = thread.messages if thread else []
            system_prompt, user_prompt = self._assembler.build(query, context, history)
        except (NotFoundError, PromptError) as e:
            logger.exception("could not prepare query for story %s", session.story_id)
            self._fail(session, str(e))
            return None

        try:
            completion = await self._client.complete(system_prompt, user_prompt)
        except CompletionError:
            logger.exception("completion failed for story %s", session.story_id)
            self._fail(session, COMPLETION_FAILED)
            return None

        user_message = Message(
            role="user",
            content=query,
            included_details=included_details_label(context),
        )
        ai_message = Message(
            role="ai",
            content=completion.content,
            reasoning=completion.reasoning,
        )

        try:
            if thread is None:
                thread_id = self._storage.create_thread(user_id, session.story_id)
                count = 0
            else:
                thread_id = thread.id
                count = len(thread.messages)
            self._storage.append_message(thread_id, user_message, expected_count=count)
            self._storage.append_message(thread_id, ai_message, expected_count=count + 1)
        except ConflictError:
            logger.warning("thread for story %s changed during the query", session.story_id)
            self._fail(session, CONFLICT)
            return None
        except (PersistenceError, NotFoundError):
            logger.exception("could not save conversation for story %s", session.story_id)
            self._fail(session, SAVE_FAILED)
            return None

        session.thread_id = thread_id
        session.status = "idle"
        session.draft = ""
        self._changed(session)
        return ai_message

    def _fail(self, session: SessionState, error: str) -> None:
        session.status = "errored"
        session.error = error

    def delete_thread(self, session: SessionState, confirm: bool) -> bool:
        """Delete the session's thread. Returns False when cancelled or there is nothing to delete."""
        if not confirm:
            return False
        if not session.thread_id:
            logger.warning("no thread to delete for story %s", session.story_id)
            return False
        if session.loading:
            raise SessionBusyError("A request is already in progress for this story.")

        self._storage.delete_thread(session.thread_id, session.story_id)
        session.thread_id = None
        self._changed(session)
        return True
