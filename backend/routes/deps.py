"""Request dependencies: the shared objects `create_app` hangs on app.state."""

from fastapi import Request

from aips.controller import ThreadController
from aips.llm import CompletionClient
from aips.storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_client(request: Request) -> CompletionClient:
    return request.app.state.client


def get_controller(request: Request) -> ThreadController:
    return request.app.state.controller


def get_sessions(request: Request) -> dict:
    return request.app.state.sessions
