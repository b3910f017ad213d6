"""Health check and read-only settings endpoints."""

from fastapi import APIRouter, Depends

from aips.llm import CompletionClient, HttpCompletionClient

from .deps import get_client

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(client: CompletionClient = Depends(get_client)):
    """Which completion backend is active. Never exposes the API key."""
    if isinstance(client, HttpCompletionClient):
        return {"completion": "http", "model": client.model}
    return {"completion": "offline", "model": None}
