"""User profile endpoints. Sign-in itself belongs to the identity provider."""

from fastapi import APIRouter, Depends, HTTPException

from aips.errors import PersistenceError
from aips.models import User
from aips.storage import Storage

from .deps import get_storage
from .models import UpsertUser

router = APIRouter()


@router.put("/users/{user_id}")
async def upsert_user(user_id: str, body: UpsertUser, storage: Storage = Depends(get_storage)):
    """Create or replace a user's profile."""
    if body.username:
        existing = storage.find_user_by_username(body.username)
        if existing and existing.id != user_id:
            raise HTTPException(409, f"Username '{body.username}' is taken")
    try:
        return storage.save_user(User(id=user_id, **body.model_dump()))
    except PersistenceError as e:
        raise HTTPException(500, str(e))


@router.get("/users/{user_id}")
async def get_user(user_id: str, storage: Storage = Depends(get_storage)):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return user
