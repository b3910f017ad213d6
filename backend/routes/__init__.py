"""FastAPI API endpoints under /api.

Endpoint groups: health/settings, users, stories (with character add and
generate), AI threads (view, query, delete), and story ideas. A story's AI
thread is nested under /api/stories/{story_id}/.
"""

from fastapi import APIRouter

from .ideas import router as ideas_router
from .settings import router as settings_router
from .stories import router as stories_router
from .threads import router as threads_router
from .users import router as users_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(users_router)
router.include_router(stories_router)
router.include_router(threads_router)
router.include_router(ideas_router)
