from fastapi import APIRouter

from afusocial.api.ai import router as ai_router
from afusocial.api.auth import router as auth_router
from afusocial.api.conversations import router as conversations_router
from afusocial.api.posts import router as posts_router
from afusocial.api.search import router as search_router
from afusocial.api.users import router as users_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(users_router)
router.include_router(posts_router)
router.include_router(search_router)
router.include_router(conversations_router)
router.include_router(ai_router)

