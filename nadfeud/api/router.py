from fastapi import APIRouter

from nadfeud.api.routes.admin import router as admin_router
from nadfeud.api.routes.auth import router as auth_router
from nadfeud.api.routes.health import router as health_router
from nadfeud.api.routes.leaderboard import router as leaderboard_router
from nadfeud.api.routes.questions import router as questions_router
from nadfeud.api.routes.suggestions import router as suggestions_router
from nadfeud.api.routes.user import router as user_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(health_router, tags=["health"])
api_router.include_router(questions_router, prefix="/questions", tags=["questions"])
api_router.include_router(leaderboard_router, prefix="/leaderboard", tags=["leaderboard"])
api_router.include_router(user_router, prefix="/user", tags=["user"])
api_router.include_router(suggestions_router, prefix="/suggestions", tags=["suggestions"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
