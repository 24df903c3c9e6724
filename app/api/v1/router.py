from fastapi import APIRouter
from app.api.v1.endpoints import auth, users, movies

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth")

# Admin account management
api_router.include_router(users.router, prefix="/users")

api_router.include_router(movies.router, prefix="/movies")
