"""API v1 router aggregation."""

from fastapi import APIRouter

from vidshare.api.v1 import auth, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
