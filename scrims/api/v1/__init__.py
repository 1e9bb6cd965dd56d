"""
API v1 routes.

The identity and team services each mount one of these routers.
"""

from fastapi import APIRouter

from scrims.api.v1 import teams, users

identity_router = APIRouter()
identity_router.include_router(users.router, prefix="/user", tags=["Users"])

team_router = APIRouter()
team_router.include_router(teams.router, prefix="/team", tags=["Teams"])
