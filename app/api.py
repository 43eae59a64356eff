from fastapi import APIRouter
from app.users.controllers.auth_controller import router as auth_router
from app.tournaments.controllers.dashboard_controller import router as dashboard_router
from app.tournaments.controllers.tournament_controller import router as tournament_router

api_router = APIRouter()

api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(dashboard_router, tags=["dashboard"])
api_router.include_router(tournament_router, prefix="/tournament", tags=["tournament"])
