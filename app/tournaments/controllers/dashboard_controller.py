from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import Identity, get_current_user
from app.core.templates import templates
from app.tournaments.services.tournament_service import TournamentService

router = APIRouter()


@router.get("/dashboard")
def dashboard(
    request: Request,
    error: str = None,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Tournaments the logged-in user belongs to."""
    tournaments = TournamentService(db).list_for_user(user)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"user": user, "tournaments": tournaments, "error": error},
    )
