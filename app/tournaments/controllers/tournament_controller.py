import logging
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.security import Identity, get_current_user
from app.core.templates import templates
from app.core.utils import redirect_with_error
from app.fixtures.services.fixture_service import FixtureService
from app.standings.services.standing_service import StandingService
from app.tournaments.services.tournament_service import TournamentService

logger = logging.getLogger(__name__)

router = APIRouter()


def _tournament_url(tournament_id: str) -> str:
    return f"/tournament/{tournament_id}"


def _parse_fixture_index(value: str) -> int:
    text = (value or "").strip()
    if not text.isdecimal():
        raise NotFoundError("Fixture not found")
    return int(text)


@router.post("/create")
def create_tournament(
    name: str = Form(""),
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        TournamentService(db).create_tournament(name, user)
    except (ConflictError, ValidationError) as e:
        return RedirectResponse(redirect_with_error("/dashboard", e.message), status_code=303)
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/{tournament_id}")
def tournament_detail(
    request: Request,
    tournament_id: str,
    error: str = None,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Players, fixtures (with their index) and the ranked standings table."""
    tournament_service = TournamentService(db)
    tournament = tournament_service.get_tournament(tournament_id)

    return templates.TemplateResponse(
        request,
        "tournament.html",
        {
            "user": user,
            "tournament": tournament,
            "players": tournament_service.player_names(tournament),
            "is_member": tournament_service.is_member(tournament, user),
            "fixtures": FixtureService(db).list_fixtures(tournament_id),
            "standings": StandingService(db).get_standings(tournament_id),
            "error": error,
        },
    )


@router.post("/join/{tournament_id}")
def join_tournament(
    tournament_id: str,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    TournamentService(db).join(tournament_id, user)
    return RedirectResponse(_tournament_url(tournament_id), status_code=303)


@router.post("/generate/{tournament_id}")
def generate_fixtures(
    tournament_id: str,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Regenerate the schedule. Recorded scores and standings are discarded."""
    try:
        TournamentService(db).generate_fixtures(tournament_id)
    except ValidationError as e:
        return RedirectResponse(redirect_with_error(_tournament_url(tournament_id), e.message), status_code=303)
    logger.info(f"🔁 {user.username} regenerated fixtures for {tournament_id}")
    return RedirectResponse(_tournament_url(tournament_id), status_code=303)


@router.post("/score/{tournament_id}")
def record_score(
    tournament_id: str,
    fixtureIndex: str = Form(""),
    homeScore: str = Form(""),
    awayScore: str = Form(""),
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record one fixture's result, addressed by its index in the fixture list."""
    # An unknown tournament propagates to the app handler and lands on the dashboard
    TournamentService(db).get_tournament(tournament_id)

    try:
        fixture_index = _parse_fixture_index(fixtureIndex)
        StandingService(db).record_result(tournament_id, fixture_index, homeScore, awayScore)
    except (NotFoundError, ValidationError) as e:
        return RedirectResponse(redirect_with_error(_tournament_url(tournament_id), e.message), status_code=303)
    return RedirectResponse(_tournament_url(tournament_id), status_code=303)
