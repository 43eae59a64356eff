import uuid
import logging
from typing import NamedTuple, Sequence
from sqlalchemy.orm import Session
from app.core.exceptions import ValidationError
from app.core.locks import tournament_lock
from app.fixtures.models.fixture_model import Fixture
from app.standings.services.standing_service import new_standing

logger = logging.getLogger(__name__)


class FixturePairing(NamedTuple):
    home: str
    away: str


def generate_fixtures(participants: Sequence[str]) -> list:
    """
    Build a double round-robin schedule.

    Every pair {i, j} with i listed before j yields (i, j) followed by the
    return leg (j, i). The output order depends only on the input order,
    which matters because fixtures are addressed by their index.

    :param participants: ordered, distinct participant names
    :return: n*(n-1) pairings, or an empty list for fewer than two participants
    """
    players = list(participants)
    if len(players) < 2:
        return []

    if len(set(players)) != len(players):
        raise ValidationError("Participants must be distinct")

    pairings = []
    for i in range(len(players)):
        for j in range(i + 1, len(players)):
            pairings.append(FixturePairing(home=players[i], away=players[j]))
            pairings.append(FixturePairing(home=players[j], away=players[i]))  # Return leg
    return pairings


class FixtureService:
    def __init__(self, db: Session):
        self.db = db

    def regenerate(self, tournament, participants: Sequence[str]):
        """Replace the tournament's fixtures and standings with a fresh schedule."""
        players = list(participants)
        if len(players) < 2:
            logger.warning(f"⚠️ Not regenerating {tournament.tournament_id}: {len(players)} player(s)")
            raise ValidationError("At least two players are needed to generate fixtures")

        pairings = generate_fixtures(players)

        with tournament_lock(tournament.tournament_id):
            self._replace_schedule(tournament, pairings, players)

        self.db.refresh(tournament)
        logger.info(
            f"🔁 Generated {len(pairings)} fixtures for {tournament.tournament_id} ({len(players)} players)"
        )
        return tournament.fixtures

    def _replace_schedule(self, tournament, pairings, players):
        try:
            # Full replace: delete-orphan cascade drops the previous rows
            tournament.fixtures.clear()
            tournament.standings.clear()
            self.db.flush()

            for position, pairing in enumerate(pairings):
                tournament.fixtures.append(
                    Fixture(
                        fixture_id=uuid.uuid4().hex,
                        position=position,
                        home=pairing.home,
                        away=pairing.away,
                        home_score=0,
                        away_score=0,
                        played=False,
                    )
                )
            for player in players:
                tournament.standings.append(new_standing(player))

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def list_fixtures(self, tournament_id: str):
        return (
            self.db.query(Fixture)
            .filter(Fixture.tournament_id == tournament_id)
            .order_by(Fixture.position)
            .all()
        )
