import logging
from sqlalchemy.orm import Session
from app.core.exceptions import NotFoundError, ValidationError
from app.core.locks import tournament_lock
from app.fixtures.models.fixture_model import Fixture
from app.standings.models.standings_model import Standing
from app.tournaments.models.tournament_model import Tournament

logger = logging.getLogger(__name__)

STAT_FIELDS = ("played", "won", "drawn", "lost", "gf", "ga", "gd", "points")
# Largest value an Integer column holds on every supported backend
MAX_SCORE = 2**31 - 1

def new_standing(player: str) -> Standing:
    """A standing row for ``player`` with every counter at zero."""
    return Standing(player=player, **{field: 0 for field in STAT_FIELDS})

def _recompute(row):
    # Derived columns always come from the totals, never from increments
    row.gd = row.gf - row.ga
    row.points = row.won * 3 + row.drawn

def apply_result(row, goals_for: int, goals_against: int):
    """Add one match, seen from ``row``'s side, to its cumulative stats."""
    row.played += 1
    if goals_for > goals_against:
        row.won += 1
    elif goals_for == goals_against:
        row.drawn += 1
    else:
        row.lost += 1
    row.gf += goals_for
    row.ga += goals_against
    _recompute(row)
    return row

def revert_result(row, goals_for: int, goals_against: int):
    """Exact inverse of :func:`apply_result`."""
    row.played -= 1
    if goals_for > goals_against:
        row.won -= 1
    elif goals_for == goals_against:
        row.drawn -= 1
    else:
        row.lost -= 1
    row.gf -= goals_for
    row.ga -= goals_against
    _recompute(row)
    return row

def parse_score(value) -> int:
    """Parse a submitted score into a non-negative integer."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid score: {value!r}")
    if isinstance(value, int):
        score = value
    else:
        text = str(value).strip() if value is not None else ""
        if not text.isdecimal():
            raise ValidationError(f"Invalid score: {value!r}")
        score = int(text)
    if score < 0:
        raise ValidationError(f"Score cannot be negative: {score}")
    if score > MAX_SCORE:
        raise ValidationError(f"Score is too large: {score}")
    return score

class StandingService:
    def __init__(self, db: Session):
        self.db = db

    def get_standings(self, tournament_id: str):
        """Standings of a tournament in ranking order."""
        return (
            self.db.query(Standing)
            .filter(Standing.tournament_id == tournament_id)
            .order_by(Standing.points.desc(), Standing.gd.desc(), Standing.standing_id)
            .all()
        )

    def record_result(self, tournament_id: str, fixture_index: int, home_score, away_score):
        """
        Store a fixture's score and fold it into both players' standings.

        The fixture update and both standing updates commit together. A fixture
        that already has a result has that result reverted first, so every
        fixture contributes exactly one result to the table.

        :return: (home_row, away_row) after the update, detached from the session
        """
        home_goals = parse_score(home_score)
        away_goals = parse_score(away_score)

        with tournament_lock(tournament_id):
            try:
                tournament = (
                    self.db.query(Tournament)
                    .filter(Tournament.tournament_id == tournament_id)
                    .with_for_update()
                    .populate_existing()
                    .first()
                )
                if not tournament:
                    raise NotFoundError(f"Tournament {tournament_id} not found")

                fixture = (
                    self.db.query(Fixture)
                    .filter(Fixture.tournament_id == tournament_id, Fixture.position == fixture_index)
                    .populate_existing()
                    .first()
                )
                if not fixture:
                    raise NotFoundError(f"Fixture {fixture_index} not found in {tournament_id}")

                home_row = self._get_row(tournament_id, fixture.home)
                away_row = self._get_row(tournament_id, fixture.away)

                if fixture.played:
                    logger.info(
                        f"✏️ Correcting fixture {fixture_index} of {tournament_id}: "
                        f"{fixture.home_score}-{fixture.away_score} -> {home_goals}-{away_goals}"
                    )
                    revert_result(home_row, fixture.home_score, fixture.away_score)
                    revert_result(away_row, fixture.away_score, fixture.home_score)

                fixture.home_score = home_goals
                fixture.away_score = away_goals
                fixture.played = True

                apply_result(home_row, home_goals, away_goals)
                apply_result(away_row, away_goals, home_goals)

                # Returned rows are detached snapshots so the session holds no
                # connection once the lock is released
                self.db.flush()
                self.db.expunge(home_row)
                self.db.expunge(away_row)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info(
            f"⚽ {tournament_id} fixture {fixture_index}: {home_row.player} {home_goals}-{away_goals} {away_row.player}"
        )
        return home_row, away_row

    def _get_row(self, tournament_id: str, player: str):
        row = (
            self.db.query(Standing)
            .filter(Standing.tournament_id == tournament_id, Standing.player == player)
            .populate_existing()
            .first()
        )
        if not row:
            raise NotFoundError(f"No standing for {player} in {tournament_id}")
        return row
