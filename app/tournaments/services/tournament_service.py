import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.security import Identity
from app.core.utils import CUSTOM_ID_ATTEMPTS, generate_custom_id
from app.fixtures.services.fixture_service import FixtureService
from app.tournaments.models.tournament_model import Tournament, TournamentPlayer

logger = logging.getLogger(__name__)


class TournamentService:
    def __init__(self, db: Session):
        self.db = db
        self.fixture_service = FixtureService(db)

    def create_tournament(self, name: str, identity: Identity):
        """Create a tournament owned by ``identity``; the creator joins it straight away."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Tournament name is required")

        for _ in range(CUSTOM_ID_ATTEMPTS):
            tournament = Tournament(
                tournament_id=generate_custom_id(self.db, Tournament, "TR", "tournament_id"),
                name=name,
                created_by=identity.username,
            )
            tournament.players.append(TournamentPlayer(user_id=identity.user_id))
            try:
                self.db.add(tournament)
                self.db.commit()
                break
            except IntegrityError:
                # A concurrent create took the generated id
                self.db.rollback()
                logger.warning(f"⚠️ Tournament id {tournament.tournament_id} already taken, retrying")
            except Exception:
                self.db.rollback()
                raise
        else:
            raise ConflictError("Could not allocate a tournament id, please retry")

        self.db.refresh(tournament)
        logger.info(f"🏆 {identity.username} created tournament {tournament.tournament_id} ({name})")
        return tournament

    def get_tournament(self, tournament_id: str):
        tournament = self.db.query(Tournament).filter(Tournament.tournament_id == tournament_id).first()
        if not tournament:
            raise NotFoundError("Tournament not found")
        return tournament

    def join(self, tournament_id: str, identity: Identity):
        """Add ``identity`` to the tournament. Joining twice is a no-op."""
        tournament = self.get_tournament(tournament_id)
        if self.is_member(tournament, identity):
            return tournament

        try:
            tournament.players.append(TournamentPlayer(user_id=identity.user_id))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(tournament)
        logger.info(f"➕ {identity.username} joined {tournament_id}")
        return tournament

    def is_member(self, tournament, identity: Identity) -> bool:
        return any(member.user_id == identity.user_id for member in tournament.players)

    def list_for_user(self, identity: Identity):
        return (
            self.db.query(Tournament)
            .join(TournamentPlayer, TournamentPlayer.tournament_id == Tournament.tournament_id)
            .filter(TournamentPlayer.user_id == identity.user_id)
            .order_by(Tournament.created_at.desc(), Tournament.tournament_id.desc())
            .all()
        )

    def player_names(self, tournament):
        """Member usernames in join order."""
        return [member.user.username for member in tournament.players]

    def generate_fixtures(self, tournament_id: str):
        """(Re)generate the schedule, discarding every recorded score and standing."""
        tournament = self.get_tournament(tournament_id)
        return self.fixture_service.regenerate(tournament, self.player_names(tournament))
