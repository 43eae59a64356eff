from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class Tournament(Base):
    __tablename__ = "tournaments"

    tournament_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    # Join order is the participant order handed to the fixture generator
    players = relationship(
        "TournamentPlayer",
        back_populates="tournament",
        order_by="TournamentPlayer.id",
        cascade="all, delete-orphan",
    )
    fixtures = relationship(
        "Fixture",
        back_populates="tournament",
        order_by="Fixture.position",
        cascade="all, delete-orphan",
    )
    standings = relationship(
        "Standing",
        back_populates="tournament",
        cascade="all, delete-orphan",
    )


class TournamentPlayer(Base):
    __tablename__ = "tournament_players"
    __table_args__ = (UniqueConstraint("tournament_id", "user_id", name="uq_tournament_player"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(String, ForeignKey("tournaments.tournament_id"), nullable=False)
    user_id = Column(String, ForeignKey("users.user_id"), nullable=False)
    joined_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    tournament = relationship("Tournament", back_populates="players")
    user = relationship("User", back_populates="memberships")
