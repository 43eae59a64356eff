from sqlalchemy import Column, String, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class Standing(Base):
    __tablename__ = "standings"
    __table_args__ = (UniqueConstraint("tournament_id", "player", name="uq_standing_player"),)

    standing_id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(String, ForeignKey("tournaments.tournament_id"), nullable=False)
    player = Column(String, nullable=False)

    played = Column(Integer, nullable=False, default=0)
    won = Column(Integer, nullable=False, default=0)
    drawn = Column(Integer, nullable=False, default=0)
    lost = Column(Integer, nullable=False, default=0)
    gf = Column(Integer, nullable=False, default=0)
    ga = Column(Integer, nullable=False, default=0)
    gd = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)

    tournament = relationship("Tournament", back_populates="standings")
