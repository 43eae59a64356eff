from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class Fixture(Base):
    __tablename__ = "fixtures"
    __table_args__ = (UniqueConstraint("tournament_id", "position", name="uq_fixture_position"),)

    fixture_id = Column(String, primary_key=True, index=True)
    tournament_id = Column(String, ForeignKey("tournaments.tournament_id"), nullable=False)
    position = Column(Integer, nullable=False)  # index in generation order
    home = Column(String, nullable=False)
    away = Column(String, nullable=False)
    home_score = Column(Integer, nullable=False, default=0)
    away_score = Column(Integer, nullable=False, default=0)
    played = Column(Boolean, nullable=False, default=False)

    tournament = relationship("Tournament", back_populates="fixtures")
