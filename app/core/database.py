from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI runs sync endpoints in a threadpool
    connect_args["check_same_thread"] = False

# Create the engine with `pool_pre_ping=True` to prevent stale connections
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,   # tests connections before using them
    connect_args=connect_args,
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

# Dependency to get DB session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Function to initialize the database
def init_db(bind=None):
    # Import all models here
    from app.users.models.user_model import User
    from app.tournaments.models.tournament_model import Tournament, TournamentPlayer
    from app.fixtures.models.fixture_model import Fixture
    from app.standings.models.standings_model import Standing

    # Use context manager to ensure connection is released
    with (bind or engine).begin() as conn:
        Base.metadata.create_all(bind=conn)
