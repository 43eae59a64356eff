from urllib.parse import urlencode
from sqlalchemy.orm import Session
from sqlalchemy import func

# Retries when a concurrent insert takes the generated id first
CUSTOM_ID_ATTEMPTS = 3


def generate_custom_id(db: Session, model, prefix: str, id_field: str):
    """
    Generate a human-readable unique ID with a prefix using COUNT instead of ORDER BY.

    :param db: SQLAlchemy session
    :param model: SQLAlchemy model class
    :param prefix: String prefix for the ID (e.g., "U" for user, "TR" for tournament)
    :param id_field: Field name storing the custom ID
    :return: Generated custom ID (e.g., "U1", "U9999", "TR1", "TR10000")
    """
    # Get the current count of rows in the table
    row_count = db.query(func.count()).select_from(model).scalar()

    new_id = row_count + 1
    new_id_str = f"{prefix}{new_id}"

    # Rows may have been deleted, so the count alone can collide
    while db.query(model).filter(getattr(model, id_field) == new_id_str).first():
        new_id += 1
        new_id_str = f"{prefix}{new_id}"

    return new_id_str


def redirect_with_error(path: str, message: str) -> str:
    """Append a human-readable ``error`` query parameter to a redirect target."""
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{urlencode({'error': message})}"
