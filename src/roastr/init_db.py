"""Create the Roastr tables and seed the default tag catalog."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from roastr.db.session import SessionLocal, create_tables
from roastr.models import Tag

DEFAULT_TAGS: tuple[tuple[str, str, bool], ...] = (
    ("Dad Joke", "🧀", False),
    ("Insult", "😈", False),
    ("Joke", "😂", False),
    ("NSFW", "🔞", True),
    ("Roast", "🔥", False),
    ("Sarcasm", "🙃", False),
    ("Satire", "🧠", False),
)


def seed_tags(db: Session) -> int:
    """Insert any default tag missing from the catalog and return how many were added."""
    existing = set(db.scalars(select(Tag.name)))
    added = 0
    for name, emoji, is_sensitive in DEFAULT_TAGS:
        if name not in existing:
            db.add(Tag(name=name, emoji=emoji, is_sensitive=is_sensitive))
            added += 1
    db.commit()
    return added


def init_db() -> None:
    """Initialize the database by creating all tables and seeding tags."""
    create_tables()
    with SessionLocal() as db:
        seed_tags(db)


if __name__ == "__main__":
    init_db()
    print("Database initialized.")
