from datetime import date, datetime, timedelta

from sqlmodel import Session, select

from db import engine
from hearings import hearing_fields
from models import Hearing
from store import HearingStore


def sample_hearings(start: date) -> list[dict]:
    """Sample hearings spread over the days following start."""
    def at(days, hour, minute):
        day = start + timedelta(days=days)
        return datetime(day.year, day.month, day.day, hour, minute)

    return [
        hearing_fields(at(0, 9, 0), "Fórum Central - Sala 101", "Sgt. João Silva", "PRESENCIAL", "202500002112972"),
        hearing_fields(at(0, 14, 30), "Fórum Regional Norte", "Cb. Ana Souza", "VIDEOCONFERÊNCIA"),
        hearing_fields(at(1, 10, 15), "Juizado Especial Criminal", "Sd. Pedro Araújo", "PRESENCIAL"),
        hearing_fields(at(2, 13, 0), "Fórum Central - Sala 204", "Sgt. João Silva", "VIDEOCONFERÊNCIA", "202500003400118"),
        hearing_fields(at(7, 8, 45), "Vara do Júri", "Ten. Marcos Lima", "PRESENCIAL"),
    ]


def seed_database():
    """Seed the database with sample data."""
    with Session(engine) as session:
        # Check if data already exists
        existing = session.exec(select(Hearing)).first()
        if existing:
            print("Database already has data, skipping seed.")
            return

        store = HearingStore(session)
        samples = sample_hearings(date.today())
        for fields in samples:
            store.create(fields)
        print(f"Seeded database with {len(samples)} sample hearings.")


if __name__ == "__main__":
    from db import create_db_and_tables

    create_db_and_tables()
    seed_database()
