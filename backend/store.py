"""Document-store style access to hearings on top of a SQLModel session."""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from models import Hearing

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20

# Fields that are set once on creation and never written by an update
IMMUTABLE_FIELDS = ("id", "created_by", "created_at")


@dataclass
class Page:
    hearings: list[Hearing] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


class HearingStore:
    """create / get / update / delete by id plus range and paged queries.

    Every write commits on its own; a failed write is rolled back and the
    error re-raised so the caller decides whether it is fatal.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(self, fields: dict) -> int:
        hearing = Hearing(**fields)
        try:
            self.session.add(hearing)
            self.session.commit()
            self.session.refresh(hearing)
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return hearing.id

    def get(self, hearing_id: int) -> Hearing | None:
        return self.session.get(Hearing, hearing_id)

    def update(self, hearing_id: int, fields: dict) -> bool:
        hearing = self.get(hearing_id)
        if hearing is None:
            return False
        for name, value in fields.items():
            if name in IMMUTABLE_FIELDS:
                continue
            setattr(hearing, name, value)
        try:
            self.session.add(hearing)
            self.session.commit()
            self.session.refresh(hearing)
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return True

    def delete(self, hearing_id: int) -> bool:
        hearing = self.get(hearing_id)
        if hearing is None:
            return False
        try:
            self.session.delete(hearing)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return True

    def query_range(self, start: datetime, end: datetime) -> list[Hearing]:
        """Hearings with start <= starts_at < end, ascending."""
        stmt = (
            select(Hearing)
            .where(Hearing.starts_at >= start)
            .where(Hearing.starts_at < end)
            .order_by(Hearing.starts_at, Hearing.id)
        )
        return list(self.session.exec(stmt).all())

    def query_page(self, page_size: int = DEFAULT_PAGE_SIZE, cursor: str | None = None) -> Page:
        """One page of all hearings ordered by starts_at.

        The cursor is the id of the last hearing of the previous page. An
        unknown cursor restarts from the beginning.
        """
        stmt = select(Hearing)
        last = self._resolve_cursor(cursor)
        if last is not None:
            stmt = stmt.where(
                or_(
                    Hearing.starts_at > last.starts_at,
                    and_(Hearing.starts_at == last.starts_at, Hearing.id > last.id),
                )
            )
        stmt = stmt.order_by(Hearing.starts_at, Hearing.id).limit(page_size)
        hearings = list(self.session.exec(stmt).all())

        return Page(
            hearings=hearings,
            next_cursor=str(hearings[-1].id) if hearings else None,
            has_more=len(hearings) == page_size,
        )

    def _resolve_cursor(self, cursor: str | None) -> Hearing | None:
        if not cursor:
            return None
        try:
            hearing_id = int(cursor)
        except ValueError:
            logger.warning(f"Ignoring malformed cursor: {cursor!r}")
            return None
        last = self.get(hearing_id)
        if last is None:
            logger.warning(f"Cursor {cursor} points to a missing hearing, restarting")
        return last
