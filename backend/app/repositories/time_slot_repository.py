# backend/app/repositories/time_slot_repository.py
"""
TimeSlot Repository for the MindBridge platform

Data access for per-professional booking slots:
- Date and month lookups
- Lazy insertion of default slots
- Row-locked claim and release used by the booking transaction
- Availability toggles that never touch booked slots
"""

from datetime import date
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, case, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.time_slot import TimeSlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TimeSlotRepository(BaseRepository[TimeSlot]):
    """Repository for TimeSlot data access."""

    def __init__(self, db: Session):
        super().__init__(db, TimeSlot)

    # ==========================================
    # Lookups
    # ==========================================

    def find_for_date(self, professional_id: str, slot_date: date) -> List[TimeSlot]:
        """All slots of a professional on one date, ordered by time."""
        query = (
            self._build_query()
            .filter(TimeSlot.professional_id == professional_id, TimeSlot.date == slot_date)
            .order_by(TimeSlot.time)
        )
        return self._execute_query(query)

    def find_open_for_date(self, professional_id: str, slot_date: date) -> List[TimeSlot]:
        """Slots that are available and not booked, ordered by time."""
        query = (
            self._build_query()
            .filter(
                TimeSlot.professional_id == professional_id,
                TimeSlot.date == slot_date,
                TimeSlot.is_available.is_(True),
                TimeSlot.is_booked.is_(False),
            )
            .order_by(TimeSlot.time)
        )
        return self._execute_query(query)

    def get_slot(
        self, professional_id: str, slot_date: date, slot_time: str, for_update: bool = False
    ) -> Optional[TimeSlot]:
        """
        Fetch the slot at exactly (professional, date, time).

        With for_update the row is locked until the surrounding transaction
        ends. Dialects without row locks simply ignore the clause.
        """
        try:
            query = self._build_query().filter(
                TimeSlot.professional_id == professional_id,
                TimeSlot.date == slot_date,
                TimeSlot.time == slot_time,
            )
            if for_update:
                query = query.with_for_update().populate_existing()
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading slot {professional_id} {slot_date} {slot_time}: {e}")
            raise RepositoryException(f"Failed to load time slot: {str(e)}")

    # ==========================================
    # Generation
    # ==========================================

    def insert_default_slots(
        self, professional_id: str, slot_date: date, times: Iterable[str]
    ) -> bool:
        """
        Persist closed default slots for a date.

        Returns False when another request inserted slots for the same date
        first; the session is rolled back and the caller should re-read.
        """
        rows = [
            TimeSlot(
                professional_id=professional_id,
                date=slot_date,
                time=slot_time,
                is_available=False,
                is_booked=False,
            )
            for slot_time in times
        ]
        if not rows:
            return True
        try:
            self.db.add_all(rows)
            self.db.flush()
            return True
        except IntegrityError as exc:
            self.logger.info(
                "Concurrent slot generation for %s on %s: %s", professional_id, slot_date, exc
            )
            self.db.rollback()
            return False
        except SQLAlchemyError as e:
            self.logger.error(f"Error generating slots: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to generate time slots: {str(e)}")

    # ==========================================
    # Booking claim / release
    # ==========================================

    def claim(self, slot_id: str) -> bool:
        """
        Flip a slot to booked only if it is still open.

        Compare-and-swap: the affected row count tells whether this caller
        won the slot.
        """
        try:
            result = self.db.execute(
                update(TimeSlot)
                .where(
                    TimeSlot.id == slot_id,
                    TimeSlot.is_booked.is_(False),
                    TimeSlot.is_available.is_(True),
                )
                .values(is_booked=True)
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error claiming slot {slot_id}: {str(e)}")
            raise RepositoryException(f"Failed to claim time slot: {str(e)}")

    def release(self, professional_id: str, slot_date: date, slot_time: str) -> int:
        """Mark the slot for a triple as not booked; availability is left as is."""
        try:
            result = self.db.execute(
                update(TimeSlot)
                .where(
                    TimeSlot.professional_id == professional_id,
                    TimeSlot.date == slot_date,
                    TimeSlot.time == slot_time,
                    TimeSlot.is_booked.is_(True),
                )
                .values(is_booked=False)
                .execution_options(synchronize_session="fetch")
            )
            return int(result.rowcount or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error releasing slot: {str(e)}")
            raise RepositoryException(f"Failed to release time slot: {str(e)}")

    # ==========================================
    # Availability toggles
    # ==========================================

    def set_date_availability(
        self, professional_id: str, slot_date: date, is_available: bool
    ) -> int:
        """Toggle every unbooked slot on a date. Returns the number of rows touched."""
        try:
            result = self.db.execute(
                update(TimeSlot)
                .where(
                    TimeSlot.professional_id == professional_id,
                    TimeSlot.date == slot_date,
                    TimeSlot.is_booked.is_(False),
                )
                .values(is_available=is_available)
                .execution_options(synchronize_session="fetch")
            )
            return int(result.rowcount or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error toggling date availability: {str(e)}")
            raise RepositoryException(f"Failed to update date availability: {str(e)}")

    # ==========================================
    # Aggregates
    # ==========================================

    def monthly_summary(
        self, professional_id: str, start: date, end: date
    ) -> Dict[date, Dict[str, int]]:
        """
        Per-date totals for slots in [start, end).

        Returns:
            {date: {"total_slots": n, "available_slots": m}}
        """
        open_case = case(
            (and_(TimeSlot.is_available.is_(True), TimeSlot.is_booked.is_(False)), 1),
            else_=0,
        )
        try:
            rows = (
                self.db.query(
                    TimeSlot.date,
                    func.count(TimeSlot.id).label("total_slots"),
                    func.coalesce(func.sum(open_case), 0).label("available_slots"),
                )
                .filter(
                    TimeSlot.professional_id == professional_id,
                    TimeSlot.date >= start,
                    TimeSlot.date < end,
                )
                .group_by(TimeSlot.date)
                .order_by(TimeSlot.date)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error aggregating monthly availability: {str(e)}")
            raise RepositoryException(f"Failed to aggregate availability: {str(e)}")

        return {
            row.date: {
                "total_slots": int(row.total_slots),
                "available_slots": int(row.available_slots),
            }
            for row in rows
        }
