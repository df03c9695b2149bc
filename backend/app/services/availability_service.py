# backend/app/services/availability_service.py
"""
Availability Service for the MindBridge platform.

Owns the time-slot lifecycle outside of booking:
- Lazy generation of default hourly slots for a date
- Per-date open slot listing
- Monthly per-date aggregation for calendars
- Professional-side toggles (open/close slots, whole dates, accepting flag)

Generated default slots are closed; a professional has to open them
before clients can book.
"""

from datetime import date, datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import parse_slot_time, platform_now
from ..models.professional import ProfessionalProfile
from ..models.time_slot import TimeSlot
from ..repositories.factory import RepositoryFactory
from ..repositories.time_slot_repository import TimeSlotRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService

logger = logging.getLogger(__name__)

SlotKey = Tuple[date, str]


def default_slot_times(
    slot_date: date,
    now: datetime,
    start_hour: Optional[int] = None,
    end_hour: Optional[int] = None,
    lead_hours: Optional[int] = None,
) -> List[str]:
    """
    Hourly "HH:00" labels for a date's default slots.

    For today, hours up to and including now.hour + lead_hours are left out.
    """
    start_hour = settings.default_slot_start_hour if start_hour is None else start_hour
    end_hour = settings.default_slot_end_hour if end_hour is None else end_hour
    lead_hours = settings.same_day_lead_hours if lead_hours is None else lead_hours

    hours = range(start_hour, end_hour + 1)
    if slot_date == now.date():
        cutoff = now.hour + lead_hours
        hours = [h for h in hours if h > cutoff]
    return [f"{h:02d}:00" for h in hours]


def _month_bounds(year: int, month: int) -> Tuple[date, date]:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class AvailabilityService(BaseService):
    """
    Service layer for slot generation and availability management.

    All dates are calendar days in the platform timezone.
    """

    def __init__(
        self,
        db: Session,
        time_slot_repository: Optional[TimeSlotRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.time_slot_repository = (
            time_slot_repository or RepositoryFactory.create_time_slot_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    # ==========================================
    # Helpers
    # ==========================================

    def _require_professional(self, professional_id: str) -> ProfessionalProfile:
        profile = self.user_repository.get_professional_profile(professional_id)
        if not profile:
            raise NotFoundException("Professional not found", code="PROFESSIONAL_NOT_FOUND")
        return profile

    @staticmethod
    def _is_engaged(slots: Sequence[TimeSlot]) -> bool:
        """The professional has acted on the date: something was opened or booked."""
        # Opening then closing every slot leaves only closed, unbooked rows. Such a
        # date reads as untouched and lists those closed rows, never an empty list.
        return any(slot.is_available or slot.is_booked for slot in slots)

    @staticmethod
    def _drop_too_soon(slots: Sequence[TimeSlot], slot_date: date, now: datetime) -> List[TimeSlot]:
        if slot_date != now.date():
            return list(slots)
        cutoff = now.hour + settings.same_day_lead_hours
        return [slot for slot in slots if parse_slot_time(slot.time).hour > cutoff]

    def _visible_slots(
        self, slots: Sequence[TimeSlot], slot_date: date, now: datetime
    ) -> List[TimeSlot]:
        if self._is_engaged(slots):
            slots = [slot for slot in slots if slot.is_open]
        return self._drop_too_soon(slots, slot_date, now)

    @staticmethod
    def _dedupe(slots: Iterable[SlotKey]) -> List[SlotKey]:
        seen: Dict[SlotKey, None] = {}
        for key in slots:
            seen.setdefault(key, None)
        return list(seen)

    # ==========================================
    # Slot generation and listing
    # ==========================================

    @BaseService.measure_operation("get_available_time_slots")
    def get_available_time_slots(self, professional_id: str, slot_date: date) -> List[TimeSlot]:
        """
        Slots a client can see for one date.

        - Past dates return an empty list.
        - When the professional has opened or booked anything on the date,
          only open slots are returned.
        - When no rows exist yet, closed default slots are generated,
          persisted and returned. Repeat calls return those same rows.

        Returns:
            Slots ordered by time
        """
        now = platform_now()
        if slot_date < now.date():
            return []

        existing = self.time_slot_repository.find_for_date(professional_id, slot_date)
        if existing:
            return self._visible_slots(existing, slot_date, now)

        times = default_slot_times(slot_date, now)
        if not times:
            return []

        with self.transaction():
            inserted = self.time_slot_repository.insert_default_slots(
                professional_id, slot_date, times
            )

        if inserted:
            self.log_operation(
                "generate_default_slots",
                professional_id=professional_id,
                date=slot_date.isoformat(),
                count=len(times),
            )
        else:
            self.logger.info(
                "Default slots for %s on %s already generated by another request",
                professional_id,
                slot_date,
            )

        slots = self.time_slot_repository.find_for_date(professional_id, slot_date)
        return self._visible_slots(slots, slot_date, now)

    @BaseService.measure_operation("get_date_availability")
    def get_date_availability(self, professional_id: str, slot_date: date) -> Dict[str, Any]:
        """Per-date listing for the HTTP surface; the professional must exist."""
        self._require_professional(professional_id)
        slots = self.get_available_time_slots(professional_id, slot_date)
        return {"date": slot_date.isoformat(), "availability": slots}

    @BaseService.measure_operation("get_monthly_availability")
    def get_monthly_availability(
        self, professional_id: str, year: int, month: int
    ) -> Dict[str, Dict[str, Any]]:
        """
        Per-date slot totals for one month.

        Returns:
            {"YYYY-MM-DD": {"is_available", "total_slots", "available_slots"}}
            Dates without any slot rows are absent.
        """
        if not 1 <= month <= 12:
            raise ValidationException("Month must be between 1 and 12", code="INVALID_MONTH")
        if not 1 <= year <= 9999:
            raise ValidationException("Invalid year", code="INVALID_YEAR")
        self._require_professional(professional_id)

        start, end = _month_bounds(year, month)
        summary = self.time_slot_repository.monthly_summary(professional_id, start, end)

        return {
            day.isoformat(): {
                "is_available": counts["available_slots"] > 0,
                "total_slots": counts["total_slots"],
                "available_slots": counts["available_slots"],
            }
            for day, counts in summary.items()
        }

    # ==========================================
    # Professional-side availability management
    # ==========================================

    @BaseService.measure_operation("set_slots_available")
    def set_slots_available(self, professional_id: str, slots: Iterable[SlotKey]) -> List[TimeSlot]:
        """
        Open slots, creating rows that do not exist yet.

        Booked rows are returned unchanged.
        """
        self._require_professional(professional_id)
        keys = self._dedupe(slots)
        today = platform_now().date()
        if any(slot_date < today for slot_date, _ in keys):
            raise ValidationException(
                "Cannot open availability for past dates", code="PAST_DATE"
            )

        updated: List[TimeSlot] = []
        with self.transaction():
            for slot_date, slot_time in keys:
                slot = self.time_slot_repository.get_slot(professional_id, slot_date, slot_time)
                if slot is None:
                    slot = self.time_slot_repository.create(
                        professional_id=professional_id,
                        date=slot_date,
                        time=slot_time,
                        is_available=True,
                        is_booked=False,
                    )
                elif not slot.is_booked:
                    slot.is_available = True
                updated.append(slot)

        self.log_operation("set_slots_available", professional_id=professional_id, count=len(keys))
        return updated

    @BaseService.measure_operation("set_slots_unavailable")
    def set_slots_unavailable(
        self, professional_id: str, slots: Iterable[SlotKey]
    ) -> List[TimeSlot]:
        """
        Close existing slots that are not booked.

        Returns:
            Only the rows that were changed
        """
        self._require_professional(professional_id)
        changed: List[TimeSlot] = []
        with self.transaction():
            for slot_date, slot_time in self._dedupe(slots):
                slot = self.time_slot_repository.get_slot(professional_id, slot_date, slot_time)
                if slot is None:
                    continue
                if slot.is_booked:
                    self.logger.info(
                        "Skipping booked slot %s %s for %s", slot_date, slot_time, professional_id
                    )
                    continue
                slot.is_available = False
                changed.append(slot)

        self.log_operation(
            "set_slots_unavailable", professional_id=professional_id, count=len(changed)
        )
        return changed

    @BaseService.measure_operation("set_date_availability")
    def set_date_availability(
        self, professional_id: str, slot_date: date, is_available: bool
    ) -> List[TimeSlot]:
        """
        Open or close every unbooked slot on a date.

        Opening a date with no rows first generates the default slots.
        """
        self._require_professional(professional_id)
        now = platform_now()
        if slot_date < now.date():
            raise ValidationException("Cannot change availability for past dates", code="PAST_DATE")

        if is_available and not self.time_slot_repository.find_for_date(professional_id, slot_date):
            self.get_available_time_slots(professional_id, slot_date)

        with self.transaction():
            touched = self.time_slot_repository.set_date_availability(
                professional_id, slot_date, is_available
            )

        self.log_operation(
            "set_date_availability",
            professional_id=professional_id,
            date=slot_date.isoformat(),
            is_available=is_available,
            touched=touched,
        )
        return self.time_slot_repository.find_for_date(professional_id, slot_date)

    @BaseService.measure_operation("set_professional_accepting")
    def set_professional_accepting(
        self, professional_id: str, is_available: bool
    ) -> ProfessionalProfile:
        """Toggle whether the professional accepts new bookings at all."""
        profile = self._require_professional(professional_id)
        with self.transaction():
            profile.is_available = is_available

        self.log_operation(
            "set_professional_accepting",
            professional_id=professional_id,
            is_available=is_available,
        )
        return profile
