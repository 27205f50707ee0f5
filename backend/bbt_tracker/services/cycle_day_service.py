"""
Recording and removing daily entries within a cycle.
"""

import logging
from datetime import date
from typing import Dict, Any, Optional

from bbt_tracker import db
from bbt_tracker.models.cycle import Cycle
from bbt_tracker.models.cycle_day import CycleDay
from bbt_tracker.services.cycle_constants import FAHRENHEIT
from bbt_tracker.utils.dates import calculate_day_number, get_day_of_week
from bbt_tracker.utils.temperature import convert_to_fahrenheit_for_storage, validate_bbt

logger = logging.getLogger(__name__)

# Observation keys that make a first-day entry worth recording
DAY_DATA_KEYS = (
    'bbt',
    'bbt_time',
    'had_intercourse',
    'cervical_appearance',
    'cervical_sensation',
    'menstrual_flow',
    'opk_result'
)


class CycleDayService:

    @staticmethod
    def has_day_data(data: Optional[Dict[str, Any]]) -> bool:
        if not data:
            return False
        return any(data.get(key) not in (None, '', False) for key in DAY_DATA_KEYS)

    @staticmethod
    def prepare_bbt(bbt, temperature_unit: str) -> Optional[float]:
        """Validate a reading in the entered unit and return it in Fahrenheit."""
        if bbt is None:
            return None
        value = validate_bbt(bbt, temperature_unit)
        return convert_to_fahrenheit_for_storage(value, temperature_unit)

    @staticmethod
    def resolve_day_number(cycle: Cycle, entry_date: date, day_number: Optional[int] = None) -> int:
        if day_number is not None:
            if day_number < 1:
                raise ValueError("day_number must be at least 1")
            return day_number

        day_number = calculate_day_number(cycle.start_date, entry_date)
        if day_number < 1:
            raise ValueError(
                f"Date {entry_date.isoformat()} is before the cycle start date "
                f"{cycle.start_date.isoformat()}"
            )
        return day_number

    @staticmethod
    def create_or_update_cycle_day(
        cycle: Cycle,
        entry_date: date,
        day_number: Optional[int] = None,
        bbt: Optional[float] = None,
        temperature_unit: str = FAHRENHEIT,
        bbt_time: Optional[str] = None,
        had_intercourse: bool = False,
        exclude_from_interpretation: bool = False,
        cervical_appearance: Optional[str] = None,
        cervical_sensation: Optional[str] = None,
        menstrual_flow: Optional[str] = None,
        opk_result: Optional[str] = None,
        commit: bool = True
    ) -> CycleDay:
        """
        Record the observations for one day of `cycle`.

        The day is keyed by its day number: omitted, it is derived from the
        distance between `entry_date` and the cycle start (start date = day 1).
        An existing day with that number is overwritten, otherwise a new one is
        created. `bbt` is read in `temperature_unit` and stored in Fahrenheit.

        Returns the saved CycleDay.
        """
        try:
            day_number = CycleDayService.resolve_day_number(cycle, entry_date, day_number)
            bbt_fahrenheit = CycleDayService.prepare_bbt(bbt, temperature_unit)

            values = {
                'date': entry_date,
                'day_of_week': get_day_of_week(entry_date),
                'bbt': bbt_fahrenheit,
                'bbt_time': bbt_time,
                'had_intercourse': bool(had_intercourse),
                'exclude_from_interpretation': bool(exclude_from_interpretation),
                'cervical_appearance': cervical_appearance,
                'cervical_sensation': cervical_sensation,
                'menstrual_flow': menstrual_flow,
                'opk_result': opk_result
            }

            existing_day = CycleDay.query.filter_by(
                cycle_id=cycle.id,
                day_number=day_number
            ).first()

            if existing_day:
                for key, value in values.items():
                    setattr(existing_day, key, value)
                cycle_day = existing_day
                logger.debug("Updated day %s of cycle %s", day_number, cycle.id)
            else:
                cycle_day = CycleDay(cycle_id=cycle.id, day_number=day_number, **values)
                db.session.add(cycle_day)
                logger.debug("Created day %s of cycle %s", day_number, cycle.id)

            if commit:
                db.session.commit()
            else:
                db.session.flush()
            return cycle_day

        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def delete_cycle_day(cycle_day: CycleDay) -> None:
        try:
            cycle_id = cycle_day.cycle_id
            day_number = cycle_day.day_number
            db.session.delete(cycle_day)
            db.session.commit()
            logger.info("Deleted day %s of cycle %s", day_number, cycle_id)
        except Exception:
            db.session.rollback()
            raise
