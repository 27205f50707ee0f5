"""
specialized service for cycle operations
"""

import logging
from datetime import date, timedelta
from typing import Dict, Any, Optional, List, Tuple

from bbt_tracker import db
from bbt_tracker.models.cycle import Cycle
from bbt_tracker.models.cycle_day import CycleDay
from bbt_tracker.services.cycle_day_service import CycleDayService
from bbt_tracker.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


class CycleService:

    @staticmethod
    def get_user_cycles(user_id: int) -> List[Cycle]:
        """
        All cycles of the user, newest first (by cycle number).
        Past cycles are normalized so their end date is the last recorded day.
        """
        cycles = Cycle.query.filter_by(user_id=user_id).order_by(
            Cycle.cycle_number.desc()
        ).all()

        changed = False
        for cycle in cycles:
            changed = CycleService.ensure_cycle_end_date(cycle, commit=False) or changed

        if changed:
            try:
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return cycles

    @staticmethod
    def ensure_cycle_end_date(cycle: Cycle, commit: bool = True) -> bool:
        """
        Make an inactive cycle's end date match its last recorded day.
        Active cycles and cycles without days are left alone.
        Returns True when the end date was changed.
        """
        if cycle.is_active:
            return False

        last_day = cycle.last_day
        if not last_day:
            return False

        if cycle.end_date == last_day.date:
            return False

        logger.info(
            "Normalizing end date of cycle %s from %s to %s",
            cycle.id, cycle.end_date, last_day.date
        )
        cycle.end_date = last_day.date
        if commit:
            try:
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return True

    @staticmethod
    def get_cycle(user_id: int, cycle_id: int) -> Cycle:
        cycle = Cycle.query.filter_by(id=cycle_id, user_id=user_id).first()
        if not cycle:
            raise ValueError("Cycle not found")
        return cycle

    @staticmethod
    def get_active_cycle(user_id: int) -> Optional[Cycle]:
        return Cycle.query.filter_by(user_id=user_id, is_active=True).order_by(
            Cycle.cycle_number.desc()
        ).first()

    @staticmethod
    def get_cycle_days(user_id: int, cycle_id: int) -> List[CycleDay]:
        """Days of the user's cycle by day number; ValueError when not theirs."""
        cycle = CycleService.get_cycle(user_id, cycle_id)
        return list(cycle.days)

    @staticmethod
    def next_cycle_number(user_id: int) -> int:
        last_cycle = Cycle.query.filter_by(user_id=user_id).order_by(
            Cycle.cycle_number.desc()
        ).first()
        return last_cycle.cycle_number + 1 if last_cycle else 1

    @staticmethod
    def deactivate_active_cycles(user_id: int, new_start_date: date) -> List[Cycle]:
        """
        Close every active cycle of the user ahead of a new cycle starting on
        `new_start_date`. The end date is the last recorded day, or the day
        before the new start (never earlier than the closed cycle's own start)
        when nothing was recorded.
        """
        active_cycles = Cycle.query.filter_by(user_id=user_id, is_active=True).all()

        for cycle in active_cycles:
            last_day = cycle.last_day
            if last_day:
                end_date = last_day.date
            else:
                end_date = max(new_start_date - timedelta(days=1), cycle.start_date)

            cycle.is_active = False
            cycle.end_date = end_date
            logger.info("Deactivated cycle %s (#%s) ending %s", cycle.id, cycle.cycle_number, end_date)

        return active_cycles

    @staticmethod
    def create_cycle(user_id: int, start_date: date,
                     first_day: Optional[Dict[str, Any]] = None) -> Cycle:
        """
        Begin a new cycle, ending the currently active one.

        `first_day` optionally carries observations for the start date; they
        are recorded only when any of them is set. The first day's BBT is
        validated before anything is written.
        """
        first_day = first_day or {}
        record_first_day = CycleDayService.has_day_data(first_day)
        temperature_unit = None

        if record_first_day:
            temperature_unit = first_day.get('temperature_unit') or \
                SettingsService.get_temperature_unit(user_id)
            # Fail before touching any cycle
            CycleDayService.prepare_bbt(first_day.get('bbt'), temperature_unit)

        try:
            CycleService.deactivate_active_cycles(user_id, start_date)

            new_cycle = Cycle(
                user_id=user_id,
                start_date=start_date,
                cycle_number=CycleService.next_cycle_number(user_id),
                is_active=True
            )
            db.session.add(new_cycle)
            db.session.flush()

            if record_first_day:
                CycleDayService.create_or_update_cycle_day(
                    cycle=new_cycle,
                    entry_date=start_date,
                    bbt=first_day.get('bbt'),
                    temperature_unit=temperature_unit,
                    bbt_time=first_day.get('bbt_time'),
                    had_intercourse=first_day.get('had_intercourse', False),
                    exclude_from_interpretation=first_day.get('exclude_from_interpretation', False),
                    cervical_appearance=first_day.get('cervical_appearance'),
                    cervical_sensation=first_day.get('cervical_sensation'),
                    menstrual_flow=first_day.get('menstrual_flow'),
                    opk_result=first_day.get('opk_result'),
                    commit=False
                )

            db.session.commit()
            logger.info(
                "Created cycle %s (#%s) for user %s starting %s",
                new_cycle.id, new_cycle.cycle_number, user_id, start_date
            )
            return new_cycle

        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def end_cycle(cycle: Cycle, end_date: date) -> Cycle:
        if end_date < cycle.start_date:
            raise ValueError("end_date cannot be before the cycle start date")

        try:
            cycle.is_active = False
            cycle.end_date = end_date
            db.session.commit()
            logger.info("Ended cycle %s on %s", cycle.id, end_date)
            return cycle
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def update_cycle(cycle: Cycle, changes: Dict[str, Any]) -> Cycle:
        """
        Apply a partial update. Only keys present in `changes` are touched;
        an explicit None end_date clears it.
        """
        start_date = changes.get('start_date', cycle.start_date)
        end_date = changes.get('end_date', cycle.end_date)
        if end_date is not None and end_date < start_date:
            raise ValueError("end_date cannot be before start_date")

        try:
            if 'start_date' in changes:
                cycle.start_date = changes['start_date']
            if 'end_date' in changes:
                cycle.end_date = changes['end_date']
            if 'is_active' in changes:
                cycle.is_active = changes['is_active']

            db.session.commit()
            logger.info("Updated cycle %s: %s", cycle.id, sorted(changes))
            return cycle
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def delete_cycle(cycle: Cycle) -> None:
        try:
            cycle_id = cycle.id
            db.session.delete(cycle)
            db.session.commit()
            logger.info("Deleted cycle %s and its days", cycle_id)
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def get_adjacent_cycles(cycle: Cycle) -> Tuple[Optional[Cycle], Optional[Cycle]]:
        """
        (previous, next) in the newest-first cycle list: previous is the next
        newer cycle, next the next older one.
        """
        previous_cycle = Cycle.query.filter(
            Cycle.user_id == cycle.user_id,
            Cycle.cycle_number > cycle.cycle_number
        ).order_by(Cycle.cycle_number.asc()).first()

        next_cycle = Cycle.query.filter(
            Cycle.user_id == cycle.user_id,
            Cycle.cycle_number < cycle.cycle_number
        ).order_by(Cycle.cycle_number.desc()).first()

        return previous_cycle, next_cycle

    @staticmethod
    def suggest_next_day_number(cycle: Cycle) -> int:
        if not cycle.days:
            return 1
        return max(day.day_number for day in cycle.days) + 1
