"""
User settings operations (temperature display preference).
"""

import logging

from flask import current_app

from bbt_tracker import db
from bbt_tracker.models.user_settings import UserSettings
from bbt_tracker.services.cycle_constants import FAHRENHEIT, TEMPERATURE_UNITS

logger = logging.getLogger(__name__)


class SettingsService:

    @staticmethod
    def default_temperature_unit() -> str:
        unit = current_app.config.get('DEFAULT_TEMPERATURE_UNIT', FAHRENHEIT)
        return unit if unit in TEMPERATURE_UNITS else FAHRENHEIT

    @staticmethod
    def get_user_settings(user_id: int) -> UserSettings:
        """Return the user's settings, creating defaults on first access."""
        settings = UserSettings.query.filter_by(user_id=user_id).first()
        if settings:
            return settings

        try:
            settings = UserSettings(
                user_id=user_id,
                temperature_unit=SettingsService.default_temperature_unit()
            )
            db.session.add(settings)
            db.session.commit()
            logger.info("Created default settings for user %s", user_id)
            return settings
        except Exception:
            db.session.rollback()
            raise

    @staticmethod
    def get_temperature_unit(user_id: int) -> str:
        return SettingsService.get_user_settings(user_id).temperature_unit

    @staticmethod
    def update_temperature_preference(user_id: int, temperature_unit: str) -> UserSettings:
        if temperature_unit not in TEMPERATURE_UNITS:
            raise ValueError("temperature_unit must be FAHRENHEIT or CELSIUS")

        try:
            settings = UserSettings.query.filter_by(user_id=user_id).first()
            if not settings:
                settings = UserSettings(user_id=user_id, temperature_unit=temperature_unit)
                db.session.add(settings)
            else:
                settings.temperature_unit = temperature_unit

            db.session.commit()
            logger.info("User %s switched temperature unit to %s", user_id, temperature_unit)
            return settings
        except Exception:
            db.session.rollback()
            raise
