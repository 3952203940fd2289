"""
Settings service.

Per-user preferences, upserted on save and linked to the user's couple.
"""
from datetime import datetime

from models import Settings, DEFAULT_THEME, DEFAULT_CURRENCY, DEFAULT_NOTIFICATIONS
from services.lookups import find_active_couple
from services.errors import InvalidInput

THEMES = ('system', 'light', 'dark')


class SettingsService:
    """Service for reading and saving user settings."""

    def __init__(self, store):
        self.store = store

    def get_settings(self, user_id):
        """
        Get a user's settings.

        Returns:
            dict: Stored settings, or the defaults when none were ever saved
        """
        settings = self.store.find_one(Settings, user_id=user_id)
        if settings is None:
            return Settings.defaults()
        return settings.to_dict()

    def update_settings(self, user_id, data):
        """
        Save a user's settings (creating them on first save).

        Blank theme or currency fall back to the defaults. The active couple,
        if any, is linked on every save.

        Args:
            user_id (str): The user ID
            data (dict): theme, currency, notifications

        Returns:
            Settings: The saved record

        Raises:
            InvalidInput: If a value is malformed
        """
        theme = (data.get('theme') or '').strip().lower() or DEFAULT_THEME
        if theme not in THEMES:
            raise InvalidInput(f'Theme must be one of: {", ".join(THEMES)}')

        currency = (data.get('currency') or '').strip().upper() or DEFAULT_CURRENCY
        if len(currency) != 3 or not currency.isalpha():
            raise InvalidInput('Currency must be a 3-letter code')

        notifications = data.get('notifications', DEFAULT_NOTIFICATIONS)
        if not isinstance(notifications, bool):
            raise InvalidInput('Notifications must be true or false')

        values = {
            'theme': theme,
            'currency': currency,
            'notifications': notifications,
        }

        couple = find_active_couple(self.store, user_id)
        if couple:
            values['couple_id'] = couple.id

        self.store.update_one(
            Settings, values,
            upsert=True,
            on_insert={'created_at': datetime.utcnow()},
            user_id=user_id,
        )
        return self.store.find_one(Settings, user_id=user_id)

    def link_couple(self, user_id, couple_id):
        """Point a user's settings at a couple without touching preferences.

        Defaults are written only when the settings record is created here.
        """
        self.store.update_one(
            Settings, {'couple_id': couple_id},
            upsert=True,
            on_insert={
                'created_at': datetime.utcnow(),
                'theme': DEFAULT_THEME,
                'currency': DEFAULT_CURRENCY,
                'notifications': DEFAULT_NOTIFICATIONS,
            },
            user_id=user_id,
        )

    def unlink_couple(self, couple_id):
        """Clear the couple link from every settings record that holds it."""
        self.store.update_many(Settings, {'couple_id': None}, couple_id=couple_id)
