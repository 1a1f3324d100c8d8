"""Site settings provider.

The settings record is a singleton row created lazily with the shop defaults
on first read. Callers fetch it once per operation through a provider rather
than holding a module-level copy; an optional short TTL cache sits in front of
the store and is dropped on every update.
"""
import threading
import time
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..app.config import Config
from ..data.database import SessionLocal, session_scope
from ..data.models import SiteSettings
from ..schemas.settings_models import (
    EmailNotifications,
    SiteSettingsAdminOut,
    SiteSettingsUpdate,
)
from ..utils.errors import StoreError
from ..utils.logger import get_logger

logger = get_logger("settings")

DEFAULT_SETTINGS = {
    "site_name": "Vintage Shop",
    "hero_image_desktop": "/placeholder.svg?height=400&width=800",
    "hero_image_mobile": "/placeholder.svg?height=600&width=400",
    "hero_title": "Welcome to our Vintage Shop",
    "hero_subtitle": "Discover timeless fashion pieces",
    "categories": ["Shirts", "Pants", "Accessories"],
    "footer_text": "Find unique vintage clothing",
    "contact_email": "contact@vintageshop.com",
    "contact_phone": "123-456-7890",
    "social_links": {"facebook": "https://facebook.com", "instagram": "https://instagram.com"},
}

_EMAIL_COLUMNS = {
    "enabled": "email_enabled",
    "admin_email": "admin_email",
    "smtp_host": "smtp_host",
    "smtp_port": "smtp_port",
    "smtp_user": "smtp_user",
    "smtp_password": "smtp_password",
}


def to_schema(row: SiteSettings) -> SiteSettingsAdminOut:
    return SiteSettingsAdminOut(
        site_name=row.site_name,
        hero_image_desktop=row.hero_image_desktop,
        hero_image_mobile=row.hero_image_mobile,
        hero_title=row.hero_title,
        hero_subtitle=row.hero_subtitle,
        categories=list(row.categories or []),
        footer_text=row.footer_text,
        contact_email=row.contact_email,
        contact_phone=row.contact_phone,
        social_links=dict(row.social_links or {}),
        email_notifications=EmailNotifications(
            **{field: getattr(row, column) for field, column in _EMAIL_COLUMNS.items()}
        ),
    )


class SettingsProvider:
    def __init__(self, session_factory: Callable = None, ttl_seconds: float = None):
        self.session_factory = session_factory or SessionLocal
        self.ttl_seconds = Config.SETTINGS_CACHE_TTL if ttl_seconds is None else ttl_seconds
        self._cached: Optional[SiteSettingsAdminOut] = None
        self._cached_at = 0.0
        self._lock = threading.Lock()

    def get(self) -> SiteSettingsAdminOut:
        """Current settings, creating the default record on first read."""
        if self.ttl_seconds > 0:
            with self._lock:
                if self._cached is not None and time.monotonic() - self._cached_at < self.ttl_seconds:
                    return self._cached

        try:
            with session_scope(self.session_factory) as db:
                row = self._load_or_create(db)
                settings = to_schema(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Error loading site settings: {e}") from e

        if self.ttl_seconds > 0:
            with self._lock:
                self._cached, self._cached_at = settings, time.monotonic()
        return settings

    def update(self, changes: SiteSettingsUpdate) -> SiteSettingsAdminOut:
        values = changes.model_dump(exclude_unset=True)
        email = values.pop("email_notifications", None) or {}
        try:
            with session_scope(self.session_factory) as db:
                row = self._load_or_create(db)
                for field, value in values.items():
                    if value is not None:
                        setattr(row, field, value)
                for field, value in email.items():
                    if value is not None:
                        setattr(row, _EMAIL_COLUMNS[field], value)
                db.flush()
                settings = to_schema(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Error updating site settings: {e}") from e

        self.invalidate()
        logger.info("Site settings updated (%s)", ", ".join(sorted(list(values) + [f"email.{k}" for k in email])) or "no changes")
        return settings

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None
            self._cached_at = 0.0

    @staticmethod
    def _load_or_create(db) -> SiteSettings:
        row = db.scalars(select(SiteSettings).order_by(SiteSettings.id).limit(1)).first()
        if row is None:
            row = SiteSettings(**DEFAULT_SETTINGS)
            db.add(row)
            db.flush()
            logger.info("Created default site settings")
        return row
