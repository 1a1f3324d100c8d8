#!/usr/bin/env python3
"""
Site settings provider tests.

TEST COVERAGE:
    - Lazy creation of the default record
    - Partial updates, including the e-mail sub-record
    - TTL cache and its invalidation
"""

import unittest
from unittest import mock

from sqlalchemy import func, select

from storefront.data.database import session_scope
from storefront.data.models import SiteSettings
from storefront.schemas.settings_models import EmailNotificationsUpdate, SiteSettingsUpdate
from storefront.services.site_settings import DEFAULT_SETTINGS, SettingsProvider

from helpers import make_test_db


class TestSettingsProvider(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_test_db()
        self.provider = SettingsProvider(self.session_factory, ttl_seconds=0)

    def rows(self):
        with session_scope(self.session_factory) as db:
            return db.scalar(select(func.count()).select_from(SiteSettings))

    def test_defaults_created_once(self):
        settings = self.provider.get()
        self.provider.get()
        self.assertEqual(settings.site_name, DEFAULT_SETTINGS["site_name"])
        self.assertEqual(settings.categories, ["Shirts", "Pants", "Accessories"])
        self.assertFalse(settings.email_notifications.enabled)
        self.assertEqual(settings.email_notifications.smtp_port, 587)
        self.assertEqual(self.rows(), 1)

    def test_partial_update(self):
        updated = self.provider.update(SiteSettingsUpdate(
            site_name="Souk Vintage",
            email_notifications=EmailNotificationsUpdate(enabled=True, admin_email="admin@shop.dz"),
        ))
        self.assertEqual(updated.site_name, "Souk Vintage")
        self.assertEqual(updated.hero_title, DEFAULT_SETTINGS["hero_title"])
        self.assertTrue(updated.email_notifications.enabled)
        self.assertEqual(self.provider.get().email_notifications.admin_email, "admin@shop.dz")

    def test_camel_case_payload(self):
        payload = SiteSettingsUpdate.model_validate({"siteName": "Dar Style", "emailNotifications": {"smtpPort": 465}})
        updated = self.provider.update(payload)
        self.assertEqual((updated.site_name, updated.email_notifications.smtp_port), ("Dar Style", 465))

    def test_ttl_cache_and_invalidation(self):
        provider = SettingsProvider(self.session_factory, ttl_seconds=60)
        provider.get()
        with mock.patch.object(provider, "_load_or_create") as load:
            provider.get()
            load.assert_not_called()
        provider.update(SiteSettingsUpdate(site_name="Fresh"))
        self.assertEqual(provider.get().site_name, "Fresh")


if __name__ == "__main__":
    unittest.main()
