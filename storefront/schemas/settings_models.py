"""Site settings models: public view, admin view and admin update payload."""
from typing import Dict, List, Optional

from pydantic import Field

from .base import CamelModel


class EmailNotifications(CamelModel):
    enabled: bool = False
    admin_email: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None


class SiteSettingsOut(CamelModel):
    site_name: str
    hero_image_desktop: Optional[str] = None
    hero_image_mobile: Optional[str] = None
    hero_title: str
    hero_subtitle: str
    categories: List[str] = Field(default_factory=list)
    footer_text: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    social_links: Dict[str, str] = Field(default_factory=dict)


class SiteSettingsAdminOut(SiteSettingsOut):
    email_notifications: EmailNotifications


class EmailNotificationsUpdate(CamelModel):
    enabled: Optional[bool] = None
    admin_email: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None


class SiteSettingsUpdate(CamelModel):
    site_name: Optional[str] = None
    hero_image_desktop: Optional[str] = None
    hero_image_mobile: Optional[str] = None
    hero_title: Optional[str] = None
    hero_subtitle: Optional[str] = None
    categories: Optional[List[str]] = None
    footer_text: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    email_notifications: Optional[EmailNotificationsUpdate] = None
