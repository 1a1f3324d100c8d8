"""New-order e-mail notifications.

Best effort and at most once: the gateway reads the site settings on every
call, opens one SMTP session per message and raises UpstreamProviderError on
transport failure. The order service decides what to do with that error (it
logs and drops it).
"""
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText

from ..schemas.order_models import OrderOut
from ..schemas.settings_models import EmailNotifications, SiteSettingsAdminOut
from ..utils.errors import UpstreamProviderError
from ..utils.logger import get_logger
from .site_settings import SettingsProvider

logger = get_logger("notifications")

SMTP_TIMEOUT = 15


@dataclass
class MailMessage:
    sender: str
    to: str
    subject: str
    body: str


class SmtpTransport:
    """Sends one message per SMTP session; no pooling."""

    def send_mail(self, message: MailMessage, config: EmailNotifications) -> None:
        mime = MIMEText(message.body, "plain", "utf-8")
        mime["From"] = message.sender
        mime["To"] = message.to
        mime["Subject"] = message.subject

        smtp_cls = smtplib.SMTP_SSL if config.smtp_port == 465 else smtplib.SMTP
        with smtp_cls(config.smtp_host, config.smtp_port, timeout=SMTP_TIMEOUT) as server:
            if smtp_cls is smtplib.SMTP:
                server.starttls()
            if config.smtp_user:
                server.login(config.smtp_user, config.smtp_password or "")
            server.sendmail(message.sender, [message.to], mime.as_string())


def format_dzd(amount: float) -> str:
    return f"DZD {amount:.2f}"


def build_order_email(order: OrderOut, settings: SiteSettingsAdminOut) -> MailMessage:
    address = order.shipping_address
    delivery = "Office Delivery" if address.delivery_type == "office" else "Home Delivery"

    item_lines = []
    for item in order.line_items:
        name = item.name or f"Product #{item.product_id}"
        subtotal = (item.unit_price or 0) * item.quantity
        item_lines.append(f"- {name} (Qty: {item.quantity}) - {format_dzd(subtotal)}")

    lines = [
        "New Order Received!",
        "",
        f"Order ID: {order.id}",
        f"Customer: {order.customer_email or order.user_id}",
        f"Total Amount: {format_dzd(order.total_amount)}",
        "",
        "Delivery Information:",
        f"- Type: {delivery}",
        f"- Phone: {address.phone_number}",
        f"- Location: {address.wilaya}, {address.daira}",
    ]
    if address.home_address:
        lines.append(f"- Address: {address.home_address}")
    if address.notes:
        lines.append(f"- Notes: {address.notes}")
    lines += ["", "Items Ordered:", *item_lines, "", "Please log in to your admin panel to manage this order."]

    email = settings.email_notifications
    return MailMessage(
        sender=email.smtp_user or email.admin_email,
        to=email.admin_email,
        subject=f"New Order #{order.id} - {settings.site_name}",
        body="\n".join(lines),
    )


class NotificationGateway:
    def __init__(self, settings_provider: SettingsProvider = None, transport: SmtpTransport = None):
        self.settings_provider = settings_provider or SettingsProvider()
        self.transport = transport or SmtpTransport()

    def notify_new_order(self, order: OrderOut) -> bool:
        """Send the admin summary for `order`; False when notifications are off."""
        settings = self.settings_provider.get()
        email = settings.email_notifications
        if not email.enabled:
            logger.info("Email notifications not configured or disabled")
            return False
        if not (email.admin_email or "").strip():
            logger.info("Admin email not configured")
            return False

        message = build_order_email(order, settings)
        try:
            self.transport.send_mail(message, email)
        except (smtplib.SMTPException, OSError) as e:
            raise UpstreamProviderError(f"Error sending order notification email: {e}", provider="smtp") from e

        logger.info("Order notification email sent for order %s", order.id)
        return True
