"""
Email Templates - Subject and HTML body per notification type
"""
from dataclasses import dataclass
from decimal import Decimal
from html import escape
from typing import Optional, Tuple

from app.config import settings
from app.services.price_decision import NotificationType

_STYLE = """
  body { font-family: Arial, sans-serif; color: #333; }
  .container { max-width: 600px; margin: 0 auto; padding: 20px; }
  .header { color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
  .content { background: #f8fafc; padding: 30px; border-radius: 0 0 10px 10px; }
  .price { font-size: 2em; font-weight: bold; margin: 20px 0; }
  .button { color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; display: inline-block; margin: 20px 0; }
  .footer { text-align: center; margin-top: 30px; color: #6b7280; font-size: 0.9em; }
"""


@dataclass
class EmailNotification:
    """Everything a price alert email needs"""
    to: str
    user_name: str
    notification_type: str
    origin: str
    destination: str
    target_price: Decimal
    new_price: Decimal
    old_price: Optional[Decimal] = None
    price_drop: Optional[Decimal] = None
    price_drop_percent: Optional[Decimal] = None
    booking_url: Optional[str] = None

    @property
    def route(self) -> str:
        return f"{self.origin} → {self.destination}"


def _money(value: Optional[Decimal]) -> str:
    return f"€{Decimal(value):.2f}" if value is not None else ""


def _call_to_action(data: EmailNotification, label: str, colour: str) -> str:
    url = data.booking_url or f"{settings.FRONTEND_BASE_URL.rstrip('/')}/dashboard"
    return (
        f'<div style="text-align: center;">'
        f'<a href="{escape(url, quote=True)}" class="button" style="background: {colour}; color: white;">{label} →</a>'
        f"</div>"
    )


def _page(title: str, subtitle: str, colour: str, body: str, footer: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><style>{_STYLE}</style></head>
<body>
  <div class="container">
    <div class="header" style="background: {colour};">
      <h1>{title}</h1>
      <h2>{subtitle}</h2>
    </div>
    <div class="content">
      {body}
      <div class="footer">
        <p>{footer}<br>The Peregrinus Team</p>
        <p><small>You're receiving this because you enabled email notifications.</small></p>
      </div>
    </div>
  </div>
</body>
</html>"""


def _was_line(old_price: Optional[Decimal]) -> str:
    if old_price is None:
        return ""
    return f'<p>Was: <span style="text-decoration: line-through; color: #ef4444;">{_money(old_price)}</span></p>'


def _below_target(data: EmailNotification) -> Tuple[str, str]:
    savings = Decimal(data.target_price) - Decimal(data.new_price)
    body = (
        f"<h3>{data.route}</h3>"
        f'<div class="price" style="color: #059669;">{_money(data.new_price)}</div>'
        f"{_was_line(data.old_price)}"
        f"<p>Your target price: {_money(data.target_price)}</p>"
        f'<p style="color: #059669; font-weight: bold;">✓ You\'re saving {_money(savings)} below your target!</p>'
        f"{_call_to_action(data, 'Book Now', '#f59e0b')}"
    )
    subject = f"🎉 Price Alert! {data.route} is now {_money(data.new_price)} (Below your target!)"
    return subject, _page("🎉 Amazing News!", "Your flight price dropped below target!", "#d97706", body, "Happy travels!")


def _generic_drop(data: EmailNotification) -> Tuple[str, str]:
    percent = Decimal(data.price_drop_percent or 0)
    body = (
        f"<h3>{data.route}</h3>"
        f'<div class="price" style="color: #059669;">Now: {_money(data.new_price)}</div>'
        f"{_was_line(data.old_price)}"
        f'<p style="color: #059669; font-weight: bold;">You\'re saving {percent:.1f}%!</p>'
        f"<p>Your target price: {_money(data.target_price)}</p>"
        f"{_call_to_action(data, 'Book Now', '#10b981')}"
    )
    subject = f"📉 Price Drop! {data.route} decreased by {percent:.1f}%"
    return subject, _page("📉 Price Drop Alert!", "Great time to book your flight", "#059669", body, "Happy travels!")


def _rise_after_drop(data: EmailNotification) -> Tuple[str, str]:
    body = (
        f"<h3>{data.route}</h3>"
        f'<div class="price" style="color: #dc2626;">Now: {_money(data.new_price)}</div>'
        f"{_was_line(data.old_price)}"
        f"<p>Your target price: {_money(data.target_price)}</p>"
        f"<p>The deal you were watching has gone up. Prices often move again, so we'll keep watching.</p>"
        f"{_call_to_action(data, 'View Flight', '#ef4444')}"
    )
    subject = f"📈 Price Increase Alert - {data.route} rose to {_money(data.new_price)}"
    return subject, _page("📈 Price Went Up", "Your tracked flight got more expensive", "#dc2626", body, "We're monitoring this flight for you!")


def _generic(data: EmailNotification) -> Tuple[str, str]:
    body = (
        f"<h3>{data.route}</h3>"
        f'<div class="price">Current Price: {_money(data.new_price)}</div>'
        f"{_call_to_action(data, 'View Flight', '#2563eb')}"
    )
    subject = f"Flight Price Update - {data.route}"
    return subject, _page("Flight Price Update", "", "#2563eb", body, "We're monitoring this flight for you!")


_RENDERERS = {
    NotificationType.BELOW_TARGET.value: _below_target,
    NotificationType.GENERIC_DROP.value: _generic_drop,
    NotificationType.RISE_AFTER_DROP.value: _rise_after_drop,
}


def render_email(data: EmailNotification) -> Tuple[str, str]:
    """Return (subject, html) for the notification type"""
    renderer = _RENDERERS.get(data.notification_type, _generic)
    subject, html = renderer(data)
    greeting = f"<p>Hi {escape(data.user_name or 'Traveler')},</p>"
    return subject, html.replace('<div class="content">', f'<div class="content">\n      {greeting}', 1)
