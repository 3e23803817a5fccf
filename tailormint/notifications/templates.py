"""
Rendu des emails transactionnels (Jinja2).

build_email(type, recipient_name, ...) -> (subject, html, text)
- Un gabarit HTML par type sous notifications/emails/
- Variante tailleur si extra["audience"] == "tailor" ou extra["recipientRole"] == "TAILOR"
- Préfixe "[ROLE] " du sujet dès qu'un rôle est donné
- Texte brut dérivé du HTML
"""
import html as _html
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tailormint import config

ORDER_TYPES = (
    "order_placed",
    "order_pending",
    "order_accepted",
    "order_rejected",
    "order_in_progress",
    "order_ready_to_ship",
    "order_shipped",
    "order_delivered",
    "order_cancelled",
)
ACCOUNT_TYPES = ("tailor_approved", "design_approved", "design_rejected")
NOTIFICATION_TYPES = ORDER_TYPES + ACCOUNT_TYPES

_SUBJECTS = {
    "order_pending": "Order #{order_id} Status: Pending",
    "order_accepted": "Order #{order_id} Has Been Accepted",
    "order_rejected": "Order #{order_id} Update: Action Required",
    "order_in_progress": "Production Started for Order #{order_id}",
    "order_ready_to_ship": "Order #{order_id} Ready for Shipping",
    "order_shipped": "Order #{order_id} Has Been Shipped",
    "order_delivered": "Order #{order_id} Delivered - We'd Love Your Feedback!",
    "order_cancelled": "Order #{order_id} Has Been Cancelled",
    "tailor_approved": "Welcome to Tailor Mint - Your Account is Approved",
    "design_approved": "Design Approved: {design_title}",
    "design_rejected": "Design Update Required: {design_title}",
}


def _short_date(value: Any) -> str:
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return f"{dt.month}/{dt.day}/{dt.year}"


_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["short_date"] = _short_date


def html_to_text(content: str) -> str:
    text = re.sub(r"<(style|script)[^>]*>.*?</\1>", "", content, flags=re.S | re.I)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.I)
    text = re.sub(r"<[^>]+>", "", text)
    text = _html.unescape(text).replace("\xa0", " ")
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def _subject(type_: str, order_id: Optional[str], extra: Dict[str, Any], is_tailor: bool) -> str:
    role = extra.get("recipientRole")
    prefix = f"[{role}] " if role else ""
    if type_ == "order_placed":
        if is_tailor:
            return f"{prefix}New Order Received: #{order_id}"
        return f"{prefix}Order #{order_id} Placed Successfully"
    if type_ in _SUBJECTS:
        subject = _SUBJECTS[type_].format(
            order_id=order_id,
            design_title=extra.get("designTitle") or "Your design",
        )
        return f"{prefix}{subject}"
    if is_tailor:
        return f"{prefix}Action Required: Order #{order_id} Update"
    return f"{prefix}Update on Your Tailor Mint Order #{order_id}"


def build_email(
    type_: str,
    recipient_name: str,
    order_id: Optional[str] = None,
    reference_id: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Tuple[str, str, str]:
    extra = dict(extra or {})
    is_tailor = extra.get("audience") == "tailor" or extra.get("recipientRole") == "TAILOR"
    template_name = f"emails/{type_}.html" if type_ in NOTIFICATION_TYPES else "emails/order_update.html"
    content = _env.get_template(template_name).render(
        recipient_name=recipient_name,
        order_id=order_id,
        reference_id=reference_id,
        extra=extra,
        is_tailor=is_tailor,
        order_url=f"{config.APP_URL}/customer/orders/{order_id}" if order_id else "",
        tailor_orders_url=f"{config.APP_URL}/tailor/orders",
        tailor_designs_url=f"{config.APP_URL}/tailor/designs",
    )
    return _subject(type_, order_id, extra, is_tailor), content, html_to_text(content)
