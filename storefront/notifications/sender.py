# File: storefront/notifications/sender.py
import html
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from storefront.core.errors import NotificationError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
_PLACEHOLDER = re.compile(r"{{\s*(\w+)\s*}}")

def render_template(source: str, fields: Dict[str, Any]) -> str:
    """
    Replace ``{{name}}`` placeholders with values from ``fields``.

    Values are HTML-escaped unless the field name ends with ``Html``
    (pre-rendered fragments such as the item rows). Unknown placeholders
    are left in place.
    """
    def _sub(match: re.Match) -> str:
        key = match.group(1)
        if key not in fields:
            return match.group(0)
        value = "" if fields[key] is None else str(fields[key])
        return value if key.endswith("Html") else html.escape(value)

    return _PLACEHOLDER.sub(_sub, source)

class NotificationSender:
    def __init__(self, mailer, templates_dir: Optional[Path] = None):
        self._mailer = mailer
        self._templates_dir = templates_dir or TEMPLATES_DIR

    def load_template(self, template_id: str) -> str:
        path = self._templates_dir / f"{template_id}.html"
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Cannot read email template {path}: {e}")
            raise NotificationError(f"Email template {template_id} unavailable")

    def send(self, to: str, subject: str, template_id: str, fields: Dict[str, Any]) -> None:
        body = render_template(self.load_template(template_id), fields)
        self._mailer.send_html(to, subject, body)
        logger.info(f"Sent {template_id} email to {to}")
