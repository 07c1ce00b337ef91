"""
Email template loader and renderer.
Handles Jinja2 templates for transactional emails.
"""

import logging
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from skilllink.config import settings
from skilllink.domain.models.base import utc_now


logger = logging.getLogger(__name__)


def format_minor_units(value, currency: str = "NGN") -> str:
    """Render integer minor units as a major-unit amount, e.g. 150000 -> 1,500.00 NGN."""
    try:
        return f"{int(value) / 100:,.2f} {currency}"
    except (TypeError, ValueError):
        return str(value)


def format_date(value, format: str = "%d %b %Y") -> str:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if isinstance(value, datetime):
        return value.strftime(format)
    return "" if value is None else str(value)


class EmailTemplateLoader:
    """Loads and renders email templates using Jinja2."""

    def __init__(self, templates_dir: Path = None):
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True
        )
        self.env.filters["currency"] = format_minor_units
        self.env.filters["date"] = format_date

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render an email template.
        Falls back to a plain message when the template is missing or broken.
        """
        enhanced_context = {
            **context,
            "current_year": utc_now().year,
            "app_name": settings.api_title.replace(" API", ""),
        }
        try:
            template = self.env.get_template(template_name)
            return template.render(**enhanced_context)
        except TemplateNotFound:
            logger.error(f"Email template {template_name} does not exist")
        except Exception as e:
            logger.error(f"Failed to render template {template_name}: {str(e)}")
        return self._get_fallback_template(enhanced_context)

    @staticmethod
    def _get_fallback_template(context: Dict[str, Any]) -> str:
        heading = context.get("heading", "Notification")
        recipient = context.get("recipient_name") or "there"
        return (
            f"<html><body><p>Hello {recipient},</p>"
            f"<p>{heading}</p>"
            f"<p>Please sign in to {context['app_name']} for the details.</p></body></html>"
        )

    def template_exists(self, template_name: str) -> bool:
        return (self.templates_dir / template_name).exists()

    def list_templates(self) -> list[str]:
        return sorted(path.name for path in self.templates_dir.glob("*.html"))
