"""
Jinja2 template renderer for notification emails.

Templates live in ``studyhub/templates`` as ``<template>.html.j2``.
"""
import re
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from ...core.exceptions import PermanentJobError
from ...core.logging_config import get_logger
from .base import RenderedEmail

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates"


class JinjaTemplateRenderer:
    """Renders HTML templates and derives a plain-text alternative."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = Path(template_dir or TEMPLATE_DIR)
        logger.debug(f"Initializing Jinja2 renderer with template directory: {self.template_dir}")
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml", "j2"]),
            enable_async=True,
        )

    async def render(self, template_id: str, variables: Dict[str, Any]) -> RenderedEmail:
        """
        Raises:
            PermanentJobError: If the template is missing or fails to render
        """
        template_filename = f"{template_id}.html.j2"
        try:
            template = self.env.get_template(template_filename)
            html_content = await template.render_async(**variables)
        except TemplateNotFound as e:
            logger.error(f"Template not found: {template_filename}")
            raise PermanentJobError(f"Template not found: {template_id}") from e

        return RenderedEmail(html_content=html_content, text_content=self.html_to_text(html_content))

    def template_exists(self, template_id: str) -> bool:
        return (self.template_dir / f"{template_id}.html.j2").exists()

    @staticmethod
    def html_to_text(html: str) -> str:
        text = re.sub(r"<(br|/p|/h[1-6]|/li)\s*/?>", "\n", html, flags=re.IGNORECASE)
        text = re.sub(r"<[^>]+>", "", text)
        text = (
            text.replace("&nbsp;", " ")
            .replace("&lt;", "<")
            .replace("&gt;", ">")
            .replace("&quot;", '"')
            .replace("&#39;", "'")
            .replace("&amp;", "&")
        )
        lines = [line.strip() for line in text.splitlines()]
        return "\n".join(line for line in lines if line)
