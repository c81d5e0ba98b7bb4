"""Action text personalization: {{key}} placeholders rendered with Jinja.

Templates are authored by agency staff, so they render in a sandbox.
Unknown keys (and attributes of unknown keys) render as the empty string.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from jinja2 import ChainableUndefined, Template
from jinja2.sandbox import SandboxedEnvironment

_DATETIME_FORMAT = "%Y-%m-%d %H:%M"


def _finalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime(_DATETIME_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    return value


class TemplateRenderer:
    """Renders action titles, messages, subjects and bodies (implements ITemplateRenderer)."""

    def __init__(self, max_cached: int = 256) -> None:
        self._env = SandboxedEnvironment(
            autoescape=False,
            undefined=ChainableUndefined,
            finalize=_finalize,
            keep_trailing_newline=True,
        )
        self._compiled: dict[str, Template] = {}
        self._max_cached = max_cached

    def _compile(self, template: str) -> Template:
        compiled = self._compiled.get(template)
        if compiled is None:
            compiled = self._env.from_string(template)
            if len(self._compiled) >= self._max_cached:
                self._compiled.clear()
            self._compiled[template] = compiled
        return compiled

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Render template with context. Raises jinja2.TemplateError on malformed syntax."""
        if not template or "{" not in template:
            return template or ""
        return self._compile(template).render(**dict(context))
