"""Template rendering for notification titles, messages and fields.

Templates are Jinja2 text templates evaluated against the extended view of
a batch. Undefined names are errors: a template that references a helper
or field that does not exist fails the whole notification instead of
rendering an empty string.
"""

import logging
from typing import Any, Callable, Dict, Optional

from jinja2 import DictLoader, StrictUndefined, TemplateError, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from .defaults import DEFAULT_TEMPLATES
from .extended import ExtendedData
from .functions import TEMPLATE_FILTERS, TEMPLATE_GLOBALS


logger = logging.getLogger(__name__)


class TemplateRenderError(Exception):
    """Raised when a template cannot be parsed or evaluated."""

    def __init__(self, message: str, template_text: Optional[str] = None):
        self.message = message
        self.template_text = template_text
        super().__init__(self.message)


class TemplateRenderer:
    """Renders notification templates against an extended view.

    The renderer keeps no per-call state and may be shared between
    notifiers and concurrent notify calls.
    """

    def __init__(
        self,
        external_url: str = "",
        templates: Optional[Dict[str, str]] = None,
        functions: Optional[Dict[str, Callable]] = None
    ):
        self.external_url = (external_url or "").rstrip("/")

        named_templates = dict(DEFAULT_TEMPLATES)
        named_templates.update(templates or {})

        self.environment = SandboxedEnvironment(
            loader=DictLoader(named_templates),
            undefined=StrictUndefined,
            autoescape=False,
        )
        self.environment.globals.update(TEMPLATE_GLOBALS)
        self.environment.globals.update(functions or {})
        self.environment.filters.update(TEMPLATE_FILTERS)

    def render(self, template_text: str, data: ExtendedData) -> str:
        """Render a template against the extended view.

        Args:
            template_text: Template source
            data: Extended view of the batch

        Returns:
            Rendered text

        Raises:
            TemplateRenderError: If the template has a syntax error or
                references an undefined function or field
        """
        return self.render_with(template_text, data.template_context())

    def render_with(self, template_text: str, context: Dict[str, Any]) -> str:
        """Render a template against an explicit variable mapping."""
        if not template_text:
            return ""
        try:
            template = self.environment.from_string(template_text)
            return template.render(context)
        except TemplateSyntaxError as e:
            raise TemplateRenderError(
                f"template: line {e.lineno}: {e.message}",
                template_text=template_text
            ) from e
        except TemplateError as e:
            raise TemplateRenderError(f"template: {e}", template_text=template_text) from e
