"""
templating/renderer.py

Populates a .docx report template with a report's data context.

Merge fields use Jinja syntax inside the document body, e.g.
``{{ reportType }}``, ``{{ summary.totalAmount }}`` or a
``{%tr for row in data %}`` table row.  Undefined names are errors: a
template that references a field the context does not provide fails with
TemplateRenderError instead of rendering a blank.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

from docx.opc.exceptions import PackageNotFoundError
from docxtpl import DocxTemplate
from jinja2 import Environment, StrictUndefined, TemplateError

from reports.errors import TemplateRenderError
from templating.types import RenderContext

logger = logging.getLogger(__name__)

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def build_jinja_environment() -> Environment:
    """Jinja environment shared by every render; undefined names raise."""
    return Environment(undefined=StrictUndefined, autoescape=True)


class TemplateRenderer:
    """
    Renders docx templates into in-memory documents.

    Nothing is written to disk; the populated document is returned as bytes.
    """

    def __init__(self, jinja_env: Environment | None = None) -> None:
        self._jinja_env = jinja_env or build_jinja_environment()

    def render(self, template: bytes | str | Path, context: RenderContext) -> bytes:
        """
        Merge *context* into *template* and return the populated .docx bytes.

        Parameters
        ----------
        template: Raw template bytes or a path to the template file.
        context:  Report data exposed to the template's merge fields.

        Raises
        ------
        TemplateRenderError: When the template is not a valid .docx document,
            references fields absent from the context, or fails to render.
        """
        source = io.BytesIO(template) if isinstance(template, bytes) else str(template)
        template_data = context.to_template_data()
        document = DocxTemplate(source)

        try:
            declared = document.get_undeclared_template_variables(jinja_env=self._jinja_env)
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
            raise TemplateRenderError(
                f"Template '{context.template_name}' is not a valid .docx document.",
                report_type=context.report_type,
            ) from exc
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Template '{context.template_name}' has invalid merge-field syntax: {exc}",
                report_type=context.report_type,
            ) from exc

        missing = sorted(set(declared) - set(template_data))
        if missing:
            raise TemplateRenderError(
                f"Template '{context.template_name}' references unknown fields: {', '.join(missing)}",
                report_type=context.report_type,
                missing_fields=missing,
            )

        try:
            document.render(template_data, jinja_env=self._jinja_env, autoescape=True)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Error rendering template '{context.template_name}': {exc}",
                report_type=context.report_type,
            ) from exc

        buffer = io.BytesIO()
        document.save(buffer)
        rendered = buffer.getvalue()
        logger.debug(
            "Rendered template %s for %s (%d rows, %d bytes)",
            context.template_name,
            context.report_type,
            len(template_data["data"]),
            len(rendered),
        )
        return rendered
