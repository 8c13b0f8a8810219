"""
Blog Backend: Template Rendering
==================================

What:  Builds the process-wide template set and renders pages from it.
How:   A Jinja2 environment wrapped in FastAPI's Jinja2Templates. The
       environment uses StrictUndefined, so a variable missing from the
       render context is a render failure instead of an empty string.

Render Failure Policy:
    Any jinja2.TemplateError (missing file, syntax error, undefined
    variable) is logged with its detail and re-raised as InternalError.
    The visitor only ever sees the fixed internal error message.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from blog.exceptions import InternalError

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".html"


def build_templates(templates_dir: str) -> Jinja2Templates:
    """Create the template set once; it is read-only afterwards."""
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
    )
    return Jinja2Templates(env=env)


def render_page(
    templates: Jinja2Templates,
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
) -> HTMLResponse:
    """
    Render the template `name` (without suffix) with `context`.

    Rendering happens immediately, inside this call, so failures are raised
    here rather than while the response is being sent.

    Raises:
        InternalError: The template could not be rendered
    """
    template_name = f"{name}{TEMPLATE_SUFFIX}"
    try:
        return templates.TemplateResponse(request, template_name, context or {})
    except TemplateError as e:
        logger.error(
            "Failed to render template %s: %s: %s",
            template_name,
            type(e).__name__,
            str(e),
        )
        raise InternalError() from e


# ── Dependency ────────────────────────────────────────────────────────────
def get_templates(request: Request) -> Jinja2Templates:
    """FastAPI dependency returning the template set the app was built with."""
    return request.app.state.templates
