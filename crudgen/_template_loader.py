"""
Private Jinja2 Template Loader for crudgen

Jinja2 environment used to render the generated JavaScript files.
All template settings are centralized here.

IMPORTANT: This is a private module (prefixed with underscore) and should
only be imported internally by crudgen.
"""

from pathlib import Path
from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).parent / "templates"

# Output is JavaScript, not HTML: autoescape would mangle quotes in SQL strings
jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,
    auto_reload=False,
    undefined=StrictUndefined,  # Fail loudly on undefined variables
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True
)

# Templates get everything through the render context; no globals
jinja_env.globals.clear()


def render_template(template_name: str, **context) -> str:
    """Render a template from TEMPLATES_DIR."""
    return jinja_env.get_template(template_name).render(**context)


__all__ = ['jinja_env', 'TEMPLATES_DIR', 'render_template']
