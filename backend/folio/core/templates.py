"""
Template rendering utilities
"""
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

# Templates ship inside the package: backend/folio/templates
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_template(template_name: str, context: dict) -> str:
    """Render template with context"""
    return jinja_env.get_template(template_name).render(**context)
