"""
Jinja2 environment for server-rendered pages and HTML exports.
"""
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)


def render_template(name: str, **context) -> str:
    """Render a template from app/templates with context. Returns HTML string."""
    return _env.get_template(name).render(**context)
