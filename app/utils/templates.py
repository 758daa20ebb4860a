from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """
    Render an HTML template from app/templates with the given context.

    Args:
        template_name: Name of the template file (e.g., 'button.html')
        context: Dictionary of variables to pass to the template

    Returns:
        Rendered HTML string
    """
    template = env.get_template(template_name)
    return template.render(**context)
