"""Email template rendering (Jinja2)."""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, select_autoescape

_env = Environment(
    loader=PackageLoader("hemo", "templates"),
    autoescape=select_autoescape(["html"]),
)


class EmailRenderer:
    """Renders one named template with the given variables."""

    def __init__(self, template_name: str, env: Environment | None = None) -> None:
        self.template_name = template_name
        self.env = env or _env

    def render(self, variables: dict) -> str:
        return self.env.get_template(self.template_name).render(**variables)
