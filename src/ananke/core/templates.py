"""Jinja2 template rendering.

Templates ship inside the package under ``ananke/templates``:

- ``skill.md.j2``: agent usage guide written by ``ananke init``
- ``pack.md.j2``: markdown rendering of a task context pack
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound


def resolve_template_root(custom_root: Path | None = None) -> Path:
    """Resolve the templates directory path.

    Raises:
        FileNotFoundError: If no valid templates directory found.
    """
    if custom_root is not None and custom_root.is_dir():
        return custom_root.resolve()

    package_templates = Path(__file__).parent.parent / "templates"
    if package_templates.is_dir():
        return package_templates.resolve()

    raise FileNotFoundError("No templates directory found")


@lru_cache(maxsize=4)
def get_template_environment(template_root: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_root)),
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    return env


def render_template(
    name: str,
    context: dict[str, object],
    *,
    template_root: Path | None = None,
) -> str:
    """Render a template by name with the given context.

    Raises:
        FileNotFoundError: If template or templates directory not found.
    """
    root = resolve_template_root(template_root)
    env = get_template_environment(root)
    try:
        template = env.get_template(name)
    except TemplateNotFound as exc:
        raise FileNotFoundError(f"Template {name} not found in {root}") from exc
    return template.render(**context)


__all__ = ["get_template_environment", "render_template", "resolve_template_root"]
