"""
Template engine wrapper for scaffold generation.

Provides a simple interface for Jinja2 rendering of the bundled
TypeScript templates, with the naming filters registered.
"""

from typing import Dict, Any, Optional
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    select_autoescape,
)

from .errors import ScaffoldError
from .naming import kebab_case, pascal_case, camel_case, constant_case
from ..logging_config import get_logger

logger = get_logger(__name__)

TEMPLATE_SUFFIX = ".j2"
BUNDLED_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class TemplateError(ScaffoldError):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing template files
        """
        self.template_dir = Path(template_dir) if template_dir else BUNDLED_TEMPLATE_DIR
        if not self.template_dir.is_dir():
            raise TemplateError(f"Template directory not found: {self.template_dir}")
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with naming filters."""
        self._env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            lstrip_blocks=True,
            trim_blocks=True,
        )

        self._env.filters["kebab_case"] = kebab_case
        self._env.filters["pascal_case"] = pascal_case
        self._env.filters["camel_case"] = camel_case
        self._env.filters["constant_case"] = constant_case

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Template path relative to the template directory
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e

        try:
            rendered = template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

        logger.debug("Rendered template %s", template_name)
        return rendered

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return (self.template_dir / template_name).is_file()

    def get_template_path(self, template_name: str) -> Path:
        """Path a rendered template occupies before it is moved, minus the .j2 suffix."""
        path = self.template_dir / template_name
        if path.name.endswith(TEMPLATE_SUFFIX):
            path = path.with_name(path.name[: -len(TEMPLATE_SUFFIX)])
        return path


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine over the given or bundled template directory."""
    return TemplateEngine(template_dir)


# Default template engine instance
_default_engine = None


def get_default_template_engine() -> TemplateEngine:
    """Get the default template engine instance."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TemplateEngine()
    return _default_engine


def get_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Engine over template_dir when given, else the shared bundled engine."""
    if template_dir:
        return create_template_engine(Path(template_dir))
    return get_default_template_engine()
