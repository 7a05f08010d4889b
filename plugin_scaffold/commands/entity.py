"""
Add a TypeORM entity to a plugin.
"""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..core.config import ScaffoldConfig
from ..core.naming import kebab_case, validate_class_name
from ..core.project import add_imports_to_file, create_file
from ..core.templates import TemplateError, get_template_engine
from ..logging_config import get_logger
from ..shared.plugin_ref import PluginRef
from ..shared.prompts import ask_text

logger = get_logger(__name__)

TEMPLATE_ENTITY_CLASS = "TemplateEntity"


def get_entity_path(plugin: PluginRef, entity_name: str) -> Path:
    return plugin.get_plugin_dir() / "entities" / f"{kebab_case(entity_name)}.entity.ts"


def validate_entity_name(plugin: PluginRef, entity_name: str) -> Optional[str]:
    """Error message for a bad or already used entity name, else None."""
    error = validate_class_name(entity_name)
    if error:
        return error
    entity_path = get_entity_path(plugin, entity_name)
    if entity_path.exists() or plugin.project.get_source_file(entity_path) is not None:
        return f"An entity file already exists at {entity_path}"
    return None


def generate_entity(plugin: PluginRef, entity_name: str, config: Optional[ScaffoldConfig] = None):
    """
    Create `entities/<name>.entity.ts` in the plugin and register the entity.

    Returns:
        The new entity source file
    """
    config = config or ScaffoldConfig()
    engine = get_template_engine(config.template_dir)
    project = plugin.project

    entity_path = get_entity_path(plugin, entity_name)
    entity_file = create_file(
        project, engine, "entity/entity.template.ts.j2", {"entity_name": entity_name}, path=entity_path
    )
    entity_class = entity_file.get_class(TEMPLATE_ENTITY_CLASS)
    if entity_class is None:
        raise TemplateError("Could not find the entity class in the entity template")
    entity_class.rename(entity_name)

    plugin.add_entity(entity_name)
    add_imports_to_file(plugin.get_source_file(), module_specifier=entity_file, named_imports=[entity_name])

    project.save()
    return entity_file


def add_entity(plugin: PluginRef, console: Optional[Console] = None,
               config: Optional[ScaffoldConfig] = None):
    """Prompt for an entity name and add the entity to the plugin."""
    console = console or Console()
    entity_name = ask_text(
        "What is the name of the custom entity?",
        validate=lambda value: validate_entity_name(plugin, value),
        console=console,
    )
    entity_file = generate_entity(plugin, entity_name, config)
    console.print(f"[green]✓[/green] Added entity [cyan]{entity_name}[/cyan] ({entity_file.path})")
