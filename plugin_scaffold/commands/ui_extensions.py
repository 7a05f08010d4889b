"""
Set up Admin UI extensions for a plugin.
"""

from typing import Optional

from rich.console import Console

from ..core.config import ScaffoldConfig
from ..core.naming import kebab_case
from ..core.project import add_imports_to_file, create_file
from ..core.templates import get_template_engine
from ..logging_config import get_logger
from ..shared.plugin_ref import PluginRef

logger = get_logger(__name__)


def generate_ui_extensions(plugin: PluginRef, config: Optional[ScaffoldConfig] = None) -> bool:
    """
    Add `ui/providers.ts` and a static `ui` extension member to the plugin.

    Returns:
        False if the plugin already had UI extensions, True otherwise
    """
    if plugin.has_ui_extensions():
        logger.info("%s already has UI extensions", plugin.name)
        return False

    config = config or ScaffoldConfig()
    engine = get_template_engine(config.template_dir)
    project = plugin.project
    context = {"plugin_name": plugin.name, "ui_id": kebab_case(plugin.name) + "-ui"}

    create_file(
        project, engine, "ui-extensions/providers.template.ts.j2", context,
        path=plugin.get_plugin_dir() / "ui" / "providers.ts",
    )
    member = engine.render_template("ui-extensions/ui-property.template.ts.j2", context)
    plugin.add_ui_extension(member)

    plugin_file = plugin.get_source_file()
    add_imports_to_file(plugin_file, module_specifier="@vendure/ui-devkit/compiler",
                        named_imports=["AdminUiExtension"])
    add_imports_to_file(plugin_file, module_specifier="path", namespace_import="path")

    project.save()
    return True


def add_ui_extensions(plugin: PluginRef, console: Optional[Console] = None,
                      config: Optional[ScaffoldConfig] = None):
    console = console or Console()
    if generate_ui_extensions(plugin, config):
        console.print(f"[green]✓[/green] Set up Admin UI extensions for [cyan]{plugin.name}[/cyan]")
    else:
        console.print(f"[yellow]⚠️ {plugin.name} already has UI extensions[/yellow]")
