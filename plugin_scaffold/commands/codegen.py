"""
Set up GraphQL code generation for a plugin.

Adds an entry to the `generates` map of the project's codegen.ts (creating
the file from a template if needed) so that types for the plugin's GraphQL
documents are written to `<plugin>/gql/generated.ts`.
"""

import os
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..core.config import ScaffoldConfig
from ..core.errors import ScaffoldError
from ..core.project import SourceFile, create_file
from ..core.templates import get_template_engine
from ..logging_config import get_logger
from ..shared.config_ref import find_project_root
from ..shared.plugin_ref import PluginRef

logger = get_logger(__name__)

CODEGEN_CONFIG_VARIABLE = "config"


def _posix_relative(path: Path, root: Path) -> str:
    return os.path.relpath(str(path), str(root)).replace(os.sep, "/")


def get_codegen_file(plugin: PluginRef, config: ScaffoldConfig) -> SourceFile:
    """Load the project's codegen file, or create it from the template."""
    root = find_project_root(plugin.get_plugin_dir(), config.manifest_file) or plugin.project.root_dir
    codegen_path = Path(root) / config.codegen_file_name

    codegen_file = plugin.project.get_source_file(codegen_path)
    if codegen_file is not None:
        return codegen_file
    if codegen_path.is_file():
        return plugin.project.add_source_file_at_path(codegen_path)

    engine = get_template_engine(config.template_dir)
    logger.info("Creating %s", codegen_path)
    return create_file(plugin.project, engine, "codegen/codegen.template.ts.j2", {}, path=codegen_path)


def generate_codegen_config(plugin: PluginRef, config: Optional[ScaffoldConfig] = None) -> Optional[str]:
    """
    Add the plugin's entry to the codegen config and save.

    Returns:
        The output path key that was added, or None if it was already present
    """
    config = config or ScaffoldConfig()
    codegen_file = get_codegen_file(plugin, config)
    root = codegen_file.get_directory()
    plugin_dir = plugin.get_plugin_dir().resolve()

    output_key = _posix_relative(plugin_dir / "gql" / "generated.ts", root.resolve())
    documents_glob = _posix_relative(plugin_dir, root.resolve()) + "/**/*.ts"

    declaration = codegen_file.get_variable_declaration(CODEGEN_CONFIG_VARIABLE)
    if declaration is None:
        raise ScaffoldError(f"Could not find the codegen config declaration in {codegen_file.path}")
    generates = declaration.get_object_literal().get_object_property("generates")
    if generates is None:
        raise ScaffoldError(f"Could not find a generates object in {codegen_file.path}")

    if generates.has_property(output_key):
        logger.info("Codegen entry %s already exists", output_key)
        return None

    engine = get_template_engine(config.template_dir)
    entry = engine.render_template(
        "codegen/generates-entry.template.ts.j2",
        {"schema_url": config.codegen_schema_url, "documents_glob": documents_glob},
    ).strip()
    generates.add_property(output_key, entry, quote_key=True)

    plugin.project.save()
    return output_key


def add_codegen(plugin: PluginRef, console: Optional[Console] = None,
                config: Optional[ScaffoldConfig] = None):
    console = console or Console()
    output_key = generate_codegen_config(plugin, config)
    if output_key is None:
        console.print(f"[yellow]⚠️ Code generation is already set up for {plugin.name}[/yellow]")
    else:
        console.print(f"[green]✓[/green] Added codegen output [cyan]{output_key}[/cyan]")
