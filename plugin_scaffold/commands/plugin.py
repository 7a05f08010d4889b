"""
Interactive "create a new plugin" command.

Collects a plugin name and target directory, instantiates the plugin
templates, registers the plugin in the host configuration, then offers a
menu of features to add until the user is done.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..core.config import ScaffoldConfig
from ..core.naming import (
    constant_case,
    normalize_plugin_name,
    pascal_case,
    plugin_file_stem,
    validate_plugin_name,
)
from ..core.project import SourceProject, add_imports_to_file, create_file
from ..core.templates import TemplateError, get_template_engine
from ..logging_config import get_logger
from ..shared.config_ref import ConfigRef
from ..shared.plugin_ref import PluginRef
from ..shared.prompts import PromptCancelled, ask_select, ask_text
from .codegen import add_codegen
from .entity import add_entity
from .service import add_service
from .ui_extensions import add_ui_extensions

logger = get_logger(__name__)

CANCELLED_MESSAGE = "Plugin setup cancelled."
COMPLETE_MESSAGE = "✅ Plugin setup complete!"

TEMPLATE_PLUGIN_CLASS = "TemplatePlugin"
TEMPLATE_OPTIONS_SYMBOL = "TEMPLATE_PLUGIN_OPTIONS"
TEMPLATE_LOGGER_CONTEXT = "loggerCtx"

FEATURE_CHOICES = [
    ("no", "[Finish] No, I'm done!"),
    ("entity", "[Plugin: Entity] Add a new entity to the plugin"),
    ("service", "[Plugin: Service] Add a new service to the plugin"),
    ("uiExtensions", "[Plugin: UI] Set up Admin UI extensions"),
    ("codegen", "[Plugin: Codegen] Set up GraphQL code generation for this plugin"),
]

FeatureGenerator = Callable[[PluginRef, Console, ScaffoldConfig], None]

FEATURE_GENERATORS: Dict[str, FeatureGenerator] = {
    "entity": add_entity,
    "service": add_service,
    "uiExtensions": add_ui_extensions,
    "codegen": add_codegen,
}


@dataclass
class GeneratePluginOptions:
    """User supplied inputs collected before generation."""

    name: str
    plugin_dir: str


@dataclass(frozen=True)
class NewPluginTemplateContext:
    """Generation options plus the identifiers derived from the name."""

    name: str
    plugin_dir: str
    plugin_name: str
    plugin_init_options_name: str

    @classmethod
    def from_options(cls, options: GeneratePluginOptions) -> "NewPluginTemplateContext":
        normalized_name = normalize_plugin_name(options.name)
        return cls(
            name=options.name,
            plugin_dir=options.plugin_dir,
            plugin_name=pascal_case(normalized_name),
            plugin_init_options_name=constant_case(normalized_name) + "_OPTIONS",
        )


def get_plugin_dir_name(name: str, cwd: Optional[Path] = None,
                        config: Optional[ScaffoldConfig] = None) -> Path:
    """
    Default directory for a new plugin.

    Inside a "plugins" directory the plugin goes right there; at a project
    root (manifest present) it goes under src/plugins; otherwise into cwd.
    """
    config = config or ScaffoldConfig()
    cwd = Path(cwd or Path.cwd())
    dir_name = plugin_file_stem(name)

    if cwd.name == config.plugins_dir_name:
        return cwd / dir_name
    if (cwd / config.manifest_file).exists():
        return cwd / "src" / config.plugins_dir_name / dir_name
    return cwd / dir_name


def validate_plugin_dir(path: str) -> Optional[str]:
    if not path:
        return "Please specify a directory."
    if Path(path).exists():
        return f'A directory named "{path}" already exists. Please specify a different directory.'
    return None


def generate_plugin(
    options: GeneratePluginOptions,
    config: Optional[ScaffoldConfig] = None,
    project: Optional[SourceProject] = None,
) -> PluginRef:
    """
    Instantiate the plugin templates into options.plugin_dir.

    All edits happen in memory; files are written by a single save at the end.

    Args:
        options: Plugin name and target directory
        config: Scaffold settings
        project: Project to generate into (a fresh one rooted at cwd by default)

    Returns:
        Reference to the generated plugin class

    Raises:
        TemplateError: If a template lacks an expected declaration
    """
    config = config or ScaffoldConfig()
    context = NewPluginTemplateContext.from_options(options)
    engine = get_template_engine(config.template_dir)
    project = project or SourceProject(encoding=config.encoding)
    render_context = {"compatibility": config.compatibility}

    logger.info("Generating %s in %s", context.plugin_name, options.plugin_dir)

    plugin_file = create_file(project, engine, "plugin/plugin.template.ts.j2", render_context)
    plugin_class = plugin_file.get_class(TEMPLATE_PLUGIN_CLASS)
    if plugin_class is None:
        raise TemplateError("Could not find the plugin class in the generated file")
    plugin_class.rename(context.plugin_name)

    types_file = create_file(project, engine, "plugin/types.template.ts.j2", render_context)

    constants_file = create_file(project, engine, "plugin/constants.template.ts.j2", render_context)
    options_symbol = constants_file.get_variable_declaration(TEMPLATE_OPTIONS_SYMBOL)
    if options_symbol is None:
        raise TemplateError(f"Could not find {TEMPLATE_OPTIONS_SYMBOL} in the constants template")
    options_symbol.rename(context.plugin_init_options_name)
    options_symbol.set_initializer(f"Symbol('{context.plugin_init_options_name}')")

    logger_context = constants_file.get_variable_declaration(TEMPLATE_LOGGER_CONTEXT)
    if logger_context is None:
        raise TemplateError(f"Could not find {TEMPLATE_LOGGER_CONTEXT} in the constants template")
    logger_context.set_initializer(f"'{context.plugin_name}'")

    plugin_dir = Path(options.plugin_dir)
    file_stem = plugin_file_stem(options.name)
    types_file.move(plugin_dir / "types.ts")
    plugin_file.move(plugin_dir / f"{file_stem}.plugin.ts")
    constants_file.move(plugin_dir / "constants.ts")

    project.save()
    return PluginRef(plugin_class)


def register_plugin_in_config(plugin: PluginRef, config: Optional[ScaffoldConfig] = None) -> ConfigRef:
    """Add `<Plugin>.init({})` and its import to the host configuration, then save."""
    config_ref = ConfigRef(plugin.project, config)
    config_ref.add_to_plugins_array(f"{plugin.name}.init({{}})")
    add_imports_to_file(
        config_ref.source_file,
        module_specifier=plugin.get_source_file(),
        named_imports=[plugin.name],
    )
    config_ref.source_file.project.save()
    return config_ref


def _with_spinner(console: Console, description: str, action: Callable):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)
        result = action()
        progress.remove_task(task)
    return result


def create_new_plugin(
    console: Optional[Console] = None,
    config: Optional[ScaffoldConfig] = None,
    cwd: Optional[Path] = None,
) -> int:
    """
    Run the interactive plugin creation flow.

    Returns:
        Exit code (0 on success and on cancellation)
    """
    console = console or Console()
    config = config or ScaffoldConfig()
    cwd = Path(cwd or Path.cwd())

    console.print(Panel.fit("[bold blue]Adding a new Vendure plugin![/bold blue]", border_style="blue"))

    try:
        name = ask_text(
            "What is the name of the plugin?",
            validate=validate_plugin_name,
            console=console,
        )
        plugin_dir = ask_text(
            "Plugin location",
            default=str(get_plugin_dir_name(name, cwd, config)),
            validate=validate_plugin_dir,
            console=console,
        )
    except PromptCancelled:
        logger.info("Plugin setup cancelled before generation")
        console.print(f"[yellow]{CANCELLED_MESSAGE}[/yellow]")
        return 0

    options = GeneratePluginOptions(name=name, plugin_dir=plugin_dir)
    project = SourceProject(root_dir=cwd, encoding=config.encoding)

    plugin = _with_spinner(
        console, "[cyan]Generating plugin scaffold...",
        lambda: generate_plugin(options, config, project),
    )
    console.print("[green]✓[/green] Generated plugin scaffold")

    config_ref = _with_spinner(
        console, "[cyan]Updating VendureConfig...",
        lambda: register_plugin_in_config(plugin, config),
    )
    console.print(f"[green]✓[/green] Updated [cyan]{config_ref.source_file.path}[/cyan]")

    run_feature_menu(plugin, options.name, console, config)

    console.print(f"\n[bold green]{COMPLETE_MESSAGE}[/bold green]")
    return 0


def run_feature_menu(plugin: PluginRef, plugin_label: str, console: Console, config: ScaffoldConfig):
    """Offer features to add until the user finishes or cancels."""
    while True:
        try:
            feature = ask_select(f"Add features to {plugin_label}?", FEATURE_CHOICES, console=console)
        except PromptCancelled:
            return

        if feature == "no":
            return

        logger.info("Adding feature %s to %s", feature, plugin.name)
        try:
            FEATURE_GENERATORS[feature](plugin, console, config)
        except PromptCancelled:
            console.print("[yellow]Cancelled.[/yellow]")
