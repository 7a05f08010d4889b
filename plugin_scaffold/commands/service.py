"""
Add an injectable service to a plugin.
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

TEMPLATE_SERVICE_CLASS = "TemplateService"


def normalize_service_name(name: str) -> str:
    """Ensure the class name ends with "Service"."""
    return name if name.endswith("Service") else name + "Service"


def get_service_path(plugin: PluginRef, service_name: str) -> Path:
    """Path of the service file; the name is normalized first."""
    return plugin.get_plugin_dir() / "services" / f"{kebab_case(normalize_service_name(service_name))}.ts"


def validate_service_name(plugin: PluginRef, service_name: str) -> Optional[str]:
    error = validate_class_name(service_name)
    if error:
        return error
    service_path = get_service_path(plugin, service_name)
    if service_path.exists() or plugin.project.get_source_file(service_path) is not None:
        return f"A service file already exists at {service_path}"
    return None


def generate_service(plugin: PluginRef, service_name: str, config: Optional[ScaffoldConfig] = None):
    """
    Create `services/<name>.ts` in the plugin and register it as a provider.

    The service gets the plugin options injected when the plugin declares an
    options token.
    """
    config = config or ScaffoldConfig()
    engine = get_template_engine(config.template_dir)
    project = plugin.project
    service_name = normalize_service_name(service_name)

    service_path = get_service_path(plugin, service_name)
    context = {"options_token": plugin.get_options_token_name()}
    service_file = create_file(project, engine, "service/service.template.ts.j2", context, path=service_path)

    service_class = service_file.get_class(TEMPLATE_SERVICE_CLASS)
    if service_class is None:
        raise TemplateError("Could not find the service class in the service template")
    service_class.rename(service_name)

    plugin.add_provider(service_name)
    add_imports_to_file(plugin.get_source_file(), module_specifier=service_file, named_imports=[service_name])

    project.save()
    logger.info("Generated service %s at %s", service_name, service_path)
    return service_file


def add_service(plugin: PluginRef, console: Optional[Console] = None,
                config: Optional[ScaffoldConfig] = None):
    """Prompt for a service name and add the service to the plugin."""
    console = console or Console()
    service_name = ask_text(
        "What is the name of the new service?",
        default="MyService",
        validate=lambda value: validate_service_name(plugin, value),
        console=console,
    )
    service_file = generate_service(plugin, service_name, config)
    console.print(f"[green]✓[/green] Added service ({service_file.path})")
