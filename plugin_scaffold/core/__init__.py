"""
Core scaffolding components.

Naming, templates, configuration and the in-memory source project model
used by every command.
"""

from .errors import ScaffoldError, SourceError
from .naming import (
    NamingCase,
    convert_case,
    kebab_case,
    pascal_case,
    camel_case,
    constant_case,
    normalize_plugin_name,
    strip_plugin_suffix,
    plugin_file_stem,
)
from .config import ScaffoldConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine
from .project import (
    SourceProject,
    SourceFile,
    ClassDeclaration,
    VariableDeclaration,
    ObjectLiteral,
    ArrayLiteral,
    create_file,
    add_imports_to_file,
)

__all__ = [
    # Errors
    "ScaffoldError",
    "SourceError",
    # Naming utilities
    "NamingCase",
    "convert_case",
    "kebab_case",
    "pascal_case",
    "camel_case",
    "constant_case",
    "normalize_plugin_name",
    "strip_plugin_suffix",
    "plugin_file_stem",
    # Configuration system
    "ScaffoldConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
    # Source project model
    "SourceProject",
    "SourceFile",
    "ClassDeclaration",
    "VariableDeclaration",
    "ObjectLiteral",
    "ArrayLiteral",
    "create_file",
    "add_imports_to_file",
]
