"""
Handle on a generated plugin class.

Feature generators receive a PluginRef so they all edit the same plugin
declaration inside the same project.
"""

from pathlib import Path
from typing import Optional

from ..core.project import ArrayLiteral, ClassDeclaration, ObjectLiteral, SourceFile, SourceProject
from ..logging_config import get_logger

logger = get_logger(__name__)

PLUGIN_DECORATOR = "VendurePlugin"


class PluginRef:
    """Wraps the class declaration of a plugin."""

    def __init__(self, class_declaration: ClassDeclaration):
        self.class_declaration = class_declaration

    def __repr__(self) -> str:
        return f"PluginRef({self.name!r})"

    @property
    def name(self) -> str:
        return self.class_declaration.name

    @property
    def project(self) -> SourceProject:
        return self.class_declaration.project

    def get_source_file(self) -> SourceFile:
        return self.class_declaration.get_source_file()

    def get_plugin_dir(self) -> Path:
        return self.get_source_file().get_directory()

    def get_metadata_options(self) -> ObjectLiteral:
        """The object literal passed to the plugin decorator."""
        return self.class_declaration.get_decorator_object(PLUGIN_DECORATOR)

    def get_options_token_name(self) -> Optional[str]:
        """
        Name of the options injection token declared in the plugin's constants file.

        Returns:
            The constant's name, or None if the plugin has no such constant
        """
        constants_path = self.get_plugin_dir() / "constants.ts"
        constants_file = self.project.get_source_file(constants_path)
        if constants_file is None and constants_path.is_file():
            constants_file = self.project.add_source_file_at_path(constants_path)
        if constants_file is None:
            return None

        for declaration in constants_file.get_variable_declarations():
            initializer = declaration.initializer_text or ""
            if initializer.startswith("Symbol("):
                return declaration.name
        return None

    def _add_to_metadata_array(self, property_name: str, element: str) -> ArrayLiteral:
        array = self.get_metadata_options().get_or_add_array_property(property_name)
        if element not in array.get_elements():
            array.add_element(element)
            logger.info("Added %s to %s.%s", element, self.name, property_name)
        return array

    def add_entity(self, entity_class_name: str):
        """Register an entity class in the plugin metadata."""
        self._add_to_metadata_array("entities", entity_class_name)

    def add_provider(self, provider_class_name: str):
        """Register a provider (service) class in the plugin metadata."""
        self._add_to_metadata_array("providers", provider_class_name)

    def has_ui_extensions(self) -> bool:
        return self.class_declaration.get_static_property("ui") is not None

    def add_ui_extension(self, member_text: str):
        """Add the static `ui` member to the plugin class."""
        self.class_declaration.insert_member(member_text, index=0)
