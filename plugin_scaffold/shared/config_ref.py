"""
Handle on the host application's configuration file.

The configuration file is the one declaring a variable typed with the
configured type name (VendureConfig by default), e.g.

    export const config: VendureConfig = {
        ...
        plugins: [
            ...
        ],
    };
"""

from pathlib import Path
from typing import List, Optional

from ..core.config import ScaffoldConfig
from ..core.errors import ScaffoldError
from ..core.project import ArrayLiteral, ObjectLiteral, SourceFile, SourceProject, VariableDeclaration
from ..logging_config import get_logger

logger = get_logger(__name__)


def find_project_root(start_dir: Path, manifest_file: str = "package.json") -> Optional[Path]:
    """Walk up from start_dir to the nearest directory holding the manifest."""
    start_dir = Path(start_dir).resolve()
    for directory in [start_dir, *start_dir.parents]:
        if (directory / manifest_file).is_file():
            return directory
    return None


def find_config_candidates(start_dir: Path, config: ScaffoldConfig) -> List[Path]:
    """
    Files that may hold the configuration, nearest first.

    Each directory from start_dir up to the project root is checked, both
    directly and in its src/ subdirectory.
    """
    start_dir = Path(start_dir).resolve()
    root = find_project_root(start_dir, config.manifest_file)
    directories = [start_dir]
    if root is not None and root != start_dir:
        for parent in start_dir.parents:
            directories.append(parent)
            if parent == root:
                break

    candidates = []
    for directory in directories:
        for search_dir in (directory / "src", directory):
            if not search_dir.is_dir():
                continue
            for path in sorted(search_dir.iterdir()):
                if path.is_file() and path.name.endswith(config.config_file_name) and path not in candidates:
                    candidates.append(path)
    return candidates


class ConfigRef:
    """Wraps the configuration declaration of the host application."""

    def __init__(self, project: SourceProject, config: Optional[ScaffoldConfig] = None,
                 config_file_path: Optional[Path] = None):
        self.project = project
        self.config = config or ScaffoldConfig()
        self.source_file = self._find_source_file(config_file_path)
        logger.info("Using configuration file %s", self.source_file.path)

    def _find_source_file(self, config_file_path: Optional[Path]) -> SourceFile:
        if config_file_path is not None:
            source_file = self.project.add_source_file_at_path(config_file_path)
            if self._get_declaration(source_file) is None:
                raise ScaffoldError(
                    f"Could not find the {self.config.config_type_name} declaration in {config_file_path}"
                )
            return source_file

        for source_file in self.project.get_source_files():
            if self._get_declaration(source_file) is not None:
                return source_file

        for path in find_config_candidates(self.project.root_dir, self.config):
            source_file = self.project.add_source_file_at_path(path)
            if self._get_declaration(source_file) is not None:
                return source_file

        raise ScaffoldError(
            f"Could not find the {self.config.config_type_name} declaration in your project."
        )

    def _get_declaration(self, source_file: SourceFile) -> Optional[VariableDeclaration]:
        for declaration in source_file.get_variable_declarations():
            if declaration.type_text == self.config.config_type_name:
                return declaration
        return None

    def get_config_variable_name(self) -> str:
        return self._get_declaration(self.source_file).name

    def get_config_object(self) -> ObjectLiteral:
        return self._get_declaration(self.source_file).get_object_literal()

    def get_plugins_array(self) -> ArrayLiteral:
        plugins = self.get_config_object().get_array_property("plugins")
        if plugins is None:
            raise ScaffoldError(
                f"Could not find a plugins array in {self.source_file.path}"
            )
        return plugins

    def add_to_plugins_array(self, text: str):
        """Append an expression to the plugins array."""
        self.get_plugins_array().add_element(text)
        logger.info("Added %s to the plugins array", text)
