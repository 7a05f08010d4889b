"""
In-memory source project model.

Holds a set of TypeScript source files, supports locating and editing
declarations inside them, moving files (rewriting relative imports that
point at them), and persisting every pending change in one save().

Nothing touches the disk until SourceProject.save() is called.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from .errors import SourceError
from .source import (
    ImportDeclaration,
    find_closing,
    find_statement_end,
    line_indent,
    mask_source,
    parse_imports,
    split_top_level,
)
from .templates import TemplateEngine, TemplateError
from ..logging_config import get_logger

logger = get_logger(__name__)

SOURCE_EXTENSIONS = (".ts", ".tsx", ".d.ts")
INDENT = "    "


def _strip_extension(path: Union[str, Path]) -> str:
    path = str(path)
    for extension in sorted(SOURCE_EXTENSIONS, key=len, reverse=True):
        if path.endswith(extension):
            return path[: -len(extension)]
    return path


def _normalize(path: Union[str, Path]) -> str:
    return os.path.abspath(str(path))


def relative_module_specifier(from_dir: Path, target: Union[str, Path]) -> str:
    """Module specifier for importing target (a path) from a file in from_dir."""
    relative = os.path.relpath(_strip_extension(target), str(from_dir))
    relative = relative.replace(os.sep, "/")
    if not relative.startswith("."):
        relative = "./" + relative
    return relative


class SourceFile:
    """A single source file held in a SourceProject."""

    def __init__(self, project: "SourceProject", path: Path, text: str, on_disk: bool = False):
        self.project = project
        self.path = Path(path)
        self._text = text
        self._saved_text: Optional[str] = text if on_disk else None
        self._saved_path: Optional[Path] = self.path if on_disk else None

    def __repr__(self) -> str:
        return f"SourceFile({str(self.path)!r})"

    @property
    def text(self) -> str:
        return self._text

    @property
    def masked(self) -> str:
        return mask_source(self._text)

    def is_modified(self) -> bool:
        """True if the file differs from what is on disk."""
        return self._text != self._saved_text or self.path != self._saved_path

    def get_directory(self) -> Path:
        return self.path.parent

    def get_module_path(self) -> str:
        """Normalized path without the source extension, as imports resolve it."""
        return _normalize(_strip_extension(self.path))

    def replace_range(self, start: int, end: int, new_text: str):
        self._text = self._text[:start] + new_text + self._text[end:]

    def insert_text(self, offset: int, new_text: str):
        self.replace_range(offset, offset, new_text)

    # Declarations

    def get_class(self, name: str) -> Optional["ClassDeclaration"]:
        """Locate a class declaration by name."""
        declaration = ClassDeclaration(self, name)
        return declaration if declaration.exists() else None

    def get_variable_declaration(self, name: str) -> Optional["VariableDeclaration"]:
        """Locate a `const`/`let`/`var` declaration by name."""
        declaration = VariableDeclaration(self, name)
        return declaration if declaration.exists() else None

    def get_variable_declarations(self) -> List["VariableDeclaration"]:
        pattern = re.compile(r"\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)")
        return [VariableDeclaration(self, m.group(1)) for m in pattern.finditer(self.masked)]

    # Identifiers

    def rename_identifier(self, old_name: str, new_name: str) -> int:
        """
        Rename every code occurrence of an identifier in this file.

        Occurrences inside comments, strings, and property accesses such as
        `foo.old_name` are left alone.

        Returns:
            Number of occurrences renamed
        """
        pattern = re.compile(r"(?<![\w$.])" + re.escape(old_name) + r"(?![\w$])")
        matches = list(pattern.finditer(self.masked))
        for match in reversed(matches):
            self.replace_range(match.start(), match.end(), new_name)
        return len(matches)

    # Imports

    def get_import_declarations(self) -> List[ImportDeclaration]:
        return parse_imports(self._text, self.masked)

    def resolve_import(self, declaration: ImportDeclaration) -> Optional[str]:
        """Module path a relative import resolves to, or None for packages."""
        if not declaration.is_relative():
            return None
        return _normalize(self.get_directory() / declaration.module_specifier)

    def get_relative_module_specifier(self, target: Union["SourceFile", str, Path]) -> str:
        """Module specifier this file would use to import target."""
        target_path = target.path if isinstance(target, SourceFile) else Path(target)
        return relative_module_specifier(self.get_directory(), target_path)

    def add_import(
        self,
        module_specifier: str,
        named_imports: Iterable[str] = (),
        namespace_import: Optional[str] = None,
        default_import: Optional[str] = None,
    ):
        """
        Add an import, merging named imports into an existing declaration
        for the same module when there is one.
        """
        named_imports = list(named_imports)
        declarations = self.get_import_declarations()

        for declaration in declarations:
            if declaration.module_specifier != module_specifier or declaration.type_only:
                continue
            if declaration.namespace_import != namespace_import:
                continue
            missing = [n for n in named_imports if n not in declaration.imported_names]
            if default_import and declaration.default_import is None:
                declaration.default_import = default_import
            elif not missing:
                return
            declaration.named_imports.extend(missing)
            self.replace_range(declaration.start, declaration.end, declaration.render())
            return

        new_declaration = ImportDeclaration(
            module_specifier=module_specifier,
            named_imports=named_imports,
            default_import=default_import,
            namespace_import=namespace_import,
        )
        if declarations:
            insert_at = declarations[-1].end
            if not self._text[:insert_at].endswith("\n"):
                self.insert_text(insert_at, "\n")
                insert_at += 1
            self.insert_text(insert_at, new_declaration.render())
        else:
            separator = "\n" if self._text.strip() else ""
            self.insert_text(0, new_declaration.render() + separator)

    def set_module_specifier(self, declaration: ImportDeclaration, module_specifier: str):
        declaration.module_specifier = module_specifier
        current = self._text[declaration.start:declaration.end]
        quoted = list(re.finditer(r"(['\"])[^'\"\n]*\1", current))[-1]
        self.replace_range(
            declaration.start + quoted.start(),
            declaration.start + quoted.end(),
            f"'{module_specifier}'",
        )

    # Moving

    def move(self, new_path: Union[str, Path]) -> "SourceFile":
        """Move the file within the project; see SourceProject.move_file."""
        self.project.move_file(self, Path(new_path))
        return self

    def _mark_saved(self):
        self._saved_text = self._text
        self._saved_path = self.path


class ClassDeclaration:
    """A class declaration located by name inside a source file."""

    def __init__(self, source_file: SourceFile, name: str):
        self.source_file = source_file
        self._name = name

    def __repr__(self) -> str:
        return f"ClassDeclaration({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def project(self) -> "SourceProject":
        return self.source_file.project

    def get_source_file(self) -> SourceFile:
        return self.source_file

    def _locate(self, masked: str) -> Optional[re.Match]:
        pattern = re.compile(r"\bclass\s+(" + re.escape(self._name) + r")(?![\w$])")
        return pattern.search(masked)

    def exists(self) -> bool:
        return self._locate(self.source_file.masked) is not None

    def _require(self, masked: str) -> re.Match:
        match = self._locate(masked)
        if match is None:
            raise SourceError(f"Class '{self._name}' not found in {self.source_file.path}")
        return match

    def rename(self, new_name: str) -> "ClassDeclaration":
        """Rename the class and every reference to it in the project."""
        self.project.rename_symbol(self.source_file, self._name, new_name)
        self._name = new_name
        return self

    def get_body_span(self):
        """Offsets of the opening and closing braces of the class body."""
        masked = self.source_file.masked
        match = self._require(masked)
        open_index = masked.index("{", match.end())
        return open_index, find_closing(masked, open_index)

    def get_decorator_object(self, decorator_name: str) -> "ObjectLiteral":
        """The object literal passed to a decorator applied to this class."""
        source_file = self.source_file

        def locate() -> int:
            masked = source_file.masked
            class_start = self._require(masked).start()
            pattern = re.compile(r"@" + re.escape(decorator_name) + r"\s*\(\s*\{")
            candidates = [m for m in pattern.finditer(masked, 0, class_start)]
            if not candidates:
                raise SourceError(
                    f"Decorator @{decorator_name} not found on class '{self._name}'"
                )
            return candidates[-1].end() - 1

        return ObjectLiteral(source_file, locate)

    def get_static_property(self, property_name: str) -> Optional[str]:
        """Source text of a static property declaration, or None."""
        open_index, close_index = self.get_body_span()
        masked = self.source_file.masked
        pattern = re.compile(r"\bstatic\s+(?:readonly\s+)?" + re.escape(property_name) + r"\b")
        match = pattern.search(masked, open_index, close_index)
        if match is None:
            return None
        end = find_statement_end(masked, match.end())
        return self.source_file.text[match.start():end]

    def insert_member(self, member_text: str, index: int = 0):
        """
        Insert a member at the start (index=0) or end (index=-1) of the class body.

        member_text is given without indentation; each line is indented one level
        deeper than the class.
        """
        open_index, close_index = self.get_body_span()
        text = self.source_file.text
        class_indent = line_indent(text, open_index)
        body = "\n".join(
            (class_indent + INDENT + line) if line.strip() else ""
            for line in member_text.strip("\n").split("\n")
        )
        inner = text[open_index + 1:close_index]
        if not inner.strip():
            closing = "" if "\n" in inner else "\n" + class_indent
            self.source_file.insert_text(open_index + 1, "\n" + body + closing)
        elif index == 0:
            self.source_file.insert_text(open_index + 1, "\n" + body + "\n")
        else:
            insert_at = len(text[:close_index].rstrip())
            self.source_file.insert_text(insert_at, "\n\n" + body)


class VariableDeclaration:
    """A `const`/`let`/`var` declaration located by name inside a source file."""

    def __init__(self, source_file: SourceFile, name: str):
        self.source_file = source_file
        self._name = name

    def __repr__(self) -> str:
        return f"VariableDeclaration({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def project(self) -> "SourceProject":
        return self.source_file.project

    def _locate(self) -> Optional[Dict[str, int]]:
        masked = self.source_file.masked
        pattern = re.compile(
            r"\b(?:const|let|var)\s+(" + re.escape(self._name) + r")(?![\w$])"
        )
        match = pattern.search(masked)
        if match is None:
            return None

        spans = {"name_end": match.end(1), "type_start": -1, "type_end": -1,
                 "init_start": -1, "init_end": -1}
        position = match.end(1)
        while position < len(masked) and masked[position].isspace():
            position += 1

        if position < len(masked) and masked[position] == ":":
            type_start = position + 1
            depth = 0
            while position < len(masked):
                ch = masked[position]
                if ch in "([{<":
                    depth += 1
                elif ch in ")]}>" and not (ch == ">" and masked[position - 1] == "="):
                    depth -= 1
                elif depth == 0 and ch == "=" and masked[position + 1:position + 2] != ">":
                    break
                elif depth == 0 and ch == ";":
                    break
                position += 1
            spans["type_start"] = type_start
            spans["type_end"] = position

        if position < len(masked) and masked[position] == "=":
            init_start = position + 1
            while init_start < len(masked) and masked[init_start].isspace():
                init_start += 1
            spans["init_start"] = init_start
            spans["init_end"] = find_statement_end(masked, init_start)

        return spans

    def exists(self) -> bool:
        return self._locate() is not None

    def _require(self) -> Dict[str, int]:
        spans = self._locate()
        if spans is None:
            raise SourceError(f"Variable '{self._name}' not found in {self.source_file.path}")
        return spans

    @property
    def type_text(self) -> Optional[str]:
        spans = self._require()
        if spans["type_start"] < 0:
            return None
        return self.source_file.text[spans["type_start"]:spans["type_end"]].strip()

    @property
    def initializer_text(self) -> Optional[str]:
        spans = self._require()
        if spans["init_start"] < 0:
            return None
        return self.source_file.text[spans["init_start"]:spans["init_end"]]

    def rename(self, new_name: str) -> "VariableDeclaration":
        """Rename the variable and every reference to it in the project."""
        self.project.rename_symbol(self.source_file, self._name, new_name)
        self._name = new_name
        return self

    def set_initializer(self, initializer: str) -> "VariableDeclaration":
        """Replace (or add) the initializer expression."""
        spans = self._require()
        if spans["init_start"] < 0:
            insert_at = spans["type_end"] if spans["type_end"] >= 0 else spans["name_end"]
            self.source_file.insert_text(insert_at, f" = {initializer}")
        else:
            self.source_file.replace_range(spans["init_start"], spans["init_end"], initializer)
        return self

    def get_object_literal(self) -> "ObjectLiteral":
        """The object literal this variable is initialized with."""

        def locate() -> int:
            spans = self._require()
            start = spans["init_start"]
            text = self.source_file.masked
            if start < 0 or text[start] != "{":
                raise SourceError(
                    f"Variable '{self._name}' is not initialized with an object literal"
                )
            return start

        return ObjectLiteral(self.source_file, locate)


class _BracketLiteral:
    """Shared behaviour for object and array literals."""

    open_char = "{"

    def __init__(self, source_file: SourceFile, locate: Callable[[], int]):
        self.source_file = source_file
        self._locate = locate

    def get_span(self):
        open_index = self._locate()
        masked = self.source_file.masked
        if masked[open_index] != self.open_char:
            raise SourceError(f"Expected '{self.open_char}' at offset {open_index}")
        return open_index, find_closing(masked, open_index)

    def _items(self):
        open_index, close_index = self.get_span()
        return split_top_level(self.source_file.masked, open_index + 1, close_index)

    def get_text(self) -> str:
        open_index, close_index = self.get_span()
        return self.source_file.text[open_index:close_index + 1]

    def _append(self, item_text: str):
        """Append an item, keeping the literal's single- or multi-line layout."""
        open_index, close_index = self.get_span()
        text = self.source_file.text
        items = self._items()
        inner = text[open_index + 1:close_index]
        closing_indent = line_indent(text, open_index)

        if not items:
            if "\n" in inner:
                new_inner = f"\n{closing_indent}{INDENT}{item_text},\n{closing_indent}"
            elif self.open_char == "{":
                new_inner = f" {item_text} "
            else:
                new_inner = item_text
            self.source_file.replace_range(open_index + 1, close_index, new_inner)
            return

        last_end = items[-1][1]
        after_last = text[last_end:close_index]
        has_trailing_comma = after_last.strip().startswith(",")

        if "\n" in inner:
            item_indent = line_indent(text, items[-1][0])
            if has_trailing_comma:
                comma_at = last_end + after_last.index(",") + 1
                self.source_file.insert_text(comma_at, f"\n{item_indent}{item_text},")
            else:
                self.source_file.insert_text(last_end, f",\n{item_indent}{item_text}")
        else:
            self.source_file.insert_text(last_end, f", {item_text}")


class ArrayLiteral(_BracketLiteral):
    """An array literal inside a source file."""

    open_char = "["

    def get_elements(self) -> List[str]:
        text = self.source_file.text
        return [text[start:end] for start, end in self._items()]

    def add_element(self, element_text: str) -> "ArrayLiteral":
        self._append(element_text)
        logger.debug("Added array element %s in %s", element_text, self.source_file.path)
        return self


class ObjectLiteral(_BracketLiteral):
    """An object literal inside a source file."""

    open_char = "{"

    _KEY_PATTERN = re.compile(r"""^(?:(['"])(?P<quoted>[^'"]+)\1|(?P<plain>[A-Za-z_$][\w$]*))\s*:""")

    def _find_property(self, name: str):
        text = self.source_file.text
        for start, end in self._items():
            match = self._KEY_PATTERN.match(text[start:end])
            if match and (match.group("quoted") or match.group("plain")) == name:
                value_start = start + match.end()
                while text[value_start].isspace():
                    value_start += 1
                return value_start, end
        return None

    def get_property_names(self) -> List[str]:
        text = self.source_file.text
        names = []
        for start, end in self._items():
            match = self._KEY_PATTERN.match(text[start:end])
            if match:
                names.append(match.group("quoted") or match.group("plain"))
        return names

    def has_property(self, name: str) -> bool:
        return self._find_property(name) is not None

    def get_property_value(self, name: str) -> Optional[str]:
        span = self._find_property(name)
        if span is None:
            return None
        return self.source_file.text[span[0]:span[1]]

    def add_property(self, name: str, value_text: str, quote_key: bool = False) -> "ObjectLiteral":
        key = f"'{name}'" if quote_key else name
        self._append(f"{key}: {value_text}")
        return self

    def _value_locator(self, name: str, expected: str) -> Callable[[], int]:
        def locate() -> int:
            span = self._find_property(name)
            if span is None:
                raise SourceError(f"Property '{name}' not found")
            if self.source_file.masked[span[0]] != expected:
                raise SourceError(f"Property '{name}' is not a literal starting with '{expected}'")
            return span[0]

        return locate

    def get_array_property(self, name: str) -> Optional[ArrayLiteral]:
        span = self._find_property(name)
        if span is None or self.source_file.masked[span[0]] != "[":
            return None
        return ArrayLiteral(self.source_file, self._value_locator(name, "["))

    def get_object_property(self, name: str) -> Optional["ObjectLiteral"]:
        span = self._find_property(name)
        if span is None or self.source_file.masked[span[0]] != "{":
            return None
        return ObjectLiteral(self.source_file, self._value_locator(name, "{"))

    def get_or_add_array_property(self, name: str) -> ArrayLiteral:
        """Return the array under name, adding an empty one if missing."""
        if not self.has_property(name):
            self.add_property(name, "[]")
        array = self.get_array_property(name)
        if array is None:
            raise SourceError(f"Property '{name}' exists but is not an array literal")
        return array


class SourceProject:
    """The set of source files a command works on."""

    def __init__(self, root_dir: Optional[Union[str, Path]] = None, encoding: str = "utf-8"):
        self.root_dir = Path(root_dir or Path.cwd())
        self.encoding = encoding
        self._files: List[SourceFile] = []

    def get_source_files(self) -> List[SourceFile]:
        return list(self._files)

    def get_source_file(self, path: Union[str, Path]) -> Optional[SourceFile]:
        wanted = _normalize(path)
        for source_file in self._files:
            if _normalize(source_file.path) == wanted:
                return source_file
        return None

    def create_source_file(self, path: Union[str, Path], text: str) -> SourceFile:
        """Add a new, unsaved file to the project."""
        path = Path(path)
        if self.get_source_file(path) is not None:
            raise SourceError(f"A file already exists in the project at {path}")
        if path.exists():
            raise SourceError(f"A file already exists at {path}")
        source_file = SourceFile(self, path, text)
        self._files.append(source_file)
        logger.debug("Created source file %s", path)
        return source_file

    def add_source_file_at_path(self, path: Union[str, Path]) -> SourceFile:
        """Load a file from disk into the project (or return it if already loaded)."""
        existing = self.get_source_file(path)
        if existing is not None:
            return existing
        path = Path(path)
        try:
            text = path.read_text(encoding=self.encoding)
        except OSError as e:
            raise SourceError(f"Could not read {path}: {e}") from e
        source_file = SourceFile(self, path, text, on_disk=True)
        self._files.append(source_file)
        logger.debug("Loaded source file %s", path)
        return source_file

    def get_importers(self, target: SourceFile) -> List[SourceFile]:
        """Files in the project that import target through a relative import."""
        importers = []
        for source_file in self._files:
            if source_file is target:
                continue
            for declaration in source_file.get_import_declarations():
                if source_file.resolve_import(declaration) == target.get_module_path():
                    importers.append(source_file)
                    break
        return importers

    def rename_symbol(self, declaring_file: SourceFile, old_name: str, new_name: str):
        """Rename a declaration in its file and in the files that import it."""
        count = declaring_file.rename_identifier(old_name, new_name)
        for importer in self.get_importers(declaring_file):
            imports = [
                d for d in importer.get_import_declarations()
                if importer.resolve_import(d) == declaring_file.get_module_path()
            ]
            if any(old_name in d.imported_names for d in imports):
                count += importer.rename_identifier(old_name, new_name)
        logger.debug("Renamed %s -> %s (%d references)", old_name, new_name, count)

    def move_file(self, source_file: SourceFile, new_path: Path):
        """
        Move a file, rewriting relative imports that point at it as well as
        the relative imports it contains.
        """
        if self.get_source_file(new_path) not in (None, source_file):
            raise SourceError(f"A file already exists in the project at {new_path}")

        old_module_path = source_file.get_module_path()
        importers = self.get_importers(source_file)

        own_targets = []
        for declaration in source_file.get_import_declarations():
            target = source_file.resolve_import(declaration)
            if target is not None:
                own_targets.append((declaration.module_specifier, target))

        source_file.path = Path(new_path)

        for module_specifier, target in reversed(own_targets):
            for declaration in reversed(source_file.get_import_declarations()):
                if declaration.module_specifier == module_specifier:
                    source_file.set_module_specifier(
                        declaration, relative_module_specifier(source_file.get_directory(), target)
                    )

        for importer in importers:
            for declaration in reversed(importer.get_import_declarations()):
                if importer.resolve_import(declaration) == old_module_path:
                    importer.set_module_specifier(
                        declaration, importer.get_relative_module_specifier(source_file)
                    )

        logger.debug("Moved %s -> %s", old_module_path, new_path)

    def save(self) -> List[Path]:
        """
        Persist every modified file.

        All files are first written to temporary files next to their targets;
        only when every write succeeded are they renamed into place. A rename
        that fails part way leaves the files already renamed in place; the
        remaining temporary files are removed.

        Returns:
            Paths that were written

        Raises:
            SourceError: If a file could not be written or renamed
        """
        pending = [f for f in self._files if f.is_modified()]
        staged = []

        try:
            for source_file in pending:
                source_file.path.parent.mkdir(parents=True, exist_ok=True)
                fd, temp_path = tempfile.mkstemp(
                    dir=str(source_file.path.parent),
                    prefix=f".{source_file.path.name}.",
                    suffix=".tmp",
                )
                staged.append((temp_path, source_file))
                with os.fdopen(fd, "w", encoding=self.encoding, newline="") as handle:
                    handle.write(source_file.text)
        except OSError as e:
            for temp_path, _ in staged:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
            raise SourceError(f"Failed to save project: {e}") from e

        written = []
        try:
            for temp_path, source_file in staged:
                os.replace(temp_path, source_file.path)
                previous_path = source_file._saved_path
                if previous_path is not None and previous_path != source_file.path and previous_path.exists():
                    previous_path.unlink()
                source_file._mark_saved()
                written.append(source_file.path)
                logger.info("Saved %s", source_file.path)
        except OSError as e:
            raise SourceError(
                f"Failed to save project after writing {len(written)} of {len(staged)} files: {e}"
            ) from e
        finally:
            for temp_path, _ in staged:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)

        return written


def create_file(
    project: SourceProject,
    engine: TemplateEngine,
    template_name: str,
    context: Optional[Dict] = None,
    path: Optional[Union[str, Path]] = None,
) -> SourceFile:
    """
    Render a template and add the result to the project as a new file.

    Args:
        project: Project to add the file to
        engine: Template engine to render with
        template_name: Template path relative to the engine's template directory
        context: Template variables
        path: Where the file lives in the project; defaults to the template's
            own path without the .j2 suffix, to be moved later

    Returns:
        The new (unsaved) source file
    """
    if not engine.template_exists(template_name):
        raise TemplateError(f"Template not found: {template_name}")
    text = engine.render_template(template_name, context or {})
    return project.create_source_file(path or engine.get_template_path(template_name), text)


def add_imports_to_file(
    source_file: SourceFile,
    module_specifier: Union[SourceFile, str],
    named_imports: Iterable[str] = (),
    namespace_import: Optional[str] = None,
    default_import: Optional[str] = None,
):
    """Add an import to source_file; a SourceFile target becomes a relative specifier."""
    if isinstance(module_specifier, SourceFile):
        module_specifier = source_file.get_relative_module_specifier(module_specifier)
    source_file.add_import(
        module_specifier,
        named_imports=named_imports,
        namespace_import=namespace_import,
        default_import=default_import,
    )
