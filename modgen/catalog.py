# SPDX-License-Identifier: MIT
"""Static catalog of class declarations.

The TypeCatalog parses Python source files with :mod:`ast` and answers
the questions a processor asks about them: which classes carry a given
marker decorator, what modifiers they have, and what the marker's
arguments resolve to. User code is never imported.

Example:
    catalog = TypeCatalog()
    catalog.add_source_root(Path("src"))
    for element in catalog.find_annotated(GENERATE_MODULE):
        print(element, catalog.attributes_of(element, GENERATE_MODULE))
"""

from __future__ import annotations

import ast
import builtins
import logging
from dataclasses import dataclass, field
from pathlib import Path

from modgen.annotations import ALIASES
from modgen.core.errors import SourceParseError
from modgen.model.elements import AnnotationMirror, Modifier, TypeElement
from modgen.model.values import (
    BUILTINS_MODULE,
    ERROR_SENTINEL,
    AnnotationValue,
    ArrayValue,
    OtherValue,
    StringValue,
    TypeRef,
)
from modgen.util.source_location import SourceLocation

logger = logging.getLogger(__name__)

# Re-exports are followed at most this deep when resolving a name.
MAX_IMPORT_HOPS = 8

SKIP_DIRS = {"__pycache__", "build", "dist"}


@dataclass(frozen=True)
class UnresolvedName:
    """A name in a decorator argument that does not resolve to a class.

    Attributes:
        name: The name as written, e.g. 'SessionImpl' or 'impl.SessionImpl'.
        location: Where the name appears.
    """

    name: str
    location: SourceLocation

    def __str__(self) -> str:
        return f"{self.location}: cannot resolve name {self.name!r}"


@dataclass
class ModuleInfo:
    """A parsed source module.

    Attributes:
        name: Dotted module name.
        path: Source file path.
        is_package: True for ``__init__.py`` files.
        tree: Parsed module.
        classes: Top-level class definitions by name.
        imports: Local name -> qualified target for ``from X import Y``.
        module_imports: Local name -> module for ``import X`` / ``import X as Y``.
        exports: Literal ``__all__`` contents, or None if not given.
    """

    name: str
    path: Path
    is_package: bool
    tree: ast.Module
    classes: dict[str, ast.ClassDef] = field(default_factory=dict)
    imports: dict[str, str] = field(default_factory=dict)
    module_imports: dict[str, str] = field(default_factory=dict)
    exports: list[str] | None = None

    @property
    def package(self) -> str:
        if self.is_package:
            return self.name
        return self.name.rpartition(".")[0]


def module_name_for(path: Path, root: Path) -> tuple[str, bool]:
    """Return the dotted module name for ``path`` relative to ``root``.

    Returns:
        Tuple of (module name, whether the file is a package ``__init__``).
    """
    rel = path.relative_to(root).with_suffix("")
    parts = list(rel.parts)
    is_package = bool(parts) and parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def _dotted(node: ast.expr) -> str | None:
    """Flatten ``a.b.c`` attribute chains; None for anything else."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted(node.value)
        if base is not None:
            return f"{base}.{node.attr}"
    return None


class TypeCatalog:
    """Class declarations parsed from a set of source files.

    Attributes:
        aliases: Qualified decorator names to rewrite to their canonical
            form (e.g. re-exports of a marker).
    """

    def __init__(self, aliases: dict[str, str] | None = None) -> None:
        self.aliases = dict(ALIASES if aliases is None else aliases)
        self._modules: dict[str, ModuleInfo] = {}
        self._elements: dict[str, TypeElement] | None = None
        self._unresolved: dict[tuple[str, str], list[UnresolvedName]] = {}

    @classmethod
    def from_roots(cls, roots: list[Path]) -> TypeCatalog:
        catalog = cls()
        for root in roots:
            catalog.add_source_root(root)
        return catalog

    # -- loading --------------------------------------------------------

    def add_source_root(self, root: Path) -> list[str]:
        """Parse every ``.py`` file under ``root``.

        Args:
            root: Directory whose subdirectories are packages.

        Returns:
            Names of the modules added, in path order.

        Raises:
            SourceParseError: If a file cannot be read or parsed.
        """
        root = Path(root)
        if not root.is_dir():
            raise SourceParseError(f"source root is not a directory: {root}")

        names: list[str] = []
        for path in sorted(root.rglob("*.py")):
            if not path.is_file():
                continue
            rel_parts = path.relative_to(root).parts[:-1]
            if any(p.startswith(".") or p in SKIP_DIRS for p in rel_parts):
                continue
            names.append(self.add_source_file(path, root))
        logger.debug("Parsed %d modules under %s", len(names), root)
        return names

    def add_source_file(self, path: Path, root: Path) -> str:
        """Parse a single source file and add it to the catalog.

        Returns:
            The dotted module name of the file.
        """
        name, is_package = module_name_for(path, root)
        try:
            source = path.read_text(encoding="utf-8")
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as e:
            raise SourceParseError(
                e.msg or "invalid syntax", SourceLocation(path, e.lineno)
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceParseError(str(e), SourceLocation(path)) from e

        info = ModuleInfo(name=name, path=path, is_package=is_package, tree=tree)
        self._index_module(info)
        self._modules[name] = info
        self._elements = None
        return name

    def _index_module(self, info: ModuleInfo) -> None:
        for stmt in info.tree.body:
            if isinstance(stmt, ast.ClassDef):
                info.classes[stmt.name] = stmt
            elif isinstance(stmt, ast.ImportFrom):
                base = self._import_base(info, stmt)
                for alias in stmt.names:
                    if alias.name == "*":
                        continue
                    local = alias.asname or alias.name
                    info.imports[local] = f"{base}.{alias.name}" if base else alias.name
            elif isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if alias.asname:
                        info.module_imports[alias.asname] = alias.name
                    else:
                        head = alias.name.partition(".")[0]
                        info.module_imports[head] = head
            elif isinstance(stmt, (ast.Assign, ast.AnnAssign)):
                targets = stmt.targets if isinstance(stmt, ast.Assign) else [stmt.target]
                if any(isinstance(t, ast.Name) and t.id == "__all__" for t in targets):
                    info.exports = self._literal_names(stmt.value)

    @staticmethod
    def _import_base(info: ModuleInfo, stmt: ast.ImportFrom) -> str:
        if not stmt.level:
            return stmt.module or ""
        parts = info.package.split(".") if info.package else []
        if stmt.level > len(parts):
            raise SourceParseError(
                "attempted relative import beyond top-level package",
                SourceLocation(info.path, stmt.lineno),
            )
        if stmt.level > 1:
            parts = parts[: len(parts) - (stmt.level - 1)]
        if stmt.module:
            parts.append(stmt.module)
        return ".".join(parts)

    @staticmethod
    def _literal_names(node: ast.expr | None) -> list[str] | None:
        if isinstance(node, (ast.List, ast.Tuple)):
            names = [
                elt.value
                for elt in node.elts
                if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
            ]
            if len(names) == len(node.elts):
                return names
        return None

    # -- queries --------------------------------------------------------

    @property
    def modules(self) -> list[str]:
        return list(self._modules)

    def elements(self, modules: list[str] | None = None) -> list[TypeElement]:
        """All class declarations, optionally limited to some modules."""
        elements = self._ensure_elements()
        if modules is None:
            return list(elements.values())
        wanted = set(modules)
        return [e for e in elements.values() if e.module in wanted]

    def get_type_element(self, qualified_name: str) -> TypeElement | None:
        return self._ensure_elements().get(qualified_name)

    def find_annotated(self, marker: str) -> list[TypeElement]:
        """Return every class carrying the ``marker`` decorator."""
        return [
            e
            for e in self._ensure_elements().values()
            if self.get_annotation_mirror(e, marker) is not None
        ]

    def modifiers_of(self, element: TypeElement) -> frozenset[Modifier]:
        return element.modifiers

    def package_of(self, element: TypeElement) -> str:
        return element.package

    def source_path_of(self, element: TypeElement) -> Path:
        return self._modules[element.module].path

    @staticmethod
    def get_annotation_mirror(
        element: TypeElement, annotation: str
    ) -> AnnotationMirror | None:
        for mirror in element.annotations:
            if mirror.qualified_name == annotation:
                return mirror
        return None

    def attributes_of(
        self, element: TypeElement, annotation: str
    ) -> list[tuple[str, AnnotationValue]]:
        """Return the (name, value) pairs given to a decorator.

        Returns an empty list if the element does not carry it.
        """
        mirror = self.get_annotation_mirror(element, annotation)
        if mirror is None:
            return []
        return list(mirror.values.items())

    def unresolved_names(
        self, element: TypeElement, annotation: str
    ) -> list[UnresolvedName]:
        """Names in the arguments of a decorator that did not resolve.

        Each of them decodes to the error sentinel in the mirror.
        """
        self._ensure_elements()
        return list(self._unresolved.get((element.qualified_name, annotation), ()))

    # -- element construction -------------------------------------------

    def _ensure_elements(self) -> dict[str, TypeElement]:
        if self._elements is None:
            elements: dict[str, TypeElement] = {}
            self._unresolved = {}
            for info in self._modules.values():
                for class_name, node in info.classes.items():
                    element = self._make_element(info, class_name, node)
                    elements[element.qualified_name] = element
            self._elements = elements
        return self._elements

    def _make_element(
        self, info: ModuleInfo, class_name: str, node: ast.ClassDef
    ) -> TypeElement:
        qualified_name = f"{info.name}.{class_name}" if info.name else class_name

        modifiers: set[Modifier] = set()
        if not class_name.startswith("_") and (
            info.exports is None or class_name in info.exports
        ):
            modifiers.add(Modifier.PUBLIC)

        annotations: list[AnnotationMirror] = []
        for decorator in node.decorator_list:
            unresolved: list[UnresolvedName] = []
            mirror = self._make_mirror(info, decorator, unresolved)
            if mirror is None:
                continue
            annotations.append(mirror)
            if unresolved:
                key = (qualified_name, mirror.qualified_name)
                self._unresolved.setdefault(key, []).extend(unresolved)

        return TypeElement(
            qualified_name=qualified_name,
            module=info.name,
            package=info.package,
            modifiers=frozenset(modifiers),
            annotations=tuple(annotations),
            location=SourceLocation(info.path, node.lineno),
        )

    def _make_mirror(
        self,
        info: ModuleInfo,
        decorator: ast.expr,
        unresolved: list[UnresolvedName],
    ) -> AnnotationMirror | None:
        call = decorator if isinstance(decorator, ast.Call) else None
        callee = _dotted(call.func if call else decorator)
        if callee is None:
            return None
        qualified = self._qualify(info, callee)
        if qualified is None:
            return None
        qualified = self.aliases.get(qualified, qualified)

        values: dict[str, AnnotationValue] = {}
        if call is not None:
            for i, arg in enumerate(call.args):
                key = "value" if i == 0 else f"arg{i}"
                values[key] = self._decode(info, arg, unresolved)
            for keyword in call.keywords:
                if keyword.arg is not None:
                    values[keyword.arg] = self._decode(info, keyword.value, unresolved)
        return AnnotationMirror(qualified, values)

    def _qualify(self, info: ModuleInfo, dotted: str) -> str | None:
        """Turn a name as written in ``info`` into a qualified name."""
        head, _, rest = dotted.partition(".")
        if head in info.classes:
            base = f"{info.name}.{head}" if info.name else head
        elif head in info.imports:
            base = info.imports[head]
        elif head in info.module_imports:
            base = info.module_imports[head]
        else:
            return None
        return f"{base}.{rest}" if rest else base

    def _decode(
        self,
        info: ModuleInfo,
        node: ast.expr,
        unresolved: list[UnresolvedName],
    ) -> AnnotationValue:
        """Reduce a decorator argument to an AnnotationValue.

        Names that do not resolve decode to the error sentinel and are
        added to ``unresolved``.
        """
        if isinstance(node, ast.Constant):
            if isinstance(node.value, str):
                return StringValue(node.value)
            return OtherValue(node.value, type(node.value).__name__)
        if isinstance(node, (ast.List, ast.Tuple, ast.Set)):
            return ArrayValue(
                tuple(self._decode(info, elt, unresolved) for elt in node.elts)
            )
        dotted = _dotted(node)
        if dotted is not None:
            value = self._resolve_type(info, dotted, node)
            if value == StringValue(ERROR_SENTINEL):
                location = SourceLocation(info.path, node.lineno)
                unresolved.append(UnresolvedName(dotted, location))
            return value
        return OtherValue(ast.unparse(node), type(node).__name__)

    def _resolve_type(
        self, info: ModuleInfo, dotted: str, node: ast.expr
    ) -> AnnotationValue:
        qualified = self._qualify(info, dotted)
        if qualified is None:
            if "." not in dotted and isinstance(getattr(builtins, dotted, None), type):
                return TypeRef(f"{BUILTINS_MODULE}.{dotted}")
            return StringValue(ERROR_SENTINEL)

        if "." in dotted and dotted.partition(".")[0] in info.classes:
            # Nested classes are not catalogued.
            return OtherValue(dotted, type(node).__name__)

        if qualified in self._modules:
            return OtherValue(qualified, "module")
        return self._follow(qualified)

    def _follow(self, qualified: str) -> AnnotationValue:
        """Resolve a qualified name through catalogued modules."""
        for _ in range(MAX_IMPORT_HOPS):
            module, _, name = qualified.rpartition(".")
            target = self._modules.get(module)
            if target is None:
                # Outside the catalog: trust the import.
                return TypeRef(qualified)
            if name in target.classes:
                return TypeRef(qualified)
            if name in target.imports:
                qualified = target.imports[name]
                continue
            return StringValue(ERROR_SENTINEL)
        return StringValue(ERROR_SENTINEL)
