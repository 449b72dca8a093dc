# SPDX-License-Identifier: MIT
"""Specs for generated Python source.

Generated code is described with small spec objects and rendered to
text by SourceFile, which takes care of imports:

    spec = ClassSpec("Gen_Session")
    spec.add_decorator(DecoratorSpec(TypeName("modgen.di.module")))
    spec.add_method(
        MethodSpec("bindsAuthenticated")
        .add_parameter("value", TypeName("app.impl.SessionImpl"))
        .returns(TypeName("app.auth.Authenticated"))
    )
    print(SourceFile("app", spec).to_source())

Rendering is deterministic: the same specs always produce the same text.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from modgen.model.elements import Modifier
from modgen.model.values import BUILTINS_MODULE

if TYPE_CHECKING:
    from modgen.model.elements import TypeElement
    from modgen.model.values import TypeRef

INDENT = "    "

HEADER = "# Code generated by modgen. DO NOT EDIT."


@dataclass(frozen=True)
class TypeName:
    """Qualified name of an importable symbol (class or function)."""

    qualified_name: str

    @classmethod
    def get(cls, ref: TypeRef) -> TypeName:
        return cls(ref.qualified_name)

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rpartition(".")[2]

    @property
    def module(self) -> str:
        return self.qualified_name.rpartition(".")[0]

    @property
    def needs_import(self) -> bool:
        return bool(self.module) and self.module != BUILTINS_MODULE

    def __str__(self) -> str:
        return self.qualified_name


@dataclass
class DecoratorSpec:
    """A decorator, optionally called with pre-rendered arguments."""

    name: TypeName
    arguments: list[str] | None = None

    @classmethod
    def call(cls, name: TypeName, *args: object) -> DecoratorSpec:
        """A called decorator whose arguments are given as Python values."""
        return cls(name, [_literal(a) for a in args])


@dataclass
class ParameterSpec:
    name: str
    type: TypeName


@dataclass
class MethodSpec:
    """An instance method.

    Abstract methods get ``@abc.abstractmethod`` and an ellipsis body.
    Other methods get ``body`` lines, or ``pass`` when empty.
    """

    name: str
    decorators: list[DecoratorSpec] = field(default_factory=list)
    parameters: list[ParameterSpec] = field(default_factory=list)
    return_type: TypeName | None = None
    modifiers: set[Modifier] = field(default_factory=set)
    docstring: str | None = None
    body: list[str] = field(default_factory=list)

    def add_decorator(self, decorator: DecoratorSpec | TypeName) -> MethodSpec:
        if isinstance(decorator, TypeName):
            decorator = DecoratorSpec(decorator)
        self.decorators.append(decorator)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> MethodSpec:
        self.modifiers.update(modifiers)
        return self

    def add_parameter(self, name: str, type_name: TypeName) -> MethodSpec:
        self.parameters.append(ParameterSpec(name, type_name))
        return self

    def returns(self, type_name: TypeName) -> MethodSpec:
        self.return_type = type_name
        return self

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers


@dataclass
class ClassSpec:
    """A top-level class.

    Attributes:
        name: Class name.
        decorators: Class decorators, outermost first.
        bases: Base classes. Abstract classes also get ``abc.ABC``.
        modifiers: PUBLIC puts the class in ``__all__``.
        docstring: Class docstring.
        methods: Methods in declaration order.
        originating_elements: Declarations the class was generated from.
    """

    name: str
    decorators: list[DecoratorSpec] = field(default_factory=list)
    bases: list[TypeName] = field(default_factory=list)
    modifiers: set[Modifier] = field(default_factory=set)
    docstring: str | None = None
    methods: list[MethodSpec] = field(default_factory=list)
    originating_elements: list[TypeElement] = field(default_factory=list)

    def add_decorator(self, decorator: DecoratorSpec | TypeName) -> ClassSpec:
        if isinstance(decorator, TypeName):
            decorator = DecoratorSpec(decorator)
        self.decorators.append(decorator)
        return self

    def add_base(self, base: TypeName) -> ClassSpec:
        self.bases.append(base)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> ClassSpec:
        self.modifiers.update(modifiers)
        return self

    def add_docstring(self, text: str) -> ClassSpec:
        self.docstring = (self.docstring or "") + text
        return self

    def add_method(self, method: MethodSpec) -> ClassSpec:
        self.methods.append(method)
        return self

    def add_originating_element(self, element: TypeElement) -> ClassSpec:
        self.originating_elements.append(element)
        return self

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers


ABSTRACT_METHOD = TypeName("abc.abstractmethod")
ABC_BASE = TypeName("abc.ABC")


class ImportTable:
    """Assigns local names to imported symbols.

    The first symbol to claim a simple name gets it; later symbols with
    the same simple name are imported under a module-qualified alias.
    """

    def __init__(self, reserved: set[str] | None = None) -> None:
        self._reserved = set(reserved or ())
        self._local: dict[TypeName, str] = {}

    def name(self, type_name: TypeName) -> str:
        """Return the local name for ``type_name``, importing it if needed."""
        if not type_name.needs_import:
            return type_name.simple_name
        local = self._local.get(type_name)
        if local is None:
            local = type_name.simple_name
            taken = self._reserved | set(self._local.values())
            if local in taken:
                local = f"{type_name.module.replace('.', '_')}_{local}"
            self._local[type_name] = local
        return local

    def render(self) -> list[str]:
        """Import statements, standard library first, then the rest."""
        grouped: dict[str, list[str]] = {}
        for type_name, local in self._local.items():
            entry = type_name.simple_name
            if local != entry:
                entry = f"{entry} as {local}"
            grouped.setdefault(type_name.module, []).append(entry)

        stdlib: list[str] = []
        other: list[str] = []
        for module in sorted(grouped):
            line = f"from {module} import {', '.join(sorted(grouped[module]))}"
            top = module.partition(".")[0]
            (stdlib if top in sys.stdlib_module_names else other).append(line)

        if stdlib and other:
            return stdlib + [""] + other
        return stdlib + other


class SourceFile:
    """A generated module holding one class, in a given package.

    Attributes:
        package: Dotted package the module belongs to ('' for top level).
        class_spec: The class to render.
    """

    def __init__(self, package: str, class_spec: ClassSpec) -> None:
        self.package = package
        self.class_spec = class_spec

    @property
    def module_name(self) -> str:
        if self.package:
            return f"{self.package}.{self.class_spec.name}"
        return self.class_spec.name

    def to_source(self) -> str:
        spec = self.class_spec
        imports = ImportTable(reserved={spec.name})
        body = self._render_class(spec, imports)

        lines = [HEADER]
        import_lines = imports.render()
        if import_lines:
            lines.extend(import_lines)
        lines.append("")
        if spec.is_public:
            lines.append(f'__all__ = ["{spec.name}"]')
        else:
            lines.append("__all__: list[str] = []")
        lines.extend(["", ""])
        lines.extend(body)
        return "\n".join(lines) + "\n"

    def _render_class(self, spec: ClassSpec, imports: ImportTable) -> list[str]:
        lines = [self._render_decorator(d, imports) for d in spec.decorators]

        bases = list(spec.bases)
        if spec.is_abstract and ABC_BASE not in bases:
            bases.append(ABC_BASE)
        base_text = ", ".join(imports.name(b) for b in bases)
        lines.append(f"class {spec.name}({base_text}):" if bases else f"class {spec.name}:")

        members: list[list[str]] = []
        if spec.docstring:
            members.append(_indent(_docstring(spec.docstring)))
        for method in spec.methods:
            members.append(_indent(self._render_method(method, imports)))
        if not members:
            members.append([INDENT + "pass"])

        for i, member in enumerate(members):
            if i:
                lines.append("")
            lines.extend(member)
        return lines

    def _render_method(self, method: MethodSpec, imports: ImportTable) -> list[str]:
        lines = [self._render_decorator(d, imports) for d in method.decorators]
        if method.is_abstract:
            lines.append(f"@{imports.name(ABSTRACT_METHOD)}")

        params = ["self"] + [
            f"{p.name}: {imports.name(p.type)}" for p in method.parameters
        ]
        signature = f"def {method.name}({', '.join(params)})"
        if method.return_type is not None:
            signature += f" -> {imports.name(method.return_type)}"

        body = list(method.body)
        if method.docstring:
            body[:0] = _docstring(method.docstring)
        if method.is_abstract and not body:
            lines.append(f"{signature}: ...")
            return lines

        lines.append(f"{signature}:")
        lines.extend(_indent(body or ["pass"]))
        return lines

    @staticmethod
    def _render_decorator(decorator: DecoratorSpec, imports: ImportTable) -> str:
        text = f"@{imports.name(decorator.name)}"
        if decorator.arguments is not None:
            text += f"({', '.join(decorator.arguments)})"
        return text

    def __str__(self) -> str:
        return self.to_source()


def _indent(lines: list[str]) -> list[str]:
    return [INDENT + line if line else line for line in lines]


def _literal(value: object) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    return repr(value)


def _docstring(text: str) -> list[str]:
    """Docstring lines for ``text``, unindented."""
    text = text.strip().replace('"""', r'\"\"\"')
    lines = f'"""{text}"""'.splitlines()
    if len(lines) > 1:
        lines[-1:] = [lines[-1][:-3], '"""']
    return lines
