# SPDX-License-Identifier: MIT
"""Injector module generation from @generate_module.

For a class

    @generate_module(SessionImpl, binds=Authenticated)
    class Session: ...

in package ``app``, writes ``app/Gen_Session.py`` holding an abstract
injector module with one binding method:

    @module
    @generated("modgen.processors.generate_module.GenerateModuleProcessor")
    class Gen_Session(BindsModule, ABC):
        @binds
        @abstractmethod
        def bindsAuthenticated(self, value: SessionImpl) -> Authenticated: ...
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING

from modgen.annotations import GENERATE_MODULE
from modgen.codegen.spec import (
    ClassSpec,
    DecoratorSpec,
    MethodSpec,
    SourceFile,
    TypeName,
)
from modgen.core.errors import (
    AnnotationValueError,
    FilerError,
    MissingAttributeError,
    ProcessingError,
    UnresolvedTypeAbort,
)
from modgen.model.elements import AnnotationMirror, Modifier
from modgen.model.values import (
    ERROR_SENTINEL,
    AnnotationValue,
    ArrayValue,
    OtherValue,
    StringValue,
    TypeRef,
)
from modgen.processing.messager import Kind
from modgen.processing.processor import BaseProcessor

if TYPE_CHECKING:
    from modgen.model.elements import TypeElement
    from modgen.processing.environment import RoundEnvironment

logger = logging.getLogger(__name__)

GENERATED_PREFIX = "Gen_"

MODULE = TypeName("modgen.di.module")
GENERATED = TypeName("modgen.di.generated")
BINDS = TypeName("modgen.di.binds")
BINDS_MODULE = TypeName("modgen.di.BindsModule")


def as_type_ref(value: AnnotationValue) -> TypeRef:
    """Return ``value`` if it is a type reference.

    Raises:
        AnnotationValueError: If the value is an array or not a type.
        UnresolvedTypeAbort: If the value stands for an unresolved name.
    """
    match value:
        case TypeRef():
            return value
        case ArrayValue():
            raise AnnotationValueError("value is an array, not a single value")
        case StringValue(value=text) if text == ERROR_SENTINEL:
            raise UnresolvedTypeAbort()
        case StringValue(value=text):
            raise _not_a_type(text, "str")
        case OtherValue(value=other, kind=kind):
            raise _not_a_type(other, kind)
        case _:
            raise _not_a_type(value, type(value).__name__)


def _not_a_type(value: object, kind: str) -> AnnotationValueError:
    return AnnotationValueError(
        f"value {value!r} ({kind}) is not a {TypeRef.__module__}.{TypeRef.__name__}"
    )


def get_annotation_value(mirror: AnnotationMirror, name: str) -> AnnotationValue:
    """Return attribute ``name`` of ``mirror``.

    Raises:
        MissingAttributeError: If the attribute was not given.
    """
    try:
        return mirror.values[name]
    except KeyError:
        raise MissingAttributeError(name, mirror.qualified_name) from None


class GenerateModuleProcessor(BaseProcessor):
    """Writes an injector module for each class marked @generate_module.

    The marker is never claimed, so other processors also see it.
    """

    def supported_annotation_types(self) -> set[str]:
        return {GENERATE_MODULE}

    def process(self, annotations: set[str], round_env: RoundEnvironment) -> bool:
        failures: list[Exception] = []
        for element in round_env.elements_annotated_with(GENERATE_MODULE):
            try:
                self.generate_class(element)
            except Exception as e:
                failures.append(e)

        if failures:
            raise ProcessingError(
                f"{self.name} failed for {len(failures)} declaration(s)"
            ) from failures[0]
        return False

    def generate_class(self, annotated_type: TypeElement) -> None:
        """Generate and write the module for one declaration.

        Errors are reported against the declaration and re-raised.
        """
        try:
            class_spec = self._create_module_class_spec(annotated_type)

            mirror = self.processing_env.catalog.get_annotation_mirror(
                annotated_type, GENERATE_MODULE
            )
            if mirror is None:
                raise LookupError(f"{annotated_type} has no {GENERATE_MODULE}")
            self._report_unresolved(annotated_type)

            binds_type = as_type_ref(get_annotation_value(mirror, "binds"))
            value_type = as_type_ref(get_annotation_value(mirror, "value"))

            class_spec.add_method(
                MethodSpec(f"binds{binds_type.simple_name}")
                .add_decorator(BINDS)
                .add_modifiers(Modifier.ABSTRACT)
                .add_parameter("value", TypeName.get(value_type))
                .returns(TypeName.get(binds_type))
            )
            class_spec.add_modifiers(Modifier.ABSTRACT)

            self.write_class(annotated_type, class_spec)
        except Exception:
            trace = traceback.format_exc()
            self.processing_env.messager.print_message(
                Kind.ERROR, f"Error running {self.name}: {trace}", annotated_type
            )
            raise

    def _report_unresolved(self, annotated_type: TypeElement) -> None:
        """Report names in the marker's arguments that did not resolve.

        Decoding such a name only aborts, so this is where the user
        learns which name it was.
        """
        catalog = self.processing_env.catalog
        for unresolved in catalog.unresolved_names(annotated_type, GENERATE_MODULE):
            self.processing_env.messager.print_message(
                Kind.ERROR,
                f"cannot resolve name {unresolved.name!r}",
                annotated_type,
                unresolved.location,
            )

    def _create_module_class_spec(self, annotated_type: TypeElement) -> ClassSpec:
        class_spec = (
            ClassSpec(GENERATED_PREFIX + annotated_type.simple_name)
            .add_decorator(MODULE)
            .add_decorator(
                DecoratorSpec.call(
                    GENERATED, f"{__name__}.{GenerateModuleProcessor.__name__}"
                )
            )
            .add_base(BINDS_MODULE)
            .add_originating_element(annotated_type)
            .add_docstring(
                f"Injector module generated from :class:`{annotated_type.qualified_name}`."
            )
        )

        catalog = self.processing_env.catalog
        if Modifier.PUBLIC in catalog.modifiers_of(annotated_type):
            class_spec.add_modifiers(Modifier.PUBLIC)

        return class_spec

    def write_class(self, annotated_type: TypeElement, class_spec: ClassSpec) -> None:
        """Write ``class_spec`` into the package of ``annotated_type``.

        Failing to write is only a warning: the same file may already
        have been written by an earlier invocation, and if it really is
        missing, code referencing it will fail to import.

        Raises:
            DuplicateModuleError: If another declaration in the same
                package already generated a module of this name.
        """
        package = self.processing_env.catalog.package_of(annotated_type)
        source_file = SourceFile(package, class_spec)
        source = source_file.to_source()

        try:
            generated = self.processing_env.filer.create_source_file(
                source_file.module_name, *class_spec.originating_elements
            )
            with generated.open_writer() as writer:
                writer.write(source)
            logger.info("Generated %s for %s", source_file.module_name, annotated_type)
        except (OSError, FilerError) as e:
            self.processing_env.messager.print_message(
                Kind.WARNING, f"Could not write generated class {class_spec.name}: {e}"
            )
