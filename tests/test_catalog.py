# SPDX-License-Identifier: MIT
"""Tests for modgen.catalog."""

from __future__ import annotations

import pytest

from modgen.annotations import GENERATE_MODULE
from modgen.catalog import TypeCatalog, module_name_for
from modgen.core.errors import SourceParseError
from modgen.model.elements import Modifier
from modgen.model.values import (
    ERROR_SENTINEL,
    ArrayValue,
    OtherValue,
    StringValue,
    TypeRef,
)


def values_of(catalog, qualified_name):
    element = catalog.get_type_element(qualified_name)
    assert element is not None
    return dict(catalog.attributes_of(element, GENERATE_MODULE))


class TestModuleNames:
    """Tests for module_name_for."""

    def test_module_name(self, tmp_path) -> None:
        """Test the dotted module name, with and without a package."""
        assert module_name_for(tmp_path / "app" / "session.py", tmp_path) == (
            "app.session",
            False,
        )

    def test_package_init(self, tmp_path) -> None:
        """Test __init__.py maps to its package."""
        assert module_name_for(tmp_path / "app" / "__init__.py", tmp_path) == (
            "app",
            True,
        )


class TestDiscovery:
    """Tests for parsing source roots and finding marked classes."""

    def test_find_annotated(self, source_tree, app_files) -> None:
        """Only classes carrying the marker are found."""
        """Only classes carrying the marker are found."""
        catalog = TypeCatalog.from_roots([source_tree(app_files)])

        found = catalog.find_annotated(GENERATE_MODULE)

        assert [e.qualified_name for e in found] == ["app.session.Session"]

    def test_unmarked_classes_are_catalogued(self, source_tree, app_files) -> None:
        """Test classes without the marker are catalogued too."""
        catalog = TypeCatalog.from_roots([source_tree(app_files)])

        names = {e.qualified_name for e in catalog.elements()}
        assert "app.auth.Authenticated" in names
        assert "app.impl.SessionImpl" in names

    def test_element_identity(self, source_tree, app_files) -> None:
        """Test name, module, package and location of an element."""
        root = source_tree(app_files)
        catalog = TypeCatalog.from_roots([root])

        element = catalog.get_type_element("app.session.Session")

        assert element is not None
        assert element.simple_name == "Session"
        assert element.module == "app.session"
        assert catalog.package_of(element) == "app"
        assert element.location is not None
        assert element.location.path == root / "app" / "session.py"
        assert element.location.line == 8
        assert catalog.source_path_of(element) == root / "app" / "session.py"

    def test_class_in_package_init(self, source_tree) -> None:
        """Test classes in __init__.py belong to the package."""
        root = source_tree({"app/__init__.py": "class Root:\n    pass\n"})
        catalog = TypeCatalog.from_roots([root])

        element = catalog.get_type_element("app.Root")
        assert element is not None
        assert element.package == "app"

    def test_marker_via_submodule_import(self, source_tree) -> None:
        """Test the marker is found through each import form."""
        root = source_tree(
            {
                "a.py": """\
                from modgen.annotations import generate_module

                @generate_module(int, binds=object)
                class A:
                    pass
                """,
                "b.py": """\
                import modgen

                @modgen.generate_module(int, binds=object)
                class B:
                    pass
                """,
                "c.py": """\
                from modgen import annotations as ann

                @ann.generate_module(int, binds=object)
                class C:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])

        found = {e.qualified_name for e in catalog.find_annotated(GENERATE_MODULE)}
        assert found == {"a.A", "b.B", "c.C"}

    def test_unrelated_decorator_is_ignored(self, source_tree) -> None:
        """Test a local function named like the marker is not it."""
        root = source_tree(
            {
                "a.py": """\
                from dataclasses import dataclass

                def generate_module(*args, **kwargs):
                    return lambda cls: cls

                @dataclass
                @generate_module(int, binds=object)
                class A:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert catalog.find_annotated(GENERATE_MODULE) == []
        element = catalog.get_type_element("a.A")
        assert element is not None
        assert [m.qualified_name for m in element.annotations] == [
            "dataclasses.dataclass"
        ]

    def test_skips_pycache(self, source_tree) -> None:
        """Test __pycache__ directories are not scanned."""
        root = source_tree({"__pycache__/junk.py": "class Junk: pass\n"})
        catalog = TypeCatalog.from_roots([root])
        assert catalog.elements() == []

    def test_syntax_error(self, source_tree) -> None:
        """Test syntax errors carry the file location."""
        root = source_tree({"bad.py": "class Broken(:\n"})

        with pytest.raises(SourceParseError) as excinfo:
            TypeCatalog.from_roots([root])

        assert excinfo.value.location is not None
        assert excinfo.value.location.path == root / "bad.py"

    def test_missing_root(self, tmp_path) -> None:
        """Test a missing source root is an error."""
        with pytest.raises(SourceParseError):
            TypeCatalog.from_roots([tmp_path / "nope"])


class TestVisibility:
    """Tests for the public and private modifiers."""

    def test_public_class(self, source_tree, app_files) -> None:
        """Test a plain class is public."""
        catalog = TypeCatalog.from_roots([source_tree(app_files)])
        element = catalog.get_type_element("app.session.Session")
        assert catalog.modifiers_of(element) == frozenset({Modifier.PUBLIC})

    def test_underscore_class_is_private(self, source_tree) -> None:
        """Test a leading underscore makes a class private."""
        root = source_tree({"m.py": "class _Hidden:\n    pass\n"})
        catalog = TypeCatalog.from_roots([root])
        element = catalog.get_type_element("m._Hidden")
        assert not element.is_public

    def test_dunder_all_limits_public(self, source_tree) -> None:
        """Test a literal __all__ limits public classes."""
        root = source_tree(
            {
                "m.py": """\
                __all__ = ["Listed"]

                class Listed:
                    pass

                class Unlisted:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert catalog.get_type_element("m.Listed").is_public
        assert not catalog.get_type_element("m.Unlisted").is_public


class TestValueDecoding:
    """Tests for decoding decorator arguments."""

    def test_imported_types(self, source_tree, app_files) -> None:
        """Test imported names resolve to their defining module."""
        catalog = TypeCatalog.from_roots([source_tree(app_files)])

        values = values_of(catalog, "app.session.Session")

        assert values == {
            "value": TypeRef("app.impl.SessionImpl"),
            "binds": TypeRef("app.auth.Authenticated"),
        }

    def test_keyword_value(self, source_tree) -> None:
        """Test value given by keyword."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                class I:
                    pass

                class Impl(I):
                    pass

                @generate_module(binds=I, value=Impl)
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert values_of(catalog, "m.W") == {
            "binds": TypeRef("m.I"),
            "value": TypeRef("m.Impl"),
        }

    def test_relative_and_module_imports(self, source_tree) -> None:
        """Test relative imports and module aliases resolve."""
        root = source_tree(
            {
                "app/__init__.py": "",
                "app/auth.py": "class Authenticated:\n    pass\n",
                "app/session.py": """\
                from modgen import generate_module

                from . import auth
                import app.auth as a

                @generate_module(a.Authenticated, binds=auth.Authenticated)
                class Session:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert values_of(catalog, "app.session.Session") == {
            "value": TypeRef("app.auth.Authenticated"),
            "binds": TypeRef("app.auth.Authenticated"),
        }

    def test_reexported_type_is_followed(self, source_tree) -> None:
        """Test re-exports resolve to the defining module."""
        root = source_tree(
            {
                "app/__init__.py": "from app.auth import Authenticated\n",
                "app/auth.py": "class Authenticated:\n    pass\n",
                "app/session.py": """\
                from modgen import generate_module
                from app import Authenticated

                @generate_module(Authenticated, binds=Authenticated)
                class Session:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])

        values = values_of(catalog, "app.session.Session")
        assert values["binds"] == TypeRef("app.auth.Authenticated")

    def test_external_import_is_trusted(self, source_tree) -> None:
        """Test names from modules outside the roots are trusted."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module
                from collections import OrderedDict

                @generate_module(OrderedDict, binds=dict)
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert values_of(catalog, "m.W") == {
            "value": TypeRef("collections.OrderedDict"),
            "binds": TypeRef("builtins.dict"),
        }

    def test_undefined_name_is_error_sentinel(self, source_tree) -> None:
        """Test undefined names decode to the error sentinel."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                @generate_module(Missing, binds=AlsoMissing)
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert values_of(catalog, "m.W") == {
            "value": StringValue(ERROR_SENTINEL),
            "binds": StringValue(ERROR_SENTINEL),
        }

    def test_missing_class_in_catalogued_module(self, source_tree) -> None:
        """Test a name a scanned module lacks is unresolved."""
        root = source_tree(
            {
                "lib.py": "class Present:\n    pass\n",
                "m.py": """\
                from modgen import generate_module
                from lib import Absent

                @generate_module(Absent, binds=object)
                class W:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert values_of(catalog, "m.W")["value"] == StringValue(ERROR_SENTINEL)

    def test_other_shapes(self, source_tree) -> None:
        """Test arrays, strings, constants and calls decode as such."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                class I:
                    pass

                @generate_module([I, I], binds="I")
                class A:
                    pass

                @generate_module(42, binds=I())
                class B:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        a = values_of(catalog, "m.A")
        assert a["value"] == ArrayValue((TypeRef("m.I"), TypeRef("m.I")))
        assert a["binds"] == StringValue("I")

        b = values_of(catalog, "m.B")
        assert b["value"] == OtherValue(42, "int")
        assert b["binds"] == OtherValue("I()", "Call")

    def test_module_reference_is_not_a_type(self, source_tree) -> None:
        """Test a module decodes as a module, not a type."""
        root = source_tree(
            {
                "lib.py": "",
                "m.py": """\
                from modgen import generate_module
                import lib

                @generate_module(lib, binds=object)
                class W:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])

        assert values_of(catalog, "m.W")["value"] == OtherValue("lib", "module")

    def test_attributes_of_unmarked_element(self, source_tree, app_files) -> None:
        """Test lookups on an element without the marker."""
        catalog = TypeCatalog.from_roots([source_tree(app_files)])
        element = catalog.get_type_element("app.auth.Authenticated")
        assert catalog.attributes_of(element, GENERATE_MODULE) == []
        assert catalog.get_annotation_mirror(element, GENERATE_MODULE) is None

    def test_nested_class_is_not_a_type(self, source_tree) -> None:
        """Test a class nested in a local class decodes as other."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                class Outer:
                    class Inner:
                        pass

                @generate_module(Outer.Inner, binds=object)
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])

        value = values_of(catalog, "m.W")["value"]
        assert value == OtherValue("Outer.Inner", "Attribute")
        element = catalog.get_type_element("m.W")
        assert catalog.unresolved_names(element, GENERATE_MODULE) == []


class TestUnresolvedNames:
    """Tests for recording names that do not resolve."""

    def test_names_and_locations_recorded(self, source_tree) -> None:
        """Test each unresolved name is kept with where it was written."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                @generate_module(
                    Missing,
                    binds=AlsoMissing,
                )
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])
        element = catalog.get_type_element("m.W")

        unresolved = catalog.unresolved_names(element, GENERATE_MODULE)

        assert [(u.name, u.location.line) for u in unresolved] == [
            ("Missing", 4),
            ("AlsoMissing", 5),
        ]
        assert unresolved[0].location.path == root / "m.py"
        assert str(unresolved[0]) == (
            f"{root / 'm.py'}:4: cannot resolve name 'Missing'"
        )

    def test_names_inside_arrays_recorded(self, source_tree) -> None:
        """Test unresolved names inside list arguments are recorded."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                @generate_module([int, Nope], binds=object)
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])
        element = catalog.get_type_element("m.W")

        names = [u.name for u in catalog.unresolved_names(element, GENERATE_MODULE)]
        assert names == ["Nope"]

    def test_missing_member_recorded_as_written(self, source_tree) -> None:
        """Test a name missing from a scanned module keeps its dotted form."""
        root = source_tree(
            {
                "lib.py": "class Present:\n    pass\n",
                "m.py": """\
                from modgen import generate_module
                import lib

                @generate_module(lib.Absent, binds=lib.Present)
                class W:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])
        element = catalog.get_type_element("m.W")

        names = [u.name for u in catalog.unresolved_names(element, GENERATE_MODULE)]
        assert names == ["lib.Absent"]

    def test_resolved_and_unmarked_have_none(self, source_tree, app_files) -> None:
        """Test nothing is recorded when every name resolves."""
        catalog = TypeCatalog.from_roots([source_tree(app_files)])

        for element in catalog.elements():
            assert catalog.unresolved_names(element, GENERATE_MODULE) == []

    def test_string_sentinel_is_not_a_name(self, source_tree) -> None:
        """Test a literal '<error>' string is not reported as a name."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module

                @generate_module("<error>", binds=object)
                class W:
                    pass
                """
            }
        )
        catalog = TypeCatalog.from_roots([root])
        element = catalog.get_type_element("m.W")

        assert values_of(catalog, "m.W")["value"] == StringValue(ERROR_SENTINEL)
        assert catalog.unresolved_names(element, GENERATE_MODULE) == []

    def test_refreshed_after_adding_a_file(self, source_tree) -> None:
        """Test a name that resolves after a new file is no longer recorded."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module
                from later import Late

                @generate_module(Late, binds=object)
                class W:
                    pass
                """,
                "later.py": "",
            }
        )
        catalog = TypeCatalog.from_roots([root])
        element = catalog.get_type_element("m.W")
        assert [u.name for u in catalog.unresolved_names(element, GENERATE_MODULE)] == [
            "Late"
        ]

        (root / "later.py").write_text("class Late:\n    pass\n")
        catalog.add_source_file(root / "later.py", root)

        assert catalog.unresolved_names(element, GENERATE_MODULE) == []


class TestRelativeImports:
    """Tests for resolving relative imports."""

    def test_parent_package_import(self, source_tree) -> None:
        """Test '..' resolves against the enclosing package."""
        root = source_tree(
            {
                "app/__init__.py": "",
                "app/auth.py": "class Authenticated:\n    pass\n",
                "app/web/__init__.py": "",
                "app/web/session.py": """\
                from modgen import generate_module

                from ..auth import Authenticated

                @generate_module(Authenticated, binds=Authenticated)
                class Session:
                    pass
                """,
            }
        )
        catalog = TypeCatalog.from_roots([root])

        values = values_of(catalog, "app.web.session.Session")
        assert values["value"] == TypeRef("app.auth.Authenticated")

    def test_beyond_top_level_package(self, source_tree) -> None:
        """Test relative imports above the top-level package are rejected."""
        root = source_tree(
            {
                "app/__init__.py": "",
                "app/session.py": "\nfrom ...auth import Authenticated\n",
            }
        )

        with pytest.raises(
            SourceParseError, match="beyond top-level package"
        ) as excinfo:
            TypeCatalog.from_roots([root])

        assert excinfo.value.location.path == root / "app" / "session.py"
        assert excinfo.value.location.line == 2

    def test_relative_import_in_top_level_module(self, source_tree) -> None:
        """Test a top-level module has no package to import relative to."""
        root = source_tree({"m.py": "from . import sibling\n"})

        with pytest.raises(SourceParseError, match="beyond top-level package"):
            TypeCatalog.from_roots([root])


class TestIncremental:
    """Tests for adding sources to an existing catalog."""

    def test_add_source_file_refreshes_resolution(self, source_tree) -> None:
        """Test added files take part in later resolution."""
        root = source_tree(
            {
                "m.py": """\
                from modgen import generate_module
                from later import Late

                @generate_module(Late, binds=object)
                class W:
                    pass
                """,
                "later.py": "",
            }
        )
        catalog = TypeCatalog.from_roots([root])
        assert values_of(catalog, "m.W")["value"] == StringValue(ERROR_SENTINEL)

        (root / "later.py").write_text("class Late:\n    pass\n")
        catalog.add_source_file(root / "later.py", root)

        assert values_of(catalog, "m.W")["value"] == TypeRef("later.Late")
        assert [e.qualified_name for e in catalog.elements(["later"])] == [
            "later.Late"
        ]
