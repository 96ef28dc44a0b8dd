"""Tests for the tree-sitter C# extractor."""

from __future__ import annotations

import pytest

from documate.extraction import CSharpParser, SyntaxFailure
from documate.models import (
    ClassDeclaration,
    DeclarationKind,
    EnumDeclaration,
    InterfaceDeclaration,
    RecordDeclaration,
    StructDeclaration,
)

SERVICE_SOURCE = """\
using System;
using System.Collections.Generic;
using static System.Math;
using Json = System.Text.Json;

[assembly: InternalsVisibleTo("Sample.Tests")]

namespace Sample.Services
{
    [Serializable]
    public sealed class OrderService : BaseService, IOrderService
    {
        private int x, y;
        private readonly string _name = "orders";

        public int Count { get; private set; }

        public string Name => _name;

        public event EventHandler Changed;

        public OrderService(string name, int retries = 3)
        {
            _name = name;
        }

        [Obsolete("use PlaceAsync")]
        public void Place(ref int id, params string[] tags)
        {
            Count++;
        }

        public int Total() => x + y;
    }
}
"""


def _parse(text: str, path: str = "src/OrderService.cs"):
    return CSharpParser().parse(path, text)


def test_parser_collects_imports_and_assembly_attributes() -> None:
    source = _parse(SERVICE_SOURCE)

    assert source.path == "src/OrderService.cs"
    assert source.name == "OrderService.cs"
    assert source.raw_text == SERVICE_SOURCE
    assert source.imports == (
        "System",
        "System.Collections.Generic",
        "System.Math",
        "System.Text.Json",
    )
    assert [annotation.name for annotation in source.annotations] == ["InternalsVisibleTo"]
    assert source.annotations[0].arguments == ('"Sample.Tests"',)


def test_parser_expands_multi_variable_fields() -> None:
    source = _parse(SERVICE_SOURCE)
    (namespace,) = source.namespaces
    (service,) = namespace.members

    assert isinstance(service, ClassDeclaration)
    assert [(f.type_name, f.name) for f in service.fields] == [
        ("int", "x"),
        ("int", "y"),
        ("string", "_name"),
    ]
    assert service.fields[0].modifiers == ("private",)
    assert service.fields[2].modifiers == ("private", "readonly")
    assert service.fields[2].initializer == '"orders"'


def test_parser_captures_class_shape() -> None:
    source = _parse(SERVICE_SOURCE)
    namespace = source.namespaces[0]
    service = namespace.members[0]

    assert namespace.name == "Sample.Services"
    assert service.kind is DeclarationKind.CLASS
    assert service.name == "OrderService"
    assert service.modifiers == ("public", "sealed")
    assert [a.name for a in service.annotations] == ["Serializable"]
    assert service.base_types == ("BaseService", "IOrderService")

    count, name = service.properties
    assert count.accessors == ("get", "set")
    assert count.type_name == "int"
    assert name.accessors == ("get",)
    assert name.getter == "=> _name"

    assert [(e.type_name, e.name) for e in service.events] == [("EventHandler", "Changed")]


def test_parser_captures_methods_and_constructors() -> None:
    service = _parse(SERVICE_SOURCE).namespaces[0].members[0]

    (ctor,) = service.constructors
    assert ctor.modifiers == ("public",)
    assert [(p.type_name, p.name) for p in ctor.parameters] == [("string", "name"), ("int", "retries")]
    assert ctor.parameters[1].default_value == "3"
    assert ctor.body.startswith("{") and "_name = name;" in ctor.body

    place, total = service.methods
    assert place.name == "Place"
    assert place.return_type == "void"
    assert [a.name for a in place.annotations] == ["Obsolete"]
    assert place.annotations[0].arguments == ('"use PlaceAsync"',)
    assert [p.name for p in place.parameters] == ["id", "tags"]
    assert place.parameters[0].modifiers == ("ref",)
    assert place.parameters[1].modifiers == ("params",)
    assert place.parameters[1].type_name == "string[]"
    assert "Count++;" in place.body

    assert total.return_type == "int"
    assert total.body == "=> x + y"


def test_parser_keeps_params_arrays() -> None:
    source = _parse(
        "class A { void M(int a, params string[] rest) {} void N([NotNull] params object[] values) {} }\n"
    )
    m, n = source.declarations[0].methods

    assert [(p.type_name, p.name) for p in m.parameters] == [("int", "a"), ("string[]", "rest")]
    assert m.parameters[1].modifiers == ("params",)
    assert [(p.name, p.modifiers) for p in n.parameters] == [("values", ("params",))]
    assert [a.name for a in n.parameters[0].annotations] == ["NotNull"]


def test_parser_keeps_generic_parameters_in_names() -> None:
    source = _parse(
        """
        public class Repository<TKey, TValue> : List<TValue>
        {
            public T Find<T>(TKey key) => default;
        }
        """
    )
    (repository,) = source.declarations

    assert repository.name == "Repository<TKey, TValue>"
    assert repository.base_types == ("List<TValue>",)
    assert [m.name for m in repository.methods] == ["Find<T>"]


def test_parser_keeps_attributes_on_their_own_declaration() -> None:
    service = _parse(SERVICE_SOURCE).namespaces[0].members[0]

    # Obsolete sits on a method and must not leak onto the class.
    assert [a.name for a in service.annotations] == ["Serializable"]


def test_parser_handles_each_declaration_kind() -> None:
    source = _parse(
        """
        namespace Sample.Models
        {
            public interface IShape : IComparable, IDisposable
            {
                double Area();
                string Label { get; }
            }

            public struct Point
            {
                public int X;
                public Point(int x) { X = x; }
            }

            public enum Color
            {
                Red = 1,
                Green,
            }

            public record Person(string Name) : Entity
            {
                public int Age { get; init; }
            }
        }
        """
    )
    kinds = [type(member) for member in source.namespaces[0].members]
    assert kinds == [InterfaceDeclaration, StructDeclaration, EnumDeclaration, RecordDeclaration]

    shape, point, color, person = source.namespaces[0].members
    assert shape.base_interfaces == ("IComparable", "IDisposable")
    assert [m.name for m in shape.methods] == ["Area"]
    assert shape.methods[0].body == ""
    assert [p.name for p in shape.properties] == ["Label"]

    assert [f.name for f in point.fields] == ["X"]
    assert len(point.constructors) == 1

    assert [(m.name, m.value) for m in color.members] == [("Red", "1"), ("Green", "")]

    assert person.name == "Person"
    assert person.base_types == ("Entity",)
    assert person.properties[0].accessors == ("get", "init")


def test_parser_qualifies_nested_namespaces() -> None:
    source = _parse(
        """
        namespace Outer
        {
            public class A { }

            namespace Inner
            {
                public class B { }
            }
        }
        """
    )
    assert [(ns.name, [m.name for m in ns.members]) for ns in source.namespaces] == [
        ("Outer", ["A"]),
        ("Outer.Inner", ["B"]),
    ]


def test_parser_supports_file_scoped_namespaces() -> None:
    source = _parse(
        """
        using System;

        namespace Sample.Core;

        public class Clock
        {
            public DateTime Now() => DateTime.UtcNow;
        }
        """
    )
    assert source.imports == ("System",)
    assert [ns.name for ns in source.namespaces] == ["Sample.Core"]
    assert [m.name for m in source.namespaces[0].members] == ["Clock"]
    assert source.declarations == ()


def test_parser_reports_top_level_types() -> None:
    source = _parse("public class Loose { public int Value; }\n")

    assert source.namespaces == ()
    assert [d.name for d in source.declarations] == ["Loose"]


def test_parser_rejects_malformed_source_when_strict() -> None:
    with pytest.raises(SyntaxFailure) as excinfo:
        _parse("public class Broken { public void M( { }\n")
    assert "line" in str(excinfo.value)


def test_parser_tolerates_malformed_source_when_lenient() -> None:
    parser = CSharpParser(strict_syntax=False)
    source = parser.parse("Broken.cs", "namespace N { public class Ok { } public class { }\n")
    assert source.path == "Broken.cs"


def test_parser_is_deterministic() -> None:
    assert _parse(SERVICE_SOURCE) == _parse(SERVICE_SOURCE)
