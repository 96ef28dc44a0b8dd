"""Declaration model produced by the extractor and consumed by prompting.

Every collection is a tuple in source order. Missing optional constructs
(bodies, default values, base lists) are empty strings or empty tuples.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import ClassVar, Tuple, Union


class DeclarationKind(str, Enum):
    """Syntactic kind of a type-level declaration."""

    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Annotation:
    """Attribute applied to a file, declaration or member."""

    name: str
    arguments: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Parameter:
    name: str
    type_name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    default_value: str = ""


@dataclass(frozen=True)
class Field:
    name: str
    type_name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    initializer: str = ""


@dataclass(frozen=True)
class Property:
    """Property with the accessor keywords present and their raw bodies."""

    name: str
    type_name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    accessors: Tuple[str, ...] = ()
    getter: str = ""
    setter: str = ""


@dataclass(frozen=True)
class Method:
    name: str
    return_type: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    parameters: Tuple[Parameter, ...] = ()
    body: str = ""


@dataclass(frozen=True)
class Constructor:
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    parameters: Tuple[Parameter, ...] = ()
    body: str = ""


@dataclass(frozen=True)
class Event:
    name: str
    type_name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class EnumMember:
    name: str
    value: str = ""


@dataclass(frozen=True)
class ClassDeclaration:
    kind: ClassVar[DeclarationKind] = DeclarationKind.CLASS

    name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    base_types: Tuple[str, ...] = ()
    fields: Tuple[Field, ...] = ()
    properties: Tuple[Property, ...] = ()
    methods: Tuple[Method, ...] = ()
    constructors: Tuple[Constructor, ...] = ()
    events: Tuple[Event, ...] = ()


@dataclass(frozen=True)
class RecordDeclaration:
    kind: ClassVar[DeclarationKind] = DeclarationKind.RECORD

    name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    base_types: Tuple[str, ...] = ()
    fields: Tuple[Field, ...] = ()
    properties: Tuple[Property, ...] = ()
    methods: Tuple[Method, ...] = ()
    constructors: Tuple[Constructor, ...] = ()


@dataclass(frozen=True)
class StructDeclaration:
    kind: ClassVar[DeclarationKind] = DeclarationKind.STRUCT

    name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    fields: Tuple[Field, ...] = ()
    properties: Tuple[Property, ...] = ()
    methods: Tuple[Method, ...] = ()
    constructors: Tuple[Constructor, ...] = ()


@dataclass(frozen=True)
class InterfaceDeclaration:
    kind: ClassVar[DeclarationKind] = DeclarationKind.INTERFACE

    name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    base_interfaces: Tuple[str, ...] = ()
    methods: Tuple[Method, ...] = ()
    properties: Tuple[Property, ...] = ()


@dataclass(frozen=True)
class EnumDeclaration:
    kind: ClassVar[DeclarationKind] = DeclarationKind.ENUM

    name: str
    modifiers: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    members: Tuple[EnumMember, ...] = ()


Declaration = Union[
    ClassDeclaration,
    RecordDeclaration,
    StructDeclaration,
    InterfaceDeclaration,
    EnumDeclaration,
]


@dataclass(frozen=True)
class Namespace:
    name: str
    members: Tuple[Declaration, ...] = ()


@dataclass(frozen=True)
class SourceFile:
    """One parsed source file. ``path`` is the identity key used downstream."""

    path: str
    raw_text: str
    imports: Tuple[str, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    namespaces: Tuple[Namespace, ...] = ()
    declarations: Tuple[Declaration, ...] = ()

    @property
    def name(self) -> str:
        return PurePath(self.path).name


@dataclass(frozen=True)
class ProjectModel:
    """Declaration model of a whole project, built once per pipeline run."""

    root: str
    name: str
    files: Tuple[SourceFile, ...] = ()


__all__ = [
    "Annotation",
    "ClassDeclaration",
    "Constructor",
    "Declaration",
    "DeclarationKind",
    "EnumDeclaration",
    "EnumMember",
    "Event",
    "Field",
    "InterfaceDeclaration",
    "Method",
    "Namespace",
    "Parameter",
    "ProjectModel",
    "Property",
    "RecordDeclaration",
    "SourceFile",
    "StructDeclaration",
]
