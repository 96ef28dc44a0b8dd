"""Tree-sitter powered C# declaration extractor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import tree_sitter_c_sharp
from tree_sitter import Language, Node, Parser

from ..models import (
    Annotation,
    ClassDeclaration,
    Constructor,
    Declaration,
    EnumDeclaration,
    EnumMember,
    Event,
    Field,
    InterfaceDeclaration,
    Method,
    Namespace,
    Parameter,
    Property,
    RecordDeclaration,
    SourceFile,
    StructDeclaration,
)
from .base import SourceParser, SyntaxFailure

CSHARP_LANGUAGE = Language(tree_sitter_c_sharp.language())

_TYPE_NODES = frozenset(
    {
        "class_declaration",
        "struct_declaration",
        "interface_declaration",
        "enum_declaration",
        "record_declaration",
        "record_struct_declaration",
    }
)
_GLOBAL_ATTRIBUTE_NODES = frozenset({"global_attribute", "global_attribute_list", "attribute_list"})
_USING_KEYWORDS = frozenset({"global", "using", "static", "unsafe"})
_ACCESSOR_KEYWORDS = frozenset({"get", "set", "init"})
_PARAMETER_MODIFIERS = frozenset({"ref", "out", "in", "params", "this", "scoped", "readonly"})
_BODY_NODES = ("block", "arrow_expression_clause")


class CSharpParser(SourceParser):
    """Extracts namespaces, type declarations and their members from C# files."""

    suffixes = (".cs",)

    def __init__(self, *, strict_syntax: bool = True) -> None:
        self.strict_syntax = strict_syntax
        self._parser = Parser(CSHARP_LANGUAGE)

    def parse(self, path: str, text: str) -> SourceFile:
        source_bytes = text.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        root = tree.root_node
        if self.strict_syntax and root.has_error:
            raise SyntaxFailure(_describe_error(root))
        return _FileWalker(source_bytes).build(path, text, root)


def _describe_error(root: Node) -> str:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            kind = "missing token" if node.is_missing else "syntax error"
            return f"{kind} at line {row + 1}, column {column + 1}"
        if node.has_error:
            stack.extend(reversed(node.children))
    return "syntax error"


@dataclass
class _Members:
    fields: List[Field] = field(default_factory=list)
    properties: List[Property] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)
    constructors: List[Constructor] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)


class _FileWalker:
    """Walks one syntax tree; every text slice comes from the original bytes."""

    def __init__(self, source_bytes: bytes) -> None:
        self._source = source_bytes

    def build(self, path: str, text: str, root: Node) -> SourceFile:
        imports: List[str] = []
        annotations: List[Annotation] = []
        namespaces: List[Tuple[str, List[Declaration]]] = []
        top_level: List[Declaration] = []
        file_scoped: Optional[List[Declaration]] = None

        for child in root.named_children:
            kind = child.type
            if kind == "using_directive":
                imports.append(self._using_name(child))
            elif kind in _GLOBAL_ATTRIBUTE_NODES:
                if self._targets_assembly(child):
                    annotations.extend(self._attributes(child))
            elif kind == "namespace_declaration":
                namespaces.extend(self._block_namespaces(child, "", imports))
            elif kind == "file_scoped_namespace_declaration":
                # Older grammars nest the members; newer ones leave them as siblings.
                file_scoped = []
                for inner in child.named_children:
                    if inner.type == "using_directive":
                        imports.append(self._using_name(inner))
                    elif inner.type in _TYPE_NODES:
                        file_scoped.append(self._declaration(inner))
                namespaces.append((self._field_text(child, "name"), file_scoped))
            elif kind in _TYPE_NODES:
                target = file_scoped if file_scoped is not None else top_level
                target.append(self._declaration(child))

        return SourceFile(
            path=path,
            raw_text=text,
            imports=tuple(imports),
            annotations=tuple(annotations),
            namespaces=tuple(Namespace(name=name, members=tuple(members)) for name, members in namespaces),
            declarations=tuple(top_level),
        )

    # ------------------------------------------------------------------
    # File level

    def _using_name(self, node: Node) -> str:
        text = self._text(node).strip().rstrip(";").strip()
        parts = text.split(None, 1)
        while parts and parts[0] in _USING_KEYWORDS:
            text = parts[1] if len(parts) > 1 else ""
            parts = text.split(None, 1)
        if "=" in text:
            text = text.split("=", 1)[1]
        return " ".join(text.split())

    def _targets_assembly(self, node: Node) -> bool:
        for child in node.children:
            if child.type == "attribute_target_specifier":
                return self._text(child).startswith("assembly")
            if child.type == "assembly":
                return True
        return False

    def _block_namespaces(
        self, node: Node, prefix: str, imports: List[str]
    ) -> List[Tuple[str, List[Declaration]]]:
        name = self._field_text(node, "name")
        qualified = f"{prefix}.{name}" if prefix else name
        members: List[Declaration] = []
        result: List[Tuple[str, List[Declaration]]] = [(qualified, members)]

        body = self._child(node, "body", ("declaration_list",))
        if body is None:
            return result
        for child in body.named_children:
            if child.type in _TYPE_NODES:
                members.append(self._declaration(child))
            elif child.type == "namespace_declaration":
                result.extend(self._block_namespaces(child, qualified, imports))
            elif child.type == "using_directive":
                imports.append(self._using_name(child))
        return result

    # ------------------------------------------------------------------
    # Declarations

    def _declaration(self, node: Node) -> Declaration:
        kind = node.type
        name = self._declared_name(node)
        modifiers = self._modifiers(node)
        annotations = self._own_annotations(node)

        if kind == "enum_declaration":
            return EnumDeclaration(
                name=name,
                modifiers=modifiers,
                annotations=annotations,
                members=self._enum_members(node),
            )

        members = self._members(self._child(node, "body", ("declaration_list",)))
        if kind == "interface_declaration":
            return InterfaceDeclaration(
                name=name,
                modifiers=modifiers,
                annotations=annotations,
                base_interfaces=self._base_types(node),
                methods=tuple(members.methods),
                properties=tuple(members.properties),
            )
        if kind == "struct_declaration":
            return StructDeclaration(
                name=name,
                modifiers=modifiers,
                annotations=annotations,
                fields=tuple(members.fields),
                properties=tuple(members.properties),
                methods=tuple(members.methods),
                constructors=tuple(members.constructors),
            )
        if kind in ("record_declaration", "record_struct_declaration"):
            return RecordDeclaration(
                name=name,
                modifiers=modifiers,
                annotations=annotations,
                base_types=self._base_types(node),
                fields=tuple(members.fields),
                properties=tuple(members.properties),
                methods=tuple(members.methods),
                constructors=tuple(members.constructors),
            )
        return ClassDeclaration(
            name=name,
            modifiers=modifiers,
            annotations=annotations,
            base_types=self._base_types(node),
            fields=tuple(members.fields),
            properties=tuple(members.properties),
            methods=tuple(members.methods),
            constructors=tuple(members.constructors),
            events=tuple(members.events),
        )

    def _base_types(self, node: Node) -> Tuple[str, ...]:
        base_list = self._first_child_of_type(node, ("base_list",))
        if base_list is None:
            return ()
        names: List[str] = []
        for child in base_list.named_children:
            if child.type in ("comment", "argument_list"):
                continue
            if child.type == "primary_constructor_base_type":
                type_node = child.child_by_field_name("type") or _first_named(child)
                if type_node is not None:
                    names.append(self._text(type_node))
                continue
            names.append(self._text(child))
        return tuple(names)

    def _enum_members(self, node: Node) -> Tuple[EnumMember, ...]:
        body = self._child(node, "body", ("enum_member_declaration_list",))
        if body is None:
            return ()
        members = []
        for child in body.named_children:
            if child.type != "enum_member_declaration":
                continue
            name_node = child.child_by_field_name("name") or self._first_child_of_type(child, ("identifier",))
            members.append(
                EnumMember(
                    name=self._text(name_node) if name_node is not None else "",
                    value=self._initializer(child),
                )
            )
        return tuple(members)

    # ------------------------------------------------------------------
    # Members

    def _members(self, body: Optional[Node]) -> _Members:
        members = _Members()
        if body is None:
            return members
        for child in body.named_children:
            kind = child.type
            if kind == "field_declaration":
                members.fields.extend(self._fields(child))
            elif kind == "property_declaration":
                members.properties.append(self._property(child))
            elif kind == "method_declaration":
                members.methods.append(self._method(child))
            elif kind == "constructor_declaration":
                members.constructors.append(self._constructor(child))
            elif kind == "event_declaration":
                members.events.append(self._event(child))
            elif kind == "event_field_declaration":
                members.events.extend(self._event_fields(child))
        return members

    def _variables(self, node: Node) -> Iterator[Tuple[str, Node, str]]:
        """Yield (type, declarator, name) for every variable in a field-like statement."""
        declaration = self._first_child_of_type(node, ("variable_declaration",))
        if declaration is None:
            return
        type_node = declaration.child_by_field_name("type")
        if type_node is None:
            type_node = next(
                (c for c in declaration.named_children if c.type not in ("variable_declarator", "comment")),
                None,
            )
        type_name = self._text(type_node) if type_node is not None else ""
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name") or self._first_child_of_type(
                declarator, ("identifier",)
            )
            yield type_name, declarator, self._text(name_node) if name_node is not None else ""

    def _fields(self, node: Node) -> List[Field]:
        modifiers = self._modifiers(node)
        annotations = self._own_annotations(node)
        return [
            Field(
                name=name,
                type_name=type_name,
                modifiers=modifiers,
                annotations=annotations,
                initializer=self._initializer(declarator),
            )
            for type_name, declarator, name in self._variables(node)
        ]

    def _event_fields(self, node: Node) -> List[Event]:
        modifiers = self._modifiers(node)
        annotations = self._own_annotations(node)
        return [
            Event(name=name, type_name=type_name, modifiers=modifiers, annotations=annotations)
            for type_name, _, name in self._variables(node)
        ]

    def _property(self, node: Node) -> Property:
        accessors: List[str] = []
        getter = ""
        setter = ""
        accessor_list = self._child(node, "accessors", ("accessor_list",))
        if accessor_list is not None:
            for accessor in accessor_list.named_children:
                if accessor.type != "accessor_declaration":
                    continue
                keyword = self._accessor_keyword(accessor)
                if not keyword:
                    continue
                accessors.append(keyword)
                body = self._body(accessor)
                if keyword == "get":
                    getter = body
                else:
                    setter = body
        else:
            arrow = self._first_child_of_type(node, ("arrow_expression_clause",))
            if arrow is not None:
                accessors.append("get")
                getter = self._text(arrow)

        return Property(
            name=self._field_text(node, "name"),
            type_name=self._field_text(node, "type"),
            modifiers=self._modifiers(node),
            annotations=self._own_annotations(node),
            accessors=tuple(accessors),
            getter=getter,
            setter=setter,
        )

    def _accessor_keyword(self, node: Node) -> str:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            keyword = self._text(name_node)
            if keyword in _ACCESSOR_KEYWORDS:
                return keyword
        for child in node.children:
            if child.type in _ACCESSOR_KEYWORDS:
                return child.type
        return ""

    def _method(self, node: Node) -> Method:
        return_node = node.child_by_field_name("returns") or node.child_by_field_name("type")
        return Method(
            name=self._declared_name(node),
            return_type=self._text(return_node) if return_node is not None else "",
            modifiers=self._modifiers(node),
            annotations=self._own_annotations(node),
            parameters=self._parameters(self._child(node, "parameters", ("parameter_list",))),
            body=self._body(node),
        )

    def _constructor(self, node: Node) -> Constructor:
        return Constructor(
            modifiers=self._modifiers(node),
            annotations=self._own_annotations(node),
            parameters=self._parameters(self._child(node, "parameters", ("parameter_list",))),
            body=self._body(node),
        )

    def _event(self, node: Node) -> Event:
        return Event(
            name=self._field_text(node, "name"),
            type_name=self._field_text(node, "type"),
            modifiers=self._modifiers(node),
            annotations=self._own_annotations(node),
        )

    def _parameters(self, parameter_list: Optional[Node]) -> Tuple[Parameter, ...]:
        if parameter_list is None:
            return ()
        parameters = []
        pending: List[Node] = []
        for node in parameter_list.children:
            if node.type in ("parameter", "parameter_array"):
                parameters.append(self._parameter(node))
            elif node.type in (",", ")"):
                # Newer grammars leave ``params T[] name`` unwrapped.
                if pending:
                    parameters.append(self._params_array(pending))
                pending = []
            elif node.type not in ("(", "comment"):
                pending.append(node)
        return tuple(parameters)

    def _parameter(self, node: Node) -> Parameter:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            identifiers = [c for c in node.children if c.type == "identifier"]
            name_node = identifiers[-1] if identifiers else None
        type_node = node.child_by_field_name("type")
        if type_node is None and name_node is not None:
            type_node = next(
                (
                    c
                    for c in node.named_children
                    if c.start_byte < name_node.start_byte
                    and c.type not in ("attribute_list", "modifier", "parameter_modifier", "comment")
                ),
                None,
            )
        modifiers = tuple(
            self._text(c)
            for c in node.children
            if c.type in ("modifier", "parameter_modifier") or c.type in _PARAMETER_MODIFIERS
        )
        return Parameter(
            name=self._text(name_node) if name_node is not None else "",
            type_name=self._text(type_node) if type_node is not None else "",
            modifiers=modifiers,
            annotations=self._own_annotations(node),
            default_value=self._initializer(node),
        )

    def _params_array(self, nodes: List[Node]) -> Parameter:
        annotations: List[Annotation] = []
        typed = [n for n in nodes if n.is_named and n.type != "attribute_list"]
        for node in nodes:
            if node.type == "attribute_list":
                annotations.extend(self._attributes(node))
        name_node = typed[-1] if typed else None
        type_node = typed[-2] if len(typed) > 1 else None
        return Parameter(
            name=self._text(name_node) if name_node is not None else "",
            type_name=self._text(type_node) if type_node is not None else "",
            modifiers=tuple(self._text(n) for n in nodes if n.type in _PARAMETER_MODIFIERS),
            annotations=tuple(annotations),
            default_value="",
        )

    # ------------------------------------------------------------------
    # Shared helpers

    def _modifiers(self, node: Node) -> Tuple[str, ...]:
        return tuple(self._text(child) for child in node.children if child.type == "modifier")

    def _own_annotations(self, node: Node) -> Tuple[Annotation, ...]:
        annotations: List[Annotation] = []
        for child in node.children:
            if child.type == "attribute_list":
                annotations.extend(self._attributes(child))
        return tuple(annotations)

    def _attributes(self, node: Node) -> List[Annotation]:
        annotations = []
        for child in node.named_children:
            if child.type != "attribute":
                continue
            name_node = child.child_by_field_name("name") or _first_named(child)
            argument_list = self._first_child_of_type(child, ("attribute_argument_list",))
            arguments: Tuple[str, ...] = ()
            if argument_list is not None:
                arguments = tuple(
                    self._text(arg) for arg in argument_list.named_children if arg.type == "attribute_argument"
                )
            annotations.append(
                Annotation(name=self._text(name_node) if name_node is not None else "", arguments=arguments)
            )
        return annotations

    def _initializer(self, node: Node) -> str:
        """Text of the ``= value`` part of a declarator, parameter or enum member."""
        for child in node.children:
            if child.type == "equals_value_clause":
                value = _first_named(child)
                return self._text(value) if value is not None else ""
        seen_equals = False
        for child in node.children:
            if seen_equals and child.is_named and child.type != "comment":
                return self._text(child)
            if child.type == "=":
                seen_equals = True
        return ""

    def _body(self, node: Node) -> str:
        body = node.child_by_field_name("body")
        if body is None or body.type not in _BODY_NODES:
            body = self._first_child_of_type(node, _BODY_NODES)
        return self._text(body) if body is not None else ""

    def _child(self, node: Node, field_name: str, types: Tuple[str, ...]) -> Optional[Node]:
        child = node.child_by_field_name(field_name)
        if child is not None and child.type in types:
            return child
        return self._first_child_of_type(node, types)

    @staticmethod
    def _first_child_of_type(node: Node, types: Tuple[str, ...]) -> Optional[Node]:
        for child in node.children:
            if child.type in types:
                return child
        return None

    def _declared_name(self, node: Node) -> str:
        """Declaration name including its generic parameter list, e.g. ``Repository<T>``."""
        name = self._field_text(node, "name")
        type_parameters = node.child_by_field_name("type_parameters") or self._first_child_of_type(
            node, ("type_parameter_list",)
        )
        if type_parameters is None:
            return name
        return name + " ".join(self._text(type_parameters).split())

    def _field_text(self, node: Node, field_name: str) -> str:
        child = node.child_by_field_name(field_name)
        return self._text(child) if child is not None else ""

    def _text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _first_named(node: Node) -> Optional[Node]:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


__all__ = ["CSHARP_LANGUAGE", "CSharpParser"]
