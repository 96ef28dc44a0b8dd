"""Renders declaration models into prompts and the one-off instruction template."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError

from ..errors import Error, PromptError
from ..logging import get_logger
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
    Parameter,
    Property,
    RecordDeclaration,
    SourceFile,
)
from .constants import DOCUMENT_MARKER, INSTRUCTION_SECTIONS, INSTRUCTION_TEMPLATE, SOURCE_LANGUAGE


class PromptAssembler:
    """Turns one source file into a deterministic, diffable prompt.

    Every section label is emitted only when its list is non-empty; the
    constructor and method signature line is always rendered, followed by a
    ``Parameters:`` list when parameters exist and a ``Body:`` block when a
    body exists.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("prompting")

    def assemble(self, source_file: SourceFile) -> str:
        try:
            return self._render(source_file)
        except Exception as exc:
            self.logger.error(
                "Error while generating prompt for file %s: %s", source_file.path, exc
            )
            raise PromptError(
                Error.failure("generation.prompt", "Error while generating prompt")
            ) from exc

    def _render(self, source_file: SourceFile) -> str:
        lines: List[str] = [
            f"File: {source_file.name}",
            f"Location: {source_file.path}",
            "",
        ]

        if source_file.imports:
            lines.append("Imported namespaces:")
            lines.extend(f"- {name}" for name in source_file.imports)
            lines.append("")

        if source_file.annotations:
            lines.append("Assembly attributes:")
            self._append_annotation_items(lines, source_file.annotations)
            lines.append("")

        for namespace in source_file.namespaces:
            lines.append(f"Namespace: {namespace.name}")
            for member in namespace.members:
                self._append_declaration(lines, member)
                lines.append("")

        if source_file.declarations:
            lines.append("Top-level types:")
            for declaration in source_file.declarations:
                self._append_declaration(lines, declaration)
                lines.append("")

        return "\n".join(lines).rstrip("\n") + "\n"

    # ------------------------------------------------------------------
    # Declarations

    def _append_declaration(self, lines: List[str], declaration: Declaration) -> None:
        lines.append(f"{declaration.kind.label}: {declaration.name}")
        if declaration.modifiers:
            lines.append(f"Modifiers: {' '.join(declaration.modifiers)}")
        if declaration.annotations:
            lines.append("Attributes:")
            self._append_annotation_items(lines, declaration.annotations)

        if isinstance(declaration, EnumDeclaration):
            self._append_enum_members(lines, declaration.members)
            return

        if isinstance(declaration, (ClassDeclaration, RecordDeclaration)) and declaration.base_types:
            lines.append(f"Inherits: {', '.join(declaration.base_types)}")
        elif isinstance(declaration, InterfaceDeclaration) and declaration.base_interfaces:
            lines.append(f"Implements: {', '.join(declaration.base_interfaces)}")

        self._append_fields(lines, getattr(declaration, "fields", ()))
        self._append_properties(lines, declaration.properties)
        self._append_constructors(lines, getattr(declaration, "constructors", ()), declaration.name)
        self._append_methods(lines, declaration.methods)
        self._append_events(lines, getattr(declaration, "events", ()))

    def _append_enum_members(self, lines: List[str], members: Sequence[EnumMember]) -> None:
        if not members:
            return
        lines.append("")
        lines.append("Members:")
        for member in members:
            lines.append(f"- {member.name} = {member.value}" if member.value else f"- {member.name}")

    # ------------------------------------------------------------------
    # Members

    def _append_fields(self, lines: List[str], fields: Sequence[Field]) -> None:
        if not fields:
            return
        lines.append("")
        lines.append("Fields:")
        for field in fields:
            lines.append(f"- {_join(*field.modifiers, field.type_name, field.name)}")
            self._append_member_annotations(lines, field.annotations)
            if field.initializer:
                lines.append(f"  Initializer: {field.initializer}")

    def _append_properties(self, lines: List[str], properties: Sequence[Property]) -> None:
        if not properties:
            return
        lines.append("")
        lines.append("Properties:")
        for prop in properties:
            accessors = " ".join(f"{accessor};" for accessor in prop.accessors)
            block = f"{{ {accessors} }}" if accessors else "{ }"
            lines.append(f"- {_join(*prop.modifiers, prop.type_name, prop.name)} {block}")
            self._append_member_annotations(lines, prop.annotations)
            if prop.getter:
                lines.append("  Getter:")
                lines.append(prop.getter)
            if prop.setter:
                lines.append("  Setter:")
                lines.append(prop.setter)

    def _append_constructors(
        self, lines: List[str], constructors: Sequence[Constructor], type_name: str
    ) -> None:
        if not constructors:
            return
        lines.append("")
        lines.append("Constructors:")
        for ctor in constructors:
            signature = f"{type_name}({_parameter_list(ctor.parameters)})"
            lines.append(f"- {_join(*ctor.modifiers, signature)}")
            self._append_member_annotations(lines, ctor.annotations)
            self._append_parameters(lines, ctor.parameters)
            self._append_body(lines, ctor.body)

    def _append_methods(self, lines: List[str], methods: Sequence[Method]) -> None:
        if not methods:
            return
        lines.append("")
        lines.append("Methods:")
        for method in methods:
            signature = f"{method.name}({_parameter_list(method.parameters)})"
            lines.append(f"- {_join(*method.modifiers, method.return_type, signature)}")
            self._append_member_annotations(lines, method.annotations)
            self._append_parameters(lines, method.parameters)
            self._append_body(lines, method.body)

    def _append_events(self, lines: List[str], events: Sequence[Event]) -> None:
        if not events:
            return
        lines.append("")
        lines.append("Events:")
        for event in events:
            lines.append(f"- {_join(*event.modifiers, event.type_name, event.name)}")
            self._append_member_annotations(lines, event.annotations)

    def _append_parameters(self, lines: List[str], parameters: Sequence[Parameter]) -> None:
        if not parameters:
            return
        lines.append("  Parameters:")
        for param in parameters:
            lines.append(f"  - {_join(*param.modifiers, param.type_name, param.name)}")
            if param.annotations:
                lines.append(f"    Attributes: {_annotation_list(param.annotations)}")
            if param.default_value:
                lines.append(f"    Default: {param.default_value}")

    @staticmethod
    def _append_body(lines: List[str], body: str) -> None:
        if body:
            lines.append("  Body:")
            lines.append(body)

    @staticmethod
    def _append_member_annotations(lines: List[str], annotations: Sequence[Annotation]) -> None:
        if annotations:
            lines.append(f"  Attributes: {_annotation_list(annotations)}")

    @staticmethod
    def _append_annotation_items(lines: List[str], annotations: Iterable[Annotation]) -> None:
        for annotation in annotations:
            lines.append(f"- {annotation.name}")
            if annotation.arguments:
                lines.append(f"  Arguments: {', '.join(annotation.arguments)}")


class InstructionTemplate:
    """Renders the instruction sent once per run before any file prompt."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        language: str = SOURCE_LANGUAGE,
        marker: str = DOCUMENT_MARKER,
    ) -> None:
        self.templates_dir = templates_dir
        self.language = language
        self.marker = marker
        self._env = self._create_env(templates_dir)

    def render(self) -> str:
        try:
            template = self._env.get_template(INSTRUCTION_TEMPLATE)
            return template.render(
                language=self.language,
                marker=self.marker,
                sections=INSTRUCTION_SECTIONS,
            )
        except TemplateError as exc:
            raise PromptError(
                Error.failure("prompt.template", f"Failed to render instruction template: {exc}")
            ) from exc

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def _parameter_list(parameters: Sequence[Parameter]) -> str:
    return ", ".join(_join(*param.modifiers, param.type_name, param.name) for param in parameters)


def _annotation_list(annotations: Sequence[Annotation]) -> str:
    return ", ".join(
        f"{annotation.name}({', '.join(annotation.arguments)})" if annotation.arguments else annotation.name
        for annotation in annotations
    )


__all__ = ["InstructionTemplate", "PromptAssembler"]
