"""Tests for prompt assembly and the instruction template."""

from __future__ import annotations

from pathlib import Path

import pytest

from documate.errors import PromptError
from documate.extraction import CSharpParser
from documate.models import (
    Annotation,
    ClassDeclaration,
    Constructor,
    EnumDeclaration,
    EnumMember,
    Field,
    InterfaceDeclaration,
    Method,
    Namespace,
    Parameter,
    Property,
    SourceFile,
)
from documate.prompting import DOCUMENT_MARKER, InstructionTemplate, PromptAssembler


def _calculator() -> SourceFile:
    calc = ClassDeclaration(
        name="Calc",
        modifiers=("public",),
        fields=(Field(name="x", type_name="int", modifiers=("private",)),),
        methods=(
            Method(
                name="Add",
                return_type="int",
                modifiers=("public",),
                parameters=(
                    Parameter(name="a", type_name="int"),
                    Parameter(name="b", type_name="int", default_value="0"),
                ),
                body="=> a + b",
            ),
        ),
    )
    return SourceFile(
        path="src/Calc.cs",
        raw_text="",
        imports=("System",),
        namespaces=(Namespace(name="Demo", members=(calc,)),),
    )


def test_assembler_renders_exact_layout() -> None:
    prompt = PromptAssembler().assemble(_calculator())

    assert prompt == (
        "File: Calc.cs\n"
        "Location: src/Calc.cs\n"
        "\n"
        "Imported namespaces:\n"
        "- System\n"
        "\n"
        "Namespace: Demo\n"
        "Class: Calc\n"
        "Modifiers: public\n"
        "\n"
        "Fields:\n"
        "- private int x\n"
        "\n"
        "Methods:\n"
        "- public int Add(int a, int b)\n"
        "  Parameters:\n"
        "  - int a\n"
        "  - int b\n"
        "    Default: 0\n"
        "  Body:\n"
        "=> a + b\n"
    )


def test_assembler_omits_empty_sections() -> None:
    source = SourceFile(
        path="Empty.cs",
        raw_text="",
        namespaces=(Namespace(name="N", members=(ClassDeclaration(name="Empty"),)),),
    )

    prompt = PromptAssembler().assemble(source)

    assert prompt == "File: Empty.cs\nLocation: Empty.cs\n\nNamespace: N\nClass: Empty\n"
    for label in ("Imported namespaces:", "Fields:", "Methods:", "Parameters:", "Body:", "Modifiers:"):
        assert label not in prompt


def test_assembler_always_renders_signatures() -> None:
    ctor = Constructor(modifiers=("public",))
    method = Method(name="Reset", return_type="void")
    source = SourceFile(
        path="Counter.cs",
        raw_text="",
        declarations=(ClassDeclaration(name="Counter", constructors=(ctor,), methods=(method,)),),
    )

    prompt = PromptAssembler().assemble(source)

    assert "Top-level types:\nClass: Counter\n" in prompt
    assert "Constructors:\n- public Counter()\n" in prompt
    assert "Methods:\n- void Reset()\n" in prompt
    assert "Parameters:" not in prompt
    assert "Body:" not in prompt


def test_assembler_renders_members_and_attributes() -> None:
    prop = Property(
        name="Name",
        type_name="string",
        modifiers=("public",),
        annotations=(Annotation(name="Required"),),
        accessors=("get", "set"),
        getter="{ return _name; }",
    )
    service = ClassDeclaration(
        name="Service",
        annotations=(Annotation(name="Route", arguments=('"api"',)),),
        base_types=("Base", "IService"),
        properties=(prop,),
    )
    contract = InterfaceDeclaration(name="IService", base_interfaces=("IDisposable",))
    color = EnumDeclaration(name="Color", members=(EnumMember("Red", "1"), EnumMember("Green")))
    source = SourceFile(
        path="Service.cs",
        raw_text="",
        annotations=(Annotation(name="InternalsVisibleTo", arguments=('"Tests"',)),),
        namespaces=(Namespace(name="App", members=(service, contract, color)),),
    )

    prompt = PromptAssembler().assemble(source)

    assert 'Assembly attributes:\n- InternalsVisibleTo\n  Arguments: "Tests"\n' in prompt
    assert 'Class: Service\nAttributes:\n- Route\n  Arguments: "api"\nInherits: Base, IService\n' in prompt
    assert (
        "Properties:\n"
        "- public string Name { get; set; }\n"
        "  Attributes: Required\n"
        "  Getter:\n"
        "{ return _name; }\n"
    ) in prompt
    assert "Interface: IService\nImplements: IDisposable\n" in prompt
    assert "Enum: Color\n\nMembers:\n- Red = 1\n- Green\n" in prompt


def test_assembler_output_is_deterministic_for_parsed_source() -> None:
    text = """\
using System;

namespace Demo
{
    public class Greeter
    {
        private readonly string _greeting = "Hello";

        public string Greet(string name) => $"{_greeting}, {name}";
    }
}
"""
    parser = CSharpParser()
    assembler = PromptAssembler()

    first = assembler.assemble(parser.parse("Greeter.cs", text))
    second = assembler.assemble(parser.parse("Greeter.cs", text))

    assert first == second
    assert "- private readonly string _greeting\n  Initializer: \"Hello\"\n" in first
    assert "- public string Greet(string name)\n" in first


def test_assembler_wraps_failures(test_logger) -> None:
    source = SourceFile(
        path="Bad.cs",
        raw_text="",
        namespaces=(Namespace(name="N", members=(object(),)),),  # type: ignore[arg-type]
    )

    with pytest.raises(PromptError) as excinfo:
        PromptAssembler(logger=test_logger).assemble(source)

    assert excinfo.value.code == "generation.prompt"


def test_instruction_template_requires_marker() -> None:
    text = InstructionTemplate().render()

    assert text.startswith("You need to generate documentation for several C# files")
    assert f'start with "{DOCUMENT_MARKER}"' in text
    for index, title in enumerate(
        ("File Overview", "Dependencies", "Code Structure", "Members", "Usage Examples"), start=1
    ):
        assert f"{index}. {title}\n" in text
    assert "   - Fields: [name, type, description]\n" in text
    assert text.rstrip().endswith("==================================")


def test_instruction_template_prefers_custom_directory(tmp_path: Path) -> None:
    (tmp_path / "instruction.j2").write_text("Custom {{ language }} {{ marker }}", encoding="utf-8")

    text = InstructionTemplate(tmp_path).render()

    assert text == "Custom C# # File Overview"


def test_instruction_template_reports_broken_template(tmp_path: Path) -> None:
    (tmp_path / "instruction.j2").write_text("{% for %}", encoding="utf-8")

    with pytest.raises(PromptError) as excinfo:
        InstructionTemplate(tmp_path).render()

    assert excinfo.value.code == "prompt.template"
