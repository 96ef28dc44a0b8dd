"""Shared constants for documentation prompting."""

from __future__ import annotations

DOCUMENT_MARKER = "# File Overview"

INSTRUCTION_TEMPLATE = "instruction.j2"

SOURCE_LANGUAGE = "C#"

INSTRUCTION_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "File Overview",
        (
            "File Name: [filename]",
            "Location: [path]",
            "Purpose: [brief description of file's purpose]",
        ),
    ),
    (
        "Dependencies",
        (
            "Namespaces: [list of used namespaces]",
            "Assembly Attributes: [if any]",
        ),
    ),
    (
        "Code Structure",
        (
            "For each class/struct/interface/enum/record:",
            "Name: [name]",
            "Type: [class/struct/interface/enum/record]",
            "Modifiers: [public/private/etc]",
            "Inheritance: [base types/interfaces]",
            "Description: [detailed description of purpose and functionality]",
        ),
    ),
    (
        "Members",
        (
            "Fields: [name, type, description]",
            "Properties: [name, type, get/set accessors, description]",
            "Methods: [name, parameters, return type, description]",
            "Events: [name, type, description]",
        ),
    ),
    (
        "Usage Examples",
        ("Please provide typical usage scenarios, code examples if applicable",),
    ),
)


__all__ = ["DOCUMENT_MARKER", "INSTRUCTION_SECTIONS", "INSTRUCTION_TEMPLATE", "SOURCE_LANGUAGE"]
