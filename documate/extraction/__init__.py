"""Source model extraction: project detection, scanning and per-file parsing."""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import ExtractionConfig
from ..errors import Error, ExtractionError
from ..logging import get_logger
from ..models import ProjectModel, SourceFile
from ..source_scanner import SourceScanner
from .base import SourceParser, SyntaxFailure
from .csharp import CSharpParser


class ProjectExtractor:
    """Builds the declaration model for every source file of a project.

    Extraction is fail-fast: an unreadable or unparsable file aborts the run
    with a ``file.analyze`` failure naming the offending path.
    """

    def __init__(
        self,
        scanner: SourceScanner | None = None,
        parser: SourceParser | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.parser = parser or CSharpParser()
        self.scanner = scanner or SourceScanner(suffixes=self.parser.suffixes)
        self.logger = logger or get_logger("extraction")

    @classmethod
    def from_config(
        cls, config: ExtractionConfig, *, logger: logging.Logger | None = None
    ) -> "ProjectExtractor":
        parser = CSharpParser(strict_syntax=config.strict_syntax)
        scanner = SourceScanner(suffixes=parser.suffixes, exclude_paths=config.exclude_paths)
        return cls(scanner, parser, logger=logger)

    def extract(self, project_root: str | Path) -> ProjectModel:
        root = Path(project_root).expanduser().resolve()
        if not root.is_dir():
            self.logger.warning("Project directory %s does not exist", root)
            raise ExtractionError(Error.not_found("Project directory", code="project.not.found"))

        if not self.scanner.find_markers(root):
            self.logger.warning("In folder %s there is no %s file", root, self.scanner.marker_glob)
            raise ExtractionError(Error.not_found("Solution file"))

        files = []
        for path in self.scanner.scan(root):
            files.append(self._extract_file(path))

        self.logger.info("Extracted %d source files from %s", len(files), root)
        return ProjectModel(root=str(root), name=root.name, files=tuple(files))

    def _extract_file(self, path: Path) -> SourceFile:
        try:
            text = path.read_text(encoding="utf-8-sig")
            return self.parser.parse(str(path), text)
        except (OSError, UnicodeDecodeError, SyntaxFailure) as exc:
            self.logger.error("Error analyzing file %s: %s", path, exc)
            raise ExtractionError(
                Error.failure("file.analyze", f"Error analyzing file {path}: {exc}")
            ) from exc


__all__ = ["CSharpParser", "ProjectExtractor", "SourceParser", "SyntaxFailure"]
