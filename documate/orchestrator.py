"""Pipeline orchestration: extract, generate, then publish documentation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .cancellation import CancellationToken, ensure_token
from .config import DocumateConfig
from .extraction import ProjectExtractor
from .generation import DocumentationGenerator
from .llm.runner import LLMRunner
from .logging import get_logger
from .prompting import InstructionTemplate, PromptAssembler
from .storage import MinioObjectStore, MongoArtifactRepository
from .synchronizer import ArtifactSynchronizer


@dataclass
class RunSummary:
    """Result of one documentation run."""

    project: str
    bucket: str
    extracted: int
    documented: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    uploaded: List[str] = field(default_factory=list)


class Orchestrator:
    """Coordinates a single documentation run for one project.

    Stages run strictly in sequence. Extraction and template priming
    failures stop the run before anything is published; per-file generation
    failures only shrink the published set.
    """

    def __init__(
        self,
        config: DocumateConfig | None = None,
        *,
        extractor: ProjectExtractor | None = None,
        runner: LLMRunner | None = None,
        generator: DocumentationGenerator | None = None,
        synchronizer: ArtifactSynchronizer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or DocumateConfig()
        self.logger = logger or get_logger("orchestrator")
        self.extractor = extractor or ProjectExtractor.from_config(self.config.extraction)
        self.runner = runner or LLMRunner.from_config(self.config.llm)
        self.generator = generator or DocumentationGenerator(
            PromptAssembler(),
            InstructionTemplate(self.config.prompting.templates_dir),
        )
        self._synchronizer = synchronizer

    @property
    def synchronizer(self) -> ArtifactSynchronizer:
        # Store clients are only built when a run reaches publishing.
        if self._synchronizer is None:
            self._synchronizer = ArtifactSynchronizer(
                MinioObjectStore.from_config(self.config.storage),
                MongoArtifactRepository.from_config(self.config.metadata),
            )
        return self._synchronizer

    def run(self, project_path: str | Path, cancellation: CancellationToken | None = None) -> RunSummary:
        token = ensure_token(cancellation)
        self.logger.info("Starting documentation run for %s", project_path)

        project = self.extractor.extract(project_path)
        self.logger.debug("Extractor produced %d source files", len(project.files))

        session = self.runner.open_session()
        report = self.generator.generate(session, project.files, token)
        for path in report.skipped_paths:
            self.logger.warning("No documentation generated for %s", path)

        synchronizer = self.synchronizer
        uploaded = synchronizer.sync(report.documents, project.root, token)

        summary = RunSummary(
            project=project.root,
            bucket=synchronizer.bucket_for(project.root),
            extracted=len(project.files),
            documented=list(report.documents),
            skipped=report.skipped_paths,
            uploaded=uploaded,
        )
        self.logger.info(
            "Documentation run finished: %d documented, %d skipped, %d uploaded",
            len(summary.documented),
            len(summary.skipped),
            len(summary.uploaded),
        )
        return summary


__all__ = ["Orchestrator", "RunSummary"]
