"""Per-file documentation generation over a single chat session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List

from .cancellation import CancellationToken, ensure_token
from .errors import Error, FileOutcome, OperationCancelled, PipelineError
from .llm.session import ChatSession
from .logging import get_logger
from .models import SourceFile
from .prompting import InstructionTemplate, PromptAssembler


@dataclass
class GenerationReport:
    """Documents produced by one run plus the files that were skipped."""

    documents: Dict[str, str] = field(default_factory=dict)
    skipped: List[FileOutcome[str]] = field(default_factory=list)

    @property
    def skipped_paths(self) -> List[str]:
        return [outcome.path for outcome in self.skipped]


class DocumentationGenerator:
    """Primes the session with the instruction template, then documents files one by one.

    A file whose prompt cannot be assembled or whose reply fails is skipped
    and logged; the remaining files are still attempted. Cancellation is not
    a per-file failure and propagates to the caller.
    """

    def __init__(
        self,
        assembler: PromptAssembler | None = None,
        template: InstructionTemplate | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or get_logger("generation")
        self.assembler = assembler or PromptAssembler(logger=self.logger)
        self.template = template or InstructionTemplate()

    def prime(self, session: ChatSession, cancellation: CancellationToken | None = None) -> None:
        token = ensure_token(cancellation)
        try:
            instruction = self.template.render()
            session.drain(instruction, cancellation=token)
        except OperationCancelled:
            raise
        except Exception as exc:
            self.logger.error("Error while sending docs template: %s", exc)
            raise PipelineError(
                Error.failure("send.docs.template", f"Error while sending docs template: {exc}")
            ) from exc

    def iter_documents(
        self,
        session: ChatSession,
        files: Iterable[SourceFile],
        cancellation: CancellationToken | None = None,
    ) -> Iterator[FileOutcome[str]]:
        """Yield one outcome per file in order; callers prime the session first."""
        token = ensure_token(cancellation)
        for source_file in files:
            token.raise_if_cancelled("documentation generation")
            yield self._document(session, source_file, token)

    def generate(
        self,
        session: ChatSession,
        files: Iterable[SourceFile],
        cancellation: CancellationToken | None = None,
    ) -> GenerationReport:
        self.prime(session, cancellation)
        report = GenerationReport()
        for outcome in self.iter_documents(session, files, cancellation):
            if outcome.ok:
                report.documents[outcome.path] = outcome.value or ""
            else:
                report.skipped.append(outcome)
        self.logger.info(
            "Generated %d documents (%d skipped)", len(report.documents), len(report.skipped)
        )
        return report

    def _document(
        self, session: ChatSession, source_file: SourceFile, token: CancellationToken
    ) -> FileOutcome[str]:
        try:
            prompt = self.assembler.assemble(source_file)
        except PipelineError as exc:
            self.logger.error("Skipping %s: %s", source_file.path, exc)
            return FileOutcome.skipped(source_file.path, exc.error)

        try:
            document = session.complete(prompt, cancellation=token)
        except OperationCancelled:
            raise
        except Exception as exc:
            self.logger.error("Error while generating documentation for file %s: %s", source_file.path, exc)
            return FileOutcome.skipped(
                source_file.path,
                Error.failure("generation.documentation", "Error while generating documentation"),
            )

        self.logger.debug("Documented %s (%d chars)", source_file.path, len(document))
        return FileOutcome.success(source_file.path, document)


__all__ = ["DocumentationGenerator", "GenerationReport"]
