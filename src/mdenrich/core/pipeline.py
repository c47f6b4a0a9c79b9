"""Plugin pipeline: ordered enhancers, content passes, validators, and batch runs"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Iterable, Optional

from loguru import logger

from mdenrich.config import Settings
from mdenrich.core.frontmatter import FrontmatterRepair
from mdenrich.core.models import DocumentMetadata, ProcessingContext, QualityReport, RepairResult
from mdenrich.core.toc import TocBuilder
from mdenrich.errors import PluginError
from mdenrich.plugins.registry import PluginRegistry, default_registry


@dataclass
class PipelineResult:
    metadata: DocumentMetadata
    content:  str
    repair:   Optional[RepairResult] = None
    reports:  list[tuple[str, QualityReport]] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)


@dataclass
class BatchItem:
    """One batch outcome; exactly one of `result` and `error` is set."""
    context: ProcessingContext
    result:  Optional[PipelineResult] = None
    error:   Optional[str] = None


class Pipeline:
    """Runs a frozen plugin registry over documents.

    Enhancer and validator failures are logged and isolated; a document is never
    aborted because one plugin raised.
    """

    def __init__(
        self,
        registry: PluginRegistry = None,
        settings: Settings = None,
        repair: FrontmatterRepair = None,
        toc: TocBuilder = None,
        ):
        self.settings = settings or Settings()
        self.registry = registry or default_registry(self.settings)
        self.repair = repair or FrontmatterRepair.from_settings(self.settings)
        self.toc = toc or TocBuilder.from_settings(self.settings)

    def run(
        self,
        content: str,
        metadata: DocumentMetadata = None,
        context: ProcessingContext = None,
        ) -> PipelineResult:
        self.registry.freeze()
        context = _with_content(context or ProcessingContext.for_path("document.md", options=self.settings), content)
        metadata = metadata if metadata is not None else DocumentMetadata()
        failures: list[str] = []

        for enhancer in self.registry.enhancers():
            try:
                enhanced = enhancer.enhance(metadata.model_copy(deep=True), context)
                if not isinstance(enhanced, DocumentMetadata):
                    raise PluginError(f"returned {type(enhanced).__name__}, expected DocumentMetadata")
                metadata = enhanced
            except Exception as e:
                logger.warning("Enhancer {} failed on {}: {}", enhancer.info.name, context.input_path, e)
                failures.append(enhancer.info.name)

        repair = None
        if self.settings.repair_frontmatter:
            repair = self.repair.repair_frontmatter(content, context.input_path)
            if repair.success:
                content = repair.repaired_content
            else:
                logger.warning("Frontmatter repair failed on {}: {}", context.input_path, "; ".join(repair.issues))
        if self.settings.generate_toc:
            content = self.toc.insert_toc_into_content(content)

        reports: list[tuple[str, QualityReport]] = []
        if self.settings.validate_content:
            for validator in self.registry.validators():
                try:
                    report = validator.validate(content, metadata.model_copy(deep=True), context)
                    if not isinstance(report, QualityReport):
                        raise PluginError(f"returned {type(report).__name__}, expected QualityReport")
                except Exception as e:
                    logger.warning("Validator {} failed on {}: {}", validator.info.name, context.input_path, e)
                    failures.append(validator.info.name)
                    continue
                reports.append((validator.info.name, report))

        logger.info(
            "Processed {} ({} tag(s), {} report(s), {} failure(s))",
            context.input_path, len(metadata.tags), len(reports), len(failures),
        )
        return PipelineResult(metadata=metadata, content=content, repair=repair, reports=reports, failures=failures)

    def run_context(self, context: ProcessingContext) -> PipelineResult:
        """Run a document whose content comes from the context (side channel or disk)."""
        return self.run(context.content(), DocumentMetadata(), context)

    def run_batch(
        self,
        documents: Iterable[ProcessingContext],
        max_workers: int = None,
        timeout: float = None,
        ) -> list[BatchItem]:
        """Run independent documents concurrently; one BatchItem per input, in input order.

        A timed-out document is reported as an error, but its worker thread is not
        interrupted and runs to completion in the background.
        """
        documents = list(documents)
        self.registry.freeze()
        timeout = timeout if timeout is not None else self.settings.document_timeout
        executor = ThreadPoolExecutor(max_workers=max_workers or self.settings.max_workers)
        try:
            futures = [executor.submit(self.run_context, ctx) for ctx in documents]
            items = []
            for ctx, future in zip(documents, futures):
                try:
                    items.append(BatchItem(context=ctx, result=future.result(timeout=timeout)))
                except FutureTimeout:
                    logger.warning("Timed out after {}s processing {}", timeout, ctx.input_path)
                    items.append(BatchItem(context=ctx, error=f"Timed out after {timeout}s"))
                except Exception as e:
                    logger.warning("Failed processing {}: {}", ctx.input_path, e)
                    items.append(BatchItem(context=ctx, error=str(e) or type(e).__name__))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return items


def _with_content(context: ProcessingContext, content: str) -> ProcessingContext:
    if context.data.get("content") == content:
        return context
    return context.model_copy(update={"data": {**context.data, "content": content}})
