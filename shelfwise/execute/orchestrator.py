"""
Batch classification orchestrator.

Files many records in one invocation. Each directive runs a fixed
pipeline of steps and stops at its first failing step; other directives
are unaffected. Steps are not transactional: mutations made before a
failure stay committed.

Pipeline per directive:
  validate -> target -> destination -> rename -> tags -> comment
  -> metadata -> move, then an optional replicate whose failure is only
  recorded in the operation log ("soft failure").
"""

import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from shelfwise.errors import ExternalOperationError, ShelfError, ValidationError
from shelfwise.execute.journaling import Journal
from shelfwise.resolve.containers import ContainerResolver, PathCache
from shelfwise.resolve.entities import EntityResolver
from shelfwise.resolve.fuzzy import FuzzyContainerMatcher
from shelfwise.schemas import (
    BatchReport,
    Database,
    Directive,
    DirectiveError,
    DirectiveResult,
    Entity,
    ResolutionRequest,
)
from shelfwise.store.client import StoreClient


@dataclass
class StepResult:
    ok: bool
    label: Optional[str] = None  # None for steps that did not apply
    error: Optional[ShelfError] = None

    @classmethod
    def success(cls, label: Optional[str] = None) -> "StepResult":
        return cls(ok=True, label=label)

    @classmethod
    def skipped(cls) -> "StepResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ShelfError) -> "StepResult":
        return cls(ok=False, error=error)


@dataclass
class DirectiveContext:
    """State accumulated while one directive moves through the pipeline."""
    directive: Directive
    entity: Optional[Entity] = None
    database: Optional[Database] = None
    destination: Optional[Entity] = None
    operations: List[str] = field(default_factory=list)
    replicated_to: Optional[str] = None

    @property
    def reference(self) -> str:
        return self.directive.target_reference or "unknown"


Step = Callable[[DirectiveContext], StepResult]


class BatchOrchestrator:

    def __init__(
            self,
            store: StoreClient,
            cache: Optional[PathCache] = None,
            journal: Optional[Journal] = None,
            create_missing_default: bool = True,
    ):
        self.store = store
        self.cache = cache if cache is not None else PathCache()
        self.journal = journal
        self.create_missing_default = create_missing_default
        self.containers = ContainerResolver(store, self.cache)
        self.matcher = FuzzyContainerMatcher(store, self.cache)
        self.entities = EntityResolver(store)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def classify_batch(self, directives: Iterable[Union[Directive, Any]]) -> BatchReport:
        """
        Run every directive in input order and collect the aggregate report.

        Only ShelfError is contained per directive; anything else aborts the
        rest of the batch, leaving earlier directives committed.
        """
        report = BatchReport()
        items = list(directives)
        report.processed = len(items)

        for index, item in enumerate(items, start=1):
            outcome = self.classify_one(item)
            if isinstance(outcome, DirectiveResult):
                report.results.append(outcome)
                print(f"[shelf] [{index}/{len(items)}] OK {outcome.reference} -> {outcome.location}",
                      file=sys.stderr)
            else:
                report.errors.append(outcome)
                print(f"[shelf] [{index}/{len(items)}] ERROR {outcome.reference} ({outcome.step}): {outcome.error}",
                      file=sys.stderr)

        print(f"[shelf] processed={report.processed} succeeded={report.succeeded} failed={report.failed}",
              file=sys.stderr)
        return report

    def classify_one(self, item: Union[Directive, Any]) -> Union[DirectiveResult, DirectiveError]:
        if isinstance(item, Directive):
            directive = item
        elif isinstance(item, dict):
            try:
                directive = Directive.from_dict(item, self.create_missing_default)
            except ValidationError as e:
                reference = Directive.reference_in(item) or "unknown"
                if self.journal is not None:
                    self.journal.log_error(str(reference), "validate", str(e))
                return DirectiveError(reference, "validate", str(e))
        else:
            return DirectiveError("unknown", "validate", "Directive must be a JSON object")

        ctx = DirectiveContext(directive=directive)
        for name, step in self._pipeline():
            result = self._run_step(step, ctx)
            if not result.ok:
                if self.journal is not None:
                    self.journal.log_error(ctx.reference, name, str(result.error))
                return DirectiveError(ctx.reference, name, str(result.error), list(ctx.operations))
            if result.label:
                ctx.operations.append(result.label)

        self._replicate(ctx)

        return DirectiveResult(
            reference=ctx.reference,
            name=ctx.entity.name,
            location=ctx.entity.location,
            database=ctx.entity.database,
            operations=ctx.operations,
            replicate_path=ctx.replicated_to,
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _pipeline(self) -> List[Tuple[str, Step]]:
        return [
            ("validate", self._validate),
            ("target", self._resolve_target),
            ("destination", self._resolve_destination),
            ("rename", self._rename),
            ("tags", self._tag),
            ("comment", self._comment),
            ("metadata", self._merge_metadata),
            ("move", self._move),
        ]

    @staticmethod
    def _run_step(step: Step, ctx: DirectiveContext) -> StepResult:
        try:
            return step(ctx)
        except ShelfError as e:
            return StepResult.failure(e)

    def _validate(self, ctx: DirectiveContext) -> StepResult:
        d = ctx.directive
        if not d.target_reference:
            raise ValidationError("Missing required field: uuid")
        if not d.database:
            raise ValidationError("Missing required field: database")
        if not d.destination_path:
            raise ValidationError("Missing required field: groupPath")
        for key, value in (
                ("uuid", d.target_reference),
                ("database", d.database),
                ("groupPath", d.destination_path),
                ("newName", d.rename),
                ("comment", d.comment),
                ("replicateTo", d.replicate_path),
        ):
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{key} must be a string")
        if d.tags is not None and (
                not isinstance(d.tags, list) or not all(isinstance(t, str) for t in d.tags)):
            raise ValidationError("tags must be a list of strings")
        if d.metadata_patch is not None and not isinstance(d.metadata_patch, dict):
            raise ValidationError("customMetadata must be an object")
        return StepResult.skipped()

    def _resolve_target(self, ctx: DirectiveContext) -> StepResult:
        ctx.entity = self.entities.resolve_or_raise(
            ResolutionRequest.by_id(ctx.directive.target_reference)
        )
        return StepResult.skipped()

    def _resolve_destination(self, ctx: DirectiveContext) -> StepResult:
        ctx.database = self.containers.resolve_database(ctx.directive.database)
        resolution = self.matcher.resolve(
            ctx.database, ctx.directive.destination_path, ctx.directive.create_missing
        )
        ctx.destination = resolution.container
        return StepResult.success("found/created destination")

    def _rename(self, ctx: DirectiveContext) -> StepResult:
        new_name = ctx.directive.rename
        if not new_name:
            return StepResult.skipped()
        if not self.store.set_name(ctx.entity, new_name):
            raise ExternalOperationError("rename", new_name)
        if ctx.entity.is_container:
            self.cache.clear()
        self._journal("Rename", ctx.reference, new_name)
        return StepResult.success("renamed")

    def _tag(self, ctx: DirectiveContext) -> StepResult:
        tags = ctx.directive.tags
        if tags is None:
            return StepResult.skipped()
        if not self.store.set_tags(ctx.entity, list(tags)):
            raise ExternalOperationError("set tags")
        self._journal("Tag", ctx.reference, ", ".join(tags))
        return StepResult.success("tagged")

    def _comment(self, ctx: DirectiveContext) -> StepResult:
        comment = ctx.directive.comment
        if not comment:
            return StepResult.skipped()
        if not self.store.set_comment(ctx.entity, comment):
            raise ExternalOperationError("set comment")
        self._journal("Comment", ctx.reference, comment)
        return StepResult.success("comment set")

    def _merge_metadata(self, ctx: DirectiveContext) -> StepResult:
        patch = ctx.directive.metadata_patch
        if patch is None:
            return StepResult.skipped()
        merged = dict(self.store.get_metadata(ctx.entity) or {})
        merged.update(patch)
        if not self.store.set_metadata(ctx.entity, merged):
            raise ExternalOperationError("set metadata")
        self._journal("Metadata", ctx.reference, ", ".join(sorted(patch)))
        return StepResult.success("metadata set")

    def _move(self, ctx: DirectiveContext) -> StepResult:
        moved = self.store.move(ctx.entity, ctx.destination)
        if not moved:
            raise ExternalOperationError(
                "move", f"cannot move {ctx.entity.name} into {ctx.destination.path} ({ctx.destination.kind})"
            )
        ctx.entity = moved
        if moved.is_container:
            self.cache.clear()
        if self.journal is not None:
            self.journal.log_move(ctx.reference, ctx.destination.path)
        return StepResult.success("moved")

    def _replicate(self, ctx: DirectiveContext) -> None:
        """
        Replicate into replicate_path, always creating missing groups.

        Failures are appended to the operation log and never fail the directive.
        """
        target_path = ctx.directive.replicate_path
        if not target_path:
            return
        try:
            group = self.matcher.resolve(ctx.database, target_path, create_missing=True).container
            if not self.store.replicate(ctx.entity, group):
                raise ExternalOperationError(
                    "replicate", f"cannot replicate into {group.path} ({group.kind})"
                )
        except ShelfError as e:
            ctx.operations.append(f"replicate failed: {e}")
            if self.journal is not None:
                self.journal.log_soft_failure(ctx.reference, target_path, str(e))
            return

        ctx.operations.append("replicated")
        ctx.replicated_to = target_path
        if self.journal is not None:
            self.journal.log_replicate(ctx.reference, group.path)

    def _journal(self, operation: str, reference: str, target: str) -> None:
        if self.journal is not None:
            self.journal.log(operation, reference, target)


def classify_batch(
        store: StoreClient,
        directives: Iterable[Union[Directive, Any]],
        journal: Optional[Journal] = None,
        create_missing_default: bool = True,
) -> BatchReport:
    """Convenience wrapper: one orchestrator, one fresh path cache, one run."""
    orchestrator = BatchOrchestrator(
        store,
        journal=journal,
        create_missing_default=create_missing_default,
    )
    return orchestrator.classify_batch(directives)
