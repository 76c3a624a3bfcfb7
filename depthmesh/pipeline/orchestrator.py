"""Request orchestration: load, parse, transform, cache and report progress."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import Callable

from depthmesh.common.config_loader import Settings, default_settings
from depthmesh.common.constants import PROGRESS_MILESTONES
from depthmesh.common.errors import (
    EmptySourceError,
    PipelineError,
    RequestCancelledError,
    StageError,
)
from depthmesh.common.ids import generate_request_id
from depthmesh.common.logging import get_logger, log_event
from depthmesh.common.models import (
    BoundingFilter,
    ConversionKind,
    ErrorEvent,
    PipelineRequest,
    PipelineResult,
    PipelineState,
    ProgressEvent,
    SourceDocument,
)
from depthmesh.common.time_utils import elapsed_ms
from depthmesh.pipeline.cache import ResultCache
from depthmesh.pipeline.geojson import project_features, render_geojson
from depthmesh.pipeline.parse import ParsedTable, parse_records
from depthmesh.pipeline.render import render_text
from depthmesh.pipeline.search import select_records
from depthmesh.pipeline.source import SourceLoader, extract_base_name

ProgressSink = Callable[[ProgressEvent], None]
ErrorSink = Callable[[ErrorEvent], None]


class ProgressReporter:
    """Tracks one request's state and forwards non-decreasing progress."""

    def __init__(self, request_id: str, sink: ProgressSink | None = None) -> None:
        self.request_id = request_id
        self.sink = sink
        self.state = PipelineState.IDLE
        self.percent = 0

    def advance(self, state: PipelineState, percent: int, message: str) -> None:
        self.state = state
        self.percent = max(self.percent, min(percent, 100))
        if self.sink is not None:
            self.sink(ProgressEvent(self.request_id, self.percent, message, state))

    def fail(self) -> None:
        self.state = PipelineState.FAILED


class PipelineOrchestrator:
    def __init__(
        self,
        loader: SourceLoader,
        *,
        cache: ResultCache | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.loader = loader
        self.cache = cache if cache is not None else ResultCache()
        self.settings = settings or default_settings()
        self.logger = logger or get_logger("pipeline")
        self.max_workers = max_workers or self.settings.max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def close(self) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True, cancel_futures=True)
                self._executor = None

    def __enter__(self) -> "PipelineOrchestrator":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def submit(
        self,
        request: PipelineRequest,
        *,
        on_progress: ProgressSink | None = None,
        on_error: ErrorSink | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Future[PipelineResult]:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="depthmesh")
            executor = self._executor
        return executor.submit(
            self.run,
            request,
            on_progress=on_progress,
            on_error=on_error,
            cancel_event=cancel_event,
        )

    def run(
        self,
        request: PipelineRequest,
        *,
        on_progress: ProgressSink | None = None,
        on_error: ErrorSink | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PipelineResult:
        request_id = generate_request_id(request.kind.value)
        reporter = ProgressReporter(request_id, on_progress)
        started_at = time.monotonic()
        fields = {"request_id": request_id, "source": request.source_identifier, "kind": request.kind.value}

        log_event(self.logger, "request start", event="REQUEST_START", status="ok", **fields)

        cached = self.cache.get(request)
        if cached is not None:
            reporter.advance(PipelineState.READY, PROGRESS_MILESTONES["done"], "Served from cache")
            log_event(
                self.logger,
                "request served from cache",
                event="CACHE_HIT",
                status="ok",
                rows_out=cached.record_count,
                duration_ms=elapsed_ms(started_at),
                **fields,
            )
            return cached

        try:
            result = self._execute(request, reporter, fields, cancel_event)
        except PipelineError as exc:
            self._report_failure(exc, reporter, on_error, fields, started_at)
            raise
        except Exception as exc:
            wrapped = StageError(f"Unexpected failure while {reporter.state.value}: {exc}")
            self._report_failure(wrapped, reporter, on_error, fields, started_at)
            raise wrapped from exc

        self.cache.put(request, result)
        reporter.advance(PipelineState.READY, PROGRESS_MILESTONES["done"], "Done")
        log_event(
            self.logger,
            f"request done: {result.filename}",
            event="REQUEST_DONE",
            status="ok",
            percent=reporter.percent,
            rows_out=result.record_count,
            duration_ms=elapsed_ms(started_at),
            **fields,
        )
        return result

    def _execute(
        self,
        request: PipelineRequest,
        reporter: ProgressReporter,
        fields: dict,
        cancel_event: threading.Event | None,
    ) -> PipelineResult:
        base_name = extract_base_name(request.source_identifier, self.settings.source_name_pattern)

        reporter.advance(PipelineState.LOADING, PROGRESS_MILESTONES["loading"], "Loading source archive")
        stage_started = time.monotonic()
        document = self.loader.load(request.source_identifier, cancel_event=cancel_event)
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError(f"Request cancelled: {request.source_identifier}")
        log_event(
            self.logger,
            f"loaded table {document.member_name}",
            stage="load",
            event="STAGE_END",
            status="ok",
            duration_ms=elapsed_ms(stage_started),
            **fields,
        )

        reporter.advance(PipelineState.PARSING, PROGRESS_MILESTONES["parsing"], "Parsing depth table")
        stage_started = time.monotonic()
        table = parse_records(document.text, logger=self.logger)
        log_event(
            self.logger,
            "parsed depth table",
            stage="parse",
            event="STAGE_END",
            status="ok",
            rows_in=len(table) + table.skipped_lines,
            rows_out=len(table),
            duration_ms=elapsed_ms(stage_started),
            **fields,
        )

        reporter.advance(PipelineState.TRANSFORMING, PROGRESS_MILESTONES["processing"], "Processing records")
        payload, record_count = self._transform(request, table, document)

        reporter.advance(PipelineState.TRANSFORMING, PROGRESS_MILESTONES["transforming"], "Preparing output")
        return PipelineResult(
            payload=payload,
            filename=request.kind.output_filename(base_name),
            kind=request.kind,
            record_count=record_count,
        )

    def _transform(
        self,
        request: PipelineRequest,
        table: ParsedTable,
        document: SourceDocument,
    ) -> tuple[str | bytes, int]:
        if request.kind is ConversionKind.DECIMAL_PASSTHROUGH:
            return document.raw, len(table)
        if request.kind is ConversionKind.SEXAGESIMAL_TEXT:
            return render_text(table.sexagesimal), len(table)
        if request.kind is ConversionKind.SEXAGESIMAL_FILTERED:
            selected = select_records(table.sexagesimal, request.bounds or BoundingFilter())
            return render_text(selected), len(selected)
        if request.kind is ConversionKind.GEOJSON:
            if not table.decimal:
                raise EmptySourceError(f"No depth records found in {document.member_name}")
            collection = project_features(table.decimal, source_epsg=self.settings.geojson_source_epsg)
            return render_geojson(collection), len(collection.features)
        raise StageError(f"Unknown conversion kind: {request.kind}")

    def _report_failure(
        self,
        exc: PipelineError,
        reporter: ProgressReporter,
        on_error: ErrorSink | None,
        fields: dict,
        started_at: float,
    ) -> None:
        failed_while = reporter.state.value
        reporter.fail()
        log_event(
            self.logger,
            f"request failed while {failed_while}: {exc}",
            event="REQUEST_FAIL",
            status="error",
            percent=reporter.percent,
            error_code=exc.error_code,
            duration_ms=elapsed_ms(started_at),
            **fields,
        )
        if on_error is not None:
            on_error(ErrorEvent(reporter.request_id, str(exc), exc.error_code))
