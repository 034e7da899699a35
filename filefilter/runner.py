"""Pipeline controller: open source and sinks, stream, classify, close.

One ``FilterJob`` handles one input file. Resources are registered on an
``ExitStack`` as they are opened so every one of them is closed whether the
run completes or fails part-way.
"""

from __future__ import annotations

import logging
import time
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from filefilter.config import FilterConfig
from filefilter.exceptions import ProcessingError, ResourceError, SourceNotFoundError
from filefilter.io import FILTERED, REJECTED, FormatHandler, RecordSink, RecordSource, get_format_handler
from filefilter.logging_config import RunLogAdapter
from filefilter.paths import filtered_output_path, rejected_output_path, resolve_input_path
from filefilter.validation import ValidationEngine

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    OPENING = "opening"
    STREAMING_HEADER = "streaming_header"
    STREAMING_BODY = "streaming_body"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ProcessingResult:
    """Immutable summary of one filter run."""

    processor_name: str
    total_records: int = 0
    success_records: int = 0
    reject_records: int = 0
    processing_time_ms: int = 0
    success: bool = False
    error: Optional[BaseException] = None
    filtered_path: Optional[Path] = None
    rejected_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processor": self.processor_name,
            "total_records": self.total_records,
            "success_records": self.success_records,
            "reject_records": self.reject_records,
            "processing_time_ms": self.processing_time_ms,
            "success": self.success,
            "error": str(self.error) if self.error else None,
            "filtered_path": str(self.filtered_path) if self.filtered_path else None,
            "rejected_path": str(self.rejected_path) if self.rejected_path else None,
        }


@dataclass
class RecordCounts:
    """Per-run accumulator; never shared between runs."""

    total: int = 0
    success: int = 0
    reject: int = 0


def stream_headers(source: RecordSource, sinks: Iterable[RecordSink], count: int) -> int:
    """Copy the first ``count`` records to every sink without validating them."""
    sinks = list(sinks)
    headers = source.read_headers(count)
    for header in headers:
        for sink in sinks:
            sink.write_header(header)
    if headers:
        logger.debug(f"Passed {len(headers)} header record(s) through to {len(sinks)} output(s)")
    return len(headers)


def process_records(
    source: RecordSource,
    valid_sink: RecordSink,
    rejected_sink: Optional[RecordSink],
    engine: ValidationEngine,
    counts: Optional[RecordCounts] = None,
) -> RecordCounts:
    """Classify body records one at a time, in input order.

    ``counts`` is updated in place so a caller still holds the partial totals
    if a read or write fails mid-stream.
    """
    counts = counts if counts is not None else RecordCounts()
    for record in source.records():
        counts.total += 1
        reason = engine.failed_rule(record.values)
        if reason is None:
            valid_sink.write(record)
            counts.success += 1
            continue

        counts.reject += 1
        logger.debug(f"Record rejected: {reason}", extra={"line_number": record.line_number})
        if rejected_sink is not None:
            rejected_sink.write(record)
    return counts


class FilterJob:
    """Lifecycle of filter runs for one configuration.

    Each ``run()`` starts from ``IDLE`` with fresh counters, so a job can be
    run again and report only that run's records.
    """

    def __init__(self, config: FilterConfig) -> None:
        self.config = config
        self.state = PipelineState.IDLE
        self.failed_stage: Optional[PipelineState] = None
        self.filtered_path: Optional[Path] = None
        self.rejected_path: Optional[Path] = None
        self.log = RunLogAdapter(logger, "unknown")

    @property
    def processor_name(self) -> str:
        return self.config.processor_name

    def _transition(self, state: PipelineState) -> None:
        self.log.debug(f"{self.state.value} -> {state.value}", extra={"stage": state.value})
        self.state = state

    def _reset(self) -> None:
        self.state = PipelineState.IDLE
        self.failed_stage = None
        self.filtered_path = filtered_output_path(self.config)
        self.rejected_path = rejected_output_path(self.config) if self.config.output.need_rejected_data else None
        self.log = RunLogAdapter(logger, self.processor_name)

    def run(self) -> ProcessingResult:
        # Configuration problems surface unwrapped before any I/O
        self.config.validate()
        handler = get_format_handler(self.config.file_type)
        engine = ValidationEngine(self.config)
        self._reset()
        counts = RecordCounts()

        self.log.info(f"Starting {self.processor_name} processing...")
        start = time.perf_counter()
        try:
            self._execute(handler, engine, counts)
        except Exception as exc:
            self.failed_stage = self.failed_stage or self.state
            self._transition(PipelineState.FAILED)
            result = self._build_result(counts, start, success=False, error=exc)
            self._log_completion(result)
            raise ProcessingError(
                f"Processing failed in {self.processor_name}",
                processor_name=self.processor_name,
                stage=self.failed_stage.value,
                total_records=counts.total,
                success_records=counts.success,
                reject_records=counts.reject,
                original_error=exc,
                result=result,
            ) from exc

        self._transition(PipelineState.COMPLETED)
        result = self._build_result(counts, start, success=True)
        self._log_completion(result)
        return result

    def _execute(self, handler: FormatHandler, engine: ValidationEngine, counts: RecordCounts) -> None:
        self._transition(PipelineState.OPENING)
        input_path = resolve_input_path(self.config)
        if not input_path.is_file():
            raise SourceNotFoundError(str(input_path))

        try:
            with ExitStack() as stack:
                source = stack.enter_context(handler.open_source(input_path, self.config))
                self._ensure_output_dir()
                valid_sink = stack.enter_context(handler.open_sink(self.filtered_path, self.config, FILTERED))
                rejected_sink: Optional[RecordSink] = None
                if self.rejected_path is not None:
                    rejected_sink = stack.enter_context(
                        handler.open_sink(self.rejected_path, self.config, REJECTED)
                    )

                self._transition(PipelineState.STREAMING_HEADER)
                sinks = [sink for sink in (valid_sink, rejected_sink) if sink is not None]
                stream_headers(source, sinks, self.config.skip_header_lines)

                self._transition(PipelineState.STREAMING_BODY)
                process_records(source, valid_sink, rejected_sink, engine, counts)

                self._transition(PipelineState.FINALIZING)
        except Exception:
            self.failed_stage = self.state
            raise

        self.log.info(f"Output written to: {self.filtered_path}")
        if self.rejected_path is not None:
            self.log.info(f"Rejected data written to: {self.rejected_path}")

    def _ensure_output_dir(self) -> None:
        out_dir = Path(self.config.output.output_dir)
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ResourceError(
                f"Cannot create output directory {out_dir}", path=str(out_dir), operation="create", original_error=exc
            ) from exc

    def _build_result(
        self, counts: RecordCounts, start: float, success: bool, error: Optional[BaseException] = None
    ) -> ProcessingResult:
        return ProcessingResult(
            processor_name=self.processor_name,
            total_records=counts.total,
            success_records=counts.success,
            reject_records=counts.reject,
            processing_time_ms=int((time.perf_counter() - start) * 1000),
            success=success,
            error=error,
            filtered_path=self.filtered_path,
            rejected_path=self.rejected_path,
        )

    def _log_completion(self, result: ProcessingResult) -> None:
        summary = {
            "total_records": result.total_records,
            "success_records": result.success_records,
            "reject_records": result.reject_records,
            "processing_time_ms": result.processing_time_ms,
        }
        if result.success:
            self.log.info(f"Processing completed in {result.processing_time_ms}ms")
            self.log.info(f"Total records: {result.total_records}")
            self.log.info(f"Valid records: {result.success_records}")
            self.log.info(f"Rejected records: {result.reject_records}")
            self.log.info(
                f"{result.processor_name}, {result.processing_time_ms}ms, totalRecords={result.total_records}, "
                f"successRecord={result.success_records}, rejectRecord={result.reject_records}, success=true",
                extra=summary,
            )
            return

        stage = self.failed_stage.value if self.failed_stage else self.state.value
        self.log.error(f"Processing failed in {result.processing_time_ms}ms", extra={"stage": stage})
        self.log.error(f"Error: {result.error if result.error is not None else 'Unknown error'}")
        self.log.error(
            f"{result.processor_name}, {result.processing_time_ms}ms, success=false",
            extra={**summary, "stage": stage},
        )


def run_filter(config: FilterConfig) -> ProcessingResult:
    """Run one filter job and return its result; raises ProcessingError on failure."""
    return FilterJob(config).run()
