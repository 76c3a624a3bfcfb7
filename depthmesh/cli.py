"""CLI entrypoint for the JODC 500 m mesh depth converter."""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import Future
from pathlib import Path

from depthmesh.common.config_loader import Settings, load_settings
from depthmesh.common.constants import CONVERSION_KINDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from depthmesh.common.errors import PipelineError
from depthmesh.common.http import HttpClient
from depthmesh.common.ids import generate_session_id
from depthmesh.common.logging import build_logger, log_event
from depthmesh.common.models import BoundingFilter, ConversionKind, PipelineRequest, PipelineResult, ProgressEvent
from depthmesh.pipeline.export import write_result
from depthmesh.pipeline.orchestrator import PipelineOrchestrator
from depthmesh.pipeline.source import SourceLoader


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=["convert"])
    parser.add_argument("source", help="URL or path of a mesh500_NN_NNN.zip archive")
    parser.add_argument("--kind", action="append", required=True, choices=CONVERSION_KINDS)
    parser.add_argument("--lon-min", type=int, default=None, help="Lower bound on longitude minutes (search60)")
    parser.add_argument("--lon-max", type=int, default=None, help="Upper bound on longitude minutes (search60)")
    parser.add_argument("--lat-min", type=int, default=None, help="Lower bound on latitude minutes (search60)")
    parser.add_argument("--lat-max", type=int, default=None, help="Upper bound on latitude minutes (search60)")
    parser.add_argument("--out-dir", default="./out")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--no-bundle", action="store_true", help="Write plain files instead of zip bundles")
    parser.add_argument("--quiet", action="store_true", help="Do not print progress to stderr")
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def build_requests(args: argparse.Namespace) -> list[PipelineRequest]:
    bounds = BoundingFilter.from_sequence([args.lon_min, args.lon_max, args.lat_min, args.lat_max]).validate()

    out = []
    for kind_value in dict.fromkeys(args.kind):
        kind = ConversionKind(kind_value)
        out.append(
            PipelineRequest(
                source_identifier=args.source,
                kind=kind,
                bounds=bounds if kind is ConversionKind.SEXAGESIMAL_FILTERED else None,
            )
        )
    return out


def _print_progress(event: ProgressEvent) -> None:
    print(f"[{event.percent:3d}%] {event.request_id}: {event.message}", file=sys.stderr)


def _export(result: PipelineResult, settings: Settings, args: argparse.Namespace) -> Path:
    bundle = settings.bundle_output and not args.no_bundle
    return write_result(
        result,
        Path(args.out_dir),
        bundle=bundle,
        citation_filename=settings.citation_filename,
        citation_text=settings.citation_text,
    )


def run_command(args: argparse.Namespace) -> int:
    session_id = generate_session_id()
    log_dir = Path(args.log_dir) if args.log_dir else None
    logger = build_logger(session_id, log_dir=log_dir, level=args.log_level)

    settings = load_settings(
        Path(args.config_dir),
        overlay_config_dir=Path(args.overlay_config_dir) if args.overlay_config_dir else None,
    )
    try:
        pipeline_requests = build_requests(args)
    except PipelineError as exc:
        log_event(logger, str(exc), session_id=session_id, event="REQUEST_REJECTED", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL

    on_progress = None if args.quiet else _print_progress
    failed: list[str] = []

    http_client = HttpClient(
        timeout=settings.timeout,
        retry=settings.retry,
        rate_per_sec=settings.rate_per_sec,
        chunk_size=settings.chunk_size,
    )
    with SourceLoader(http_client) as loader, http_client:
        with PipelineOrchestrator(loader, settings=settings, logger=logger) as orchestrator:
            futures: dict[str, Future[PipelineResult]] = {
                request.kind.value: orchestrator.submit(request, on_progress=on_progress) for request in pipeline_requests
            }
            for kind, future in futures.items():
                try:
                    result = future.result()
                    out_path = _export(result, settings, args)
                except PipelineError as exc:
                    failed.append(kind)
                    if not args.quiet:
                        print(f"{kind}: {exc}", file=sys.stderr)
                    if args.strict:
                        return EXIT_HARD_FAIL
                    continue
                except OSError as exc:
                    failed.append(kind)
                    log_event(
                        logger,
                        f"failed to write {kind} output: {exc}",
                        session_id=session_id,
                        kind=kind,
                        event="EXPORT_FAIL",
                        status="error",
                        error_code="EXPORT_ERROR",
                    )
                    if args.strict:
                        return EXIT_HARD_FAIL
                    continue
                log_event(
                    logger,
                    f"wrote {out_path}",
                    session_id=session_id,
                    kind=kind,
                    event="EXPORT_DONE",
                    status="ok",
                    rows_out=result.record_count,
                )

    if failed and len(failed) == len(pipeline_requests):
        return EXIT_HARD_FAIL
    if failed:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError as exc:
        print(f"{exc.error_code}: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL
    except Exception as exc:
        print(f"unexpected failure: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
