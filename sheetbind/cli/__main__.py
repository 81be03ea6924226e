from __future__ import annotations

import argparse
import logging
import sys
import zipfile
from datetime import UTC, datetime
from pathlib import Path

from openpyxl.utils.exceptions import InvalidFileException

from ..config.loader import ConfigError, MappingConfig, load_mapping_config
from ..errors import SetupError, StreamAborted
from ..excel.annotate import write_errors, write_errors_to
from ..excel.document import OpenpyxlDocument
from ..excel.reader import parse_header, read_file, resolve_sheet, stream_document
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..mapping.columns import build_header_index, column_letter, resolve_columns
from ..mapping.registry import descriptor_for
from ..models.row_error import RowError
from ..services.progress import RowProgress
from ..services.summary import render_summary_line, summarize

"""CLI entrypoint.

    sheetbind check WORKBOOK --config mapping.yml [--stream] [--annotate-to OUT | --annotate-in-place]
    sheetbind inspect WORKBOOK --config mapping.yml

Exit codes: 0 no row errors, 2 row errors found, 1 fatal (config/setup).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_ROW_ERRORS = 2

# raised by openpyxl when the workbook is not a readable xlsx container
UNREADABLE_WORKBOOK = (InvalidFileException, zipfile.BadZipFile)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetbind", description="Map spreadsheet rows to typed records")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Read a workbook and report row errors")
    check.add_argument("workbook", type=Path)
    check.add_argument("--config", type=Path, required=True, help="YAML mapping file")
    check.add_argument("--sheet", help="Sheet name (overrides the mapping file)")
    check.add_argument("--error-column", type=int, help="1-based column for error annotations")
    check.add_argument("--stream", action="store_true", help="Process rows one at a time")
    target = check.add_mutually_exclusive_group()
    target.add_argument("--annotate-to", type=Path, help="Write an annotated copy to this path")
    target.add_argument("--annotate-in-place", action="store_true", help="Annotate the workbook itself")
    check.add_argument("--error-log", action="store_true", help="Write row errors to logs/ as JSON Lines")

    inspect = sub.add_parser("inspect", help="Show the header row and resolved field columns")
    inspect.add_argument("workbook", type=Path)
    inspect.add_argument("--config", type=Path, required=True, help="YAML mapping file")
    inspect.add_argument("--sheet", help="Sheet name (overrides the mapping file)")
    return p.parse_args(argv)


def _load(args: argparse.Namespace, logger: logging.Logger) -> MappingConfig | None:
    try:
        cfg = load_mapping_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return None
    if not args.workbook.exists():
        logger.error(f"workbook not found: {args.workbook}")
        return None
    return cfg


def _format_error(e: RowError) -> str:
    return (
        f"row={e.physical_row} col={e.column_letter or '-'} "
        f"field={e.field or '-'} msg={e.message}"
    )


def _inspect(args: argparse.Namespace, cfg: MappingConfig, logger: logging.Logger) -> int:
    options = cfg.options
    if args.sheet:
        options = options.with_(sheet_name=args.sheet)
    try:
        with OpenpyxlDocument.open(args.workbook) as doc:
            print(f"SHEETS: {doc.sheet_names()}")
            sheet = resolve_sheet(doc, options)
            header = parse_header(doc, sheet, options.header_row) if options.header_row > 0 else []
    except (SetupError, *UNREADABLE_WORKBOOK) as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    descriptor = descriptor_for(cfg.record_type)
    mapping = resolve_columns(descriptor, build_header_index(header), header)
    print(f"SHEET: {sheet} header={header}")
    for fd in descriptor.fields:
        col = mapping.column_for(fd)
        where = f"{column_letter(col)} ({col + 1})" if col is not None else "unmapped"
        flag = " required" if fd.required else ""
        print(f"  {fd.name}: {fd.kind.value}{flag} -> {where}")
    return EXIT_SUCCESS


def _check(args: argparse.Namespace, cfg: MappingConfig, logger: logging.Logger) -> int:
    options = cfg.options
    if args.sheet:
        options = options.with_(sheet_name=args.sheet)
    if args.error_column is not None:
        options = options.with_(error_column=args.error_column)

    start = datetime.now(UTC)
    try:
        if args.stream:
            with RowProgress() as progress:
                def on_row(ctx, record, row_errors):
                    progress.update(record is not None, len(row_errors))

                with OpenpyxlDocument.open(args.workbook) as doc:
                    errors = stream_document(doc, cfg.record_type, options.with_(stream_handler=on_row))
                rows, valid = progress.rows, progress.valid
        else:
            result = read_file(args.workbook, cfg.record_type, options)
            errors = result.errors
            valid = len(result.records)
            rows = valid + len({e.physical_row for e in errors})
    except (SetupError, StreamAborted, *UNREADABLE_WORKBOOK) as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL
    end = datetime.now(UTC)

    for e in errors:
        logger.warning(_format_error(e))

    if errors and (args.annotate_in_place or args.annotate_to):
        try:
            if args.annotate_in_place:
                write_errors(args.workbook, errors, options)
                logger.info(f"annotated {args.workbook}")
            else:
                with args.workbook.open("rb") as src, args.annotate_to.open("wb") as sink:
                    write_errors_to(sink, src, errors, options)
                logger.info(f"annotated copy written to {args.annotate_to}")
        except SetupError as e:
            logger.error(f"annotate: {e}")
            return EXIT_FATAL

    if args.error_log and errors:
        buf = ErrorLogBuffer(file=args.workbook.name, sheet=options.sheet_name)
        buf.extend(errors)
        logger.info(f"error log: {buf.flush()}")

    summary = summarize(rows, valid, errors, start, end)
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(summary)[len("SUMMARY "):])
    return EXIT_ROW_ERRORS if errors else EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when no explicit list is given (tests pass [])
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    cfg = _load(args, logger)
    if cfg is None:
        return EXIT_FATAL
    if args.command == "inspect":
        return _inspect(args, cfg, logger)
    return _check(args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
