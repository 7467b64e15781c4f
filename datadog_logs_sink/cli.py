"""Command-line entry points: ship log lines to the intake, or serve a local intake."""

import argparse
import logging
import signal
import sys

from datadog_logs_sink.config import build_arg_parser, config_from_args
from datadog_logs_sink.errors import ConfigurationError, LogsSinkError, WriteError
from datadog_logs_sink.intake import IntakeServer
from datadog_logs_sink.models import create_record
from datadog_logs_sink.writer import LogsApiWriter

logger = logging.getLogger(__name__)


def _read_records(path: str | None, topic: str):
    """Read non-empty lines from *path* (or stdin) as LogRecords."""
    stream = open(path, "r", encoding="utf-8") if path else sys.stdin
    try:
        records = []
        for offset, line in enumerate(stream):
            line = line.rstrip("\r\n")
            if line:
                records.append(create_record(line, topic=topic, offset=offset))
        return records
    finally:
        if path:
            stream.close()


def run_ship(args: argparse.Namespace) -> int:
    try:
        config = config_from_args(args)
        writer = LogsApiWriter(config)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    records = _read_records(args.input, args.topic)
    logger.info(
        "Shipping %d record(s) to %s:%d (max_batch_length=%d, ssl=%s)",
        len(records),
        config.host,
        config.port,
        config.max_batch_length,
        config.use_ssl,
    )

    try:
        writer.write(records)
    except WriteError as exc:
        logger.error(
            "Write stopped after %d batch(es), %d record(s): %s",
            exc.batches_sent,
            exc.records_sent,
            exc,
        )
        return 1
    except LogsSinkError as exc:
        logger.error("Could not build request: %s", exc)
        return 1

    logger.info("Writer metrics: %s", writer.metrics.snapshot())
    return 0


def run_serve(args: argparse.Namespace) -> int:
    server = IntakeServer(args.accept_key, host=args.host, port=args.port)

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, handle_signal)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Datadog logs sink writer")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command")

    ship = sub.add_parser(
        "ship", parents=[build_arg_parser()], help="Send log lines to the intake"
    )
    ship.add_argument("--input", type=str, default=None, help="File to read (default: stdin)")
    ship.add_argument("--topic", type=str, default="cli")
    ship.set_defaults(func=run_ship)

    serve = sub.add_parser("serve", help="Run a local stub intake")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)
    serve.add_argument(
        "--accept-key", action="append", default=[], required=True,
        help="API key the intake accepts (repeatable)",
    )
    serve.set_defaults(func=run_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if getattr(args, "func", None) is None:
        parser.print_help()
        return 2
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
