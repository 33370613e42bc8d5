"""CLI entry point: authorize, then probe Drive every minute while uploading one file to Photos."""

from __future__ import annotations

import argparse
import functools
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from gphotos_repro.auth import bootstrap_credentials
from gphotos_repro.config import AppContext, Settings
from gphotos_repro.prober import PROBE_TASK, probe
from gphotos_repro.scheduler import MissedTickPolicy, Scheduler
from gphotos_repro.uploader import UPLOAD_TASK, upload_media_item
from gphotos_repro.wire import WireLog, setup_wire_logger


def _build_parser() -> argparse.ArgumentParser:
    # Option defaults stay None so .env / environment values can be applied after parsing.
    parser = argparse.ArgumentParser(
        prog="gphotos-repro",
        description="Poll Google Drive metadata every minute and upload one file to Google Photos.",
    )
    parser.add_argument("client_secrets", metavar="path_to_client_secret_json")
    parser.add_argument("media_file", metavar="path_to_media_file")
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between Drive probes (env PROBE_INTERVAL, default: 60)",
    )
    parser.add_argument(
        "--oauth-port",
        type=int,
        help="Local port for the OAuth callback receiver (env OAUTH_PORT, default: 8888)",
    )
    parser.add_argument(
        "--token-dir",
        help="Directory for the cached OAuth token (env GOOGLE_TOKEN_DIR, default: <tempdir>/google-auth)",
    )
    parser.add_argument(
        "--missed-ticks",
        choices=[p.value for p in MissedTickPolicy],
        help="What to do when a probe overruns its interval: skip missed ticks or "
             "run them back-to-back (env MISSED_TICK_POLICY, default: skip)",
    )
    parser.add_argument(
        "--log-file",
        help="Also write diagnostics and the request/response log to this file (env LOG_FILE)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    return parser


def _setup_logging(settings: Settings, console: Console) -> WireLog:
    """Rich diagnostics on stderr, optional plain-text log file, request/response log on stdout."""
    log_level = logging.DEBUG if settings.verbose else logging.INFO
    plain_format = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

    root = logging.getLogger()
    root.setLevel(log_level)

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(log_level)
    root.addHandler(rich_handler)

    wire_file_handlers = []
    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(plain_format))
        root.addHandler(file_handler)
        wire_file_handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    return setup_wire_logger(sys.stdout, extra_handlers=wire_file_handlers)


def schedule_tasks(context: AppContext, scheduler: Scheduler) -> None:
    """Queue probe tick 0 first, then the one-shot upload; both are due immediately."""
    scheduler.schedule_periodic(
        PROBE_TASK,
        functools.partial(probe, context),
        interval=context.settings.probe_interval,
    )
    scheduler.schedule_once(UPLOAD_TASK, functools.partial(upload_media_item, context))


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    load_dotenv()
    settings = Settings.from_args(args)

    use_color = sys.stderr.isatty() and not settings.no_color
    console = Console(stderr=True, force_terminal=use_color, no_color=not use_color)
    wire = _setup_logging(settings, console)

    # Startup failures (unreadable secrets, refused consent) propagate and end the process.
    credentials = bootstrap_credentials(
        settings.client_secrets_path, settings.token_dir, settings.oauth_port
    )
    logging.info("Authorized OAuth client %s", credentials.client_id)
    context = AppContext.create(settings, credentials, wire=wire)

    scheduler = Scheduler(policy=settings.missed_tick_policy)
    schedule_tasks(context, scheduler)
    scheduler.start()
    logging.info(
        "Probing Drive every %.0fs and uploading %s; press Ctrl+C to quit.",
        settings.probe_interval, settings.media_path,
    )
    scheduler.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())
