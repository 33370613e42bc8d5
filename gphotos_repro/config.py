"""Resolved settings and the application context handed to each task."""

from __future__ import annotations

import argparse
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from gphotos_repro.auth import DEFAULT_OAUTH_PORT, CredentialBundle, default_token_dir
from gphotos_repro.clients import GDriveClient, GooglePhotosClient
from gphotos_repro.scheduler import MissedTickPolicy
from gphotos_repro.wire import WireLog, setup_wire_logger

DEFAULT_PROBE_INTERVAL = 60.0


@dataclass(frozen=True)
class Settings:
    client_secrets_path: Path
    media_path: Path
    probe_interval: float = DEFAULT_PROBE_INTERVAL
    oauth_port: int = DEFAULT_OAUTH_PORT
    token_dir: Path = field(default_factory=default_token_dir)
    missed_tick_policy: MissedTickPolicy = MissedTickPolicy.SKIP
    log_file: Optional[str] = None
    verbose: bool = False
    no_color: bool = False

    @classmethod
    def from_args(
        cls, args: argparse.Namespace, environ: Mapping[str, str] | None = None
    ) -> "Settings":
        """Command-line values win; unset options fall back to the environment, then defaults."""
        env = os.environ if environ is None else environ

        interval = args.interval
        if interval is None:
            interval = float(env.get("PROBE_INTERVAL", DEFAULT_PROBE_INTERVAL))
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"probe interval must be a positive number of seconds, got {interval}")

        port = args.oauth_port
        if port is None:
            port = int(env.get("OAUTH_PORT", DEFAULT_OAUTH_PORT))

        token_dir = args.token_dir or env.get("GOOGLE_TOKEN_DIR")
        policy = args.missed_ticks or env.get("MISSED_TICK_POLICY", MissedTickPolicy.SKIP.value)

        return cls(
            client_secrets_path=Path(args.client_secrets),
            media_path=Path(args.media_file),
            probe_interval=interval,
            oauth_port=port,
            token_dir=Path(token_dir) if token_dir else default_token_dir(),
            missed_tick_policy=MissedTickPolicy(policy),
            log_file=args.log_file or env.get("LOG_FILE") or None,
            verbose=args.verbose,
            no_color=args.no_color or bool(env.get("NO_COLOR")),
        )


@dataclass
class AppContext:
    """Everything a task needs, passed explicitly instead of living in module globals."""

    settings: Settings
    credentials: CredentialBundle
    drive: GDriveClient
    photos: GooglePhotosClient
    wire: WireLog

    @classmethod
    def create(
        cls, settings: Settings, credentials: CredentialBundle, wire: WireLog | None = None
    ) -> "AppContext":
        return cls(
            settings=settings,
            credentials=credentials,
            drive=GDriveClient(credentials.credentials),
            photos=GooglePhotosClient(credentials.credentials),
            wire=wire or setup_wire_logger(),
        )
