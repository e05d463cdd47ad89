"""
Command-line entry point.

Subcommands::

    clarity-consent serve             run the HTTP server
    clarity-consent detect            print the detection result as JSON
    clarity-consent verify URL        apply consent on a live page
    clarity-consent uninstall         remove all consent layer options
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import uvicorn

from clarity_consent import config
from clarity_consent.browser.playwright_target import verify_consent_on_url
from clarity_consent.consent import settings
from clarity_consent.detection.detectors import detect_project_id
from clarity_consent.models.consent import ConsentPayload, ConsentState
from clarity_consent.storage import uninstall as uninstall_mod
from clarity_consent.storage.options import JsonFileOptionStore
from clarity_consent.utils import logger

log = logger.create_logger("CLI")


def _serve(cfg: config.Settings, _args: argparse.Namespace) -> int:
    log.success(f"Server listening on {cfg.host}:{cfg.port}")
    uvicorn.run(
        "clarity_consent.app:app",
        host=cfg.host,
        port=cfg.port,
        reload=not cfg.is_production,
    )
    return 0


def _detect(cfg: config.Settings, _args: argparse.Namespace) -> int:
    result = detect_project_id(JsonFileOptionStore(cfg.options_file))
    print(result.model_dump_json(by_alias=True, indent=2))
    return 0 if result.detected else 1


def _verify(cfg: config.Settings, args: argparse.Namespace) -> int:
    payload = ConsentPayload.from_decision(settings.load_consent_decision(JsonFileOptionStore(cfg.options_file)))
    state = asyncio.run(
        verify_consent_on_url(
            args.url,
            payload,
            interval_ms=cfg.poll_interval_ms,
            max_attempts=cfg.poll_max_attempts,
            headless=not args.headed,
        )
    )
    print(state.value)
    return 0 if state is ConsentState.APPLIED else 1


def _uninstall(cfg: config.Settings, _args: argparse.Namespace) -> int:
    removed = uninstall_mod.uninstall(JsonFileOptionStore(cfg.options_file))
    print(removed)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clarity-consent", description="Consent layer for Microsoft Clarity")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="run the HTTP server").set_defaults(handler=_serve)
    sub.add_parser("detect", help="print the detected project ID").set_defaults(handler=_detect)

    verify = sub.add_parser("verify", help="apply consent on a live page")
    verify.add_argument("url")
    verify.add_argument("--headed", action="store_true", help="show the browser window")
    verify.set_defaults(handler=_verify)

    sub.add_parser("uninstall", help="remove all consent layer options").set_defaults(handler=_uninstall)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``clarity-consent`` command."""
    args = build_parser().parse_args(argv)
    cfg = config.get_settings()
    logger.start_log_file(args.command)
    try:
        return args.handler(cfg, args)
    finally:
        logger.end_log_file()


if __name__ == "__main__":
    sys.exit(main())
