"""Operational command line for the clinic access configuration.

Usage:
    clinic-access show-config [--reveal]
    clinic-access reset-config
    clinic-access reset-credentials
    clinic-access check RESOURCE
    clinic-access menu [--tier N --password SECRET]

``reset-config`` is the fix for accounts that see inconsistent menus: it
writes the default configuration back for everyone.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

from .access.types import AccessTier
from .context import AccessControlContext
from .logging_utils import configure_structured_logging
from .notifications import CollectingNotifier
from .settings import load_settings

MASK = "********"


def _print_notifications(notifier: CollectingNotifier) -> None:
    for notification in notifier.notifications:
        line = f"[{notification.level.value}] {notification.message}"
        if notification.description:
            line += f" ({notification.description})"
        print(line)


def _cmd_show_config(context: AccessControlContext, args: argparse.Namespace) -> int:
    data = context.controller.config.to_dict()
    if not args.reveal:
        data["credentials"] = {
            name: (MASK if value.strip() else "") for name, value in data["credentials"].items()
        }
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


def _cmd_reset_config(context: AccessControlContext, args: argparse.Namespace) -> int:
    context.controller.force_reset()
    return 0


def _cmd_reset_credentials(context: AccessControlContext, args: argparse.Namespace) -> int:
    return 0 if context.controller.reset_credentials() else 1


def _cmd_check(context: AccessControlContext, args: argparse.Namespace) -> int:
    required = context.controller.resource_tier(args.resource)
    print(f"{args.resource}: {required.display_name} (tier {int(required)})")
    return 0


def _cmd_menu(context: AccessControlContext, args: argparse.Namespace) -> int:
    if args.tier is not None:
        result = asyncio.run(context.controller.switch_tier(AccessTier.parse(args.tier), args.password))
        if not result:
            return 1
    for group in context.menu.compose():
        marker = " *" if group.active else ""
        print(f"{group.tier.icon} {group.title}{marker}")
        for item in group.items:
            print(f"    {item.id:<24} {item.label}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clinic-access",
        description="Clinic access control - configuration and diagnostics",
    )
    parser.add_argument("--settings", type=Path, help="Path to settings.yaml")
    parser.add_argument("--data-dir", type=Path, help="Override the config data directory")
    parser.add_argument("--log-level", help="Logging level (default from settings)")

    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show-config", help="Print the stored access configuration")
    show.add_argument("--reveal", action="store_true", help="Print credentials in clear text")
    show.set_defaults(handler=_cmd_show_config)

    reset = sub.add_parser("reset-config", help="Restore the default configuration")
    reset.set_defaults(handler=_cmd_reset_config)

    creds = sub.add_parser("reset-credentials", help="Restore the default tier passwords")
    creds.set_defaults(handler=_cmd_reset_credentials)

    check = sub.add_parser("check", help="Show the tier a resource requires")
    check.add_argument("resource")
    check.set_defaults(handler=_cmd_check)

    menu = sub.add_parser("menu", help="Print the navigation menu")
    menu.add_argument("--tier", help="Tier to switch to first (number or name)")
    menu.add_argument("--password", help="Credential for --tier")
    menu.set_defaults(handler=_cmd_menu)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    configure_structured_logging(args.log_level or settings.log_level, "clinic_access")
    if args.data_dir is not None:
        settings = replace(settings, data_dir=args.data_dir)

    notifier = CollectingNotifier()
    context = AccessControlContext.create(settings, notifier=notifier)
    try:
        return args.handler(context, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        _print_notifications(notifier)


if __name__ == "__main__":
    sys.exit(main())
