#!/usr/bin/env python3
"""wifimgr command-line interface.

Assigns devices to sites in the Mist inventory and resolves site
identifiers. Settings come from the environment (or a ``.env`` file);
command-line flags override them.

Environment Variables Required:
    - MIST_API_TOKEN: API token
    - MIST_ORG_ID: Organization ID

Example Usage:
    $ wifimgr ap assign-bulk US-SFO-HQ1 00:11:22:33:44:55 00:11:22:33:44:56
    $ wifimgr ap assign-bulk-file macs.txt "Main Office"
    $ wifimgr ap assign-bulk-file aps.csv                  # MAC,SiteName lines
    $ wifimgr --json switch assign-bulk-file switches.csv
    $ wifimgr site resolve us-sfo-hq1 4ac1dcf4-9d8b-7211-65c4-057819f0862b

Exit Codes:
    0: Success (CSV runs exit 0 even when some sites failed)
    1: Configuration, input, resolution or batch assignment error
    2: Invalid command line
    130: Interrupted
"""
import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Optional

from .api import InventoryManager, MistClient, WifiMgrError
from .assignment.adapters import MistInventoryAdapter, TextReportRenderer
from .assignment.domain import (
    AssignmentSource,
    CsvFileSource,
    DeviceKind,
    InlineSource,
    MacFileSource,
)
from .assignment.use_cases import BulkAssignUseCase, CachingSiteResolver, SiteResolver, classify
from .config import Settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def setup_logging(level_name: str, verbose: int = 0) -> None:
    """Configure root logging for a CLI run.

    Args:
        level_name: Level from settings (e.g. "WARNING")
        verbose: Number of -v flags; 1 = INFO, 2+ = DEBUG
    """
    level = logging.getLevelName(level_name)
    if verbose == 1:
        level = min(level, logging.INFO)
    elif verbose >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    # Reduce noise from HTTP library
    if level > logging.DEBUG:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def build_source(args: argparse.Namespace) -> AssignmentSource:
    """Turn parsed arguments into an assignment source."""
    if args.command == "assign-bulk":
        return InlineSource(macs=tuple(args.macs), site=args.site)
    if args.site:
        return MacFileSource(path=args.file, site=args.site)
    return CsvFileSource(path=args.file)


def _install_cancel_handler(cancel_event: asyncio.Event) -> None:
    """Make Ctrl-C stop new sites from starting instead of killing the run."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        # Signal handlers are unavailable on this platform/loop
        logger.debug("SIGINT handler not installed; Ctrl-C aborts immediately")


# ============================================
# Commands
# ============================================

async def run_assign(args: argparse.Namespace, settings: Settings) -> int:
    """Run assign-bulk / assign-bulk-file."""
    settings.require_api()
    device_kind = DeviceKind(args.device)
    source = build_source(args)

    cancel_event = asyncio.Event()
    _install_cancel_handler(cancel_event)

    async with MistClient(settings) as client:
        inventory = MistInventoryAdapter(
            InventoryManager(client),
            no_reassign=settings.no_reassign,
        )
        resolver = SiteResolver(
            inventory,
            org_id=settings.org_id,
            case_insensitive=settings.case_insensitive,
        )
        use_case = BulkAssignUseCase(
            inventory,
            resolver,
            org_id=settings.org_id,
            device_kind=device_kind,
            max_concurrent_sites=settings.max_concurrent_sites,
        )
        report = await use_case.execute(source, cancel_event=cancel_event)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(TextReportRenderer().render_text(report))

    if report.error:
        print(f"Error: {report.error}", file=sys.stderr)
    return EXIT_ERROR if report.error else EXIT_OK


async def run_site_resolve(args: argparse.Namespace, settings: Settings) -> int:
    """Run site resolve."""
    settings.require_api()
    results = []

    async with MistClient(settings) as client:
        inventory = MistInventoryAdapter(InventoryManager(client))
        resolver = CachingSiteResolver(
            SiteResolver(
                inventory,
                org_id=settings.org_id,
                case_insensitive=settings.case_insensitive,
            )
        )
        for identifier in args.identifiers:
            entry = {"identifier": identifier, "kind": classify(identifier).value}
            try:
                entry["site_id"] = await resolver.resolve(identifier)
                entry["error"] = None
            except WifiMgrError as e:
                entry["site_id"] = None
                entry["error"] = e.message
            results.append(entry)

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        for entry in results:
            if entry["error"]:
                print(f"{entry['identifier']}: {entry['error']}")
            else:
                print(f"{entry['identifier']} -> {entry['site_id']}")

    return EXIT_ERROR if any(entry["error"] for entry in results) else EXIT_OK


# ============================================
# Argument Parsing
# ============================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wifimgr",
        description="Manage sites and devices in the Mist inventory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wifimgr ap assign-bulk US-SFO-HQ1 00:11:22:33:44:55 00:11:22:33:44:56
  wifimgr ap assign-bulk-file macs.txt "Main Office"
  wifimgr ap assign-bulk-file aps.csv
  wifimgr site resolve us-sfo-hq1
        """,
    )

    # Global options
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of text",
    )
    parser.add_argument(
        "--case-insensitive",
        action="store_true",
        default=None,
        help="Match site names ignoring case (env: WIFIMGR_CASE_INSENSITIVE)",
    )
    parser.add_argument(
        "--max-concurrent-sites",
        type=int,
        metavar="N",
        help="Process up to N sites at once in CSV mode (env: WIFIMGR_MAX_CONCURRENT_SITES)",
    )
    parser.add_argument(
        "--no-reassign",
        action="store_true",
        default=None,
        help="Do not move devices already assigned to a site (env: WIFIMGR_NO_REASSIGN)",
    )
    parser.add_argument(
        "--env-file",
        metavar="FILE",
        help="Load environment variables from FILE instead of .env",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    groups = parser.add_subparsers(dest="group", metavar="{ap,switch,gateway,site}")
    groups.required = True

    for kind in DeviceKind:
        device_parser = groups.add_parser(kind.value, help=f"{kind.label} commands")
        device_parser.set_defaults(device=kind.value)
        commands = device_parser.add_subparsers(dest="command")
        commands.required = True

        inline = commands.add_parser(
            "assign-bulk",
            help=f"Assign {kind.plural} given by MAC to one site",
        )
        inline.add_argument("site", help="Site ID, site code or site name")
        inline.add_argument("macs", nargs="+", metavar="mac", help="Device MAC address")
        inline.set_defaults(handler=run_assign)

        from_file = commands.add_parser(
            "assign-bulk-file",
            help=f"Assign {kind.plural} listed in a file",
            description=(
                "With a site, FILE holds one MAC per line. Without one, "
                "FILE holds MAC,SiteName lines."
            ),
        )
        from_file.add_argument("file", help="Input file")
        from_file.add_argument("site", nargs="?", help="Target site for a MAC list file")
        from_file.set_defaults(handler=run_assign)

    site_parser = groups.add_parser("site", help="Site commands")
    site_commands = site_parser.add_subparsers(dest="command")
    site_commands.required = True
    resolve = site_commands.add_parser("resolve", help="Resolve site identifiers to site IDs")
    resolve.add_argument("identifiers", nargs="+", metavar="identifier")
    resolve.set_defaults(handler=run_site_resolve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env(
            env_file=args.env_file,
            case_insensitive=args.case_insensitive,
            max_concurrent_sites=args.max_concurrent_sites,
            no_reassign=args.no_reassign,
        )
    except WifiMgrError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    setup_logging(settings.log_level, args.verbose)

    try:
        return asyncio.run(args.handler(args, settings))
    except WifiMgrError as e:
        logger.debug(f"Command failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
