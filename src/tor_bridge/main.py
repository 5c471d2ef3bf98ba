#!/usr/bin/env python3
"""
Tor Bridge - Main Entry Point

Starts (or reuses) Tor Browser, waits until traffic is routed through it
and reports the exit IP seen by the Tor check page.
"""

import argparse
import html
import ipaddress
import re
import sys
from pathlib import Path
from typing import Optional

from tor_bridge import __version__
from tor_bridge.process_control.launcher import WindowStyle
from tor_bridge.process_control.process_controller import CHECK_URL, StartBehavior, TorProcessController
from tor_bridge.proxy.proxy_client import SocksHTTPClient
from tor_bridge.utils.config import Config
from tor_bridge.utils.error_handler import TorBridgeError
from tor_bridge.utils.logging_setup import setup_logging, get_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NOT_READY = 2

TOR_CONFIRMATION = "Congratulations. This browser is configured to use Tor."
STRONG_IN_PARAGRAPH = re.compile(r"<p[^>]*>.*?<strong[^>]*>(.*?)</strong>", re.IGNORECASE | re.DOTALL)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file, or defaults plus environment when no file is given"""
    if config_path is None:
        return Config.from_dict({})
    return Config.load_from_file(Path(config_path))


def find_exit_ip(page: str) -> Optional[str]:
    """Return the first IP address shown in a <p><strong> element of the check page"""
    for match in STRONG_IN_PARAGRAPH.finditer(page):
        text = html.unescape(re.sub(r"<[^>]+>", "", match.group(1))).strip()
        try:
            return str(ipaddress.ip_address(text))
        except ValueError:
            continue
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tor Bridge - start Tor Browser and confirm traffic is routed through it"
    )
    parser.add_argument(
        "--config", "-c",
        help="Configuration file path (JSON). Environment variables override it.",
        default=None
    )
    parser.add_argument(
        "--tor-path",
        help="Tor Browser installation directory or browser executable",
        default=None
    )
    parser.add_argument(
        "--behavior",
        choices=[b.value for b in StartBehavior],
        default=None,
        help="What to do when Tor Browser is already running"
    )
    parser.add_argument(
        "--window",
        choices=[w.name.lower() for w in WindowStyle],
        default=None,
        help="Initial window visibility (Windows only)"
    )
    parser.add_argument("--retry-interval", type=float, default=None, help="Seconds between readiness checks")
    parser.add_argument("--max-wait", type=float, default=None, help="Seconds to wait for Tor in total")
    parser.add_argument(
        "--kill-existing",
        action="store_true",
        help="Kill running Tor Browser processes and exit"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"Tor Bridge {__version__}"
    )
    return parser


def run(config: Config, kill_only: bool = False) -> int:
    logger = get_logger('main')

    with TorProcessController(config.tor.path, proxy_config=config.proxy) as controller:
        if kill_only:
            running = controller.find_running_instances()
            controller.kill_existing(running)
            print(f"Killed {len(running)} Tor Browser process(es)")
            return EXIT_OK

        controller.start(
            behavior=StartBehavior.parse(config.tor.start_behavior),
            window_style=WindowStyle.parse(config.tor.window_style)
        )

        if not controller.wait_until_ready(config.tor.retry_interval, config.tor.max_wait):
            print("Can not confirm if Tor is running")
            return EXIT_NOT_READY

        with SocksHTTPClient(config.proxy) as client:
            page = client.get(CHECK_URL)

        ip = find_exit_ip(page)
        if ip is None:
            print("IP not found")
            return EXIT_FAILURE

        if TOR_CONFIRMATION in page:
            print(f"Connected through Tor with IP: {ip}")
            return EXIT_OK

        logger.warning("Check page did not confirm Tor routing")
        print(f"Not connected through Tor with IP: {ip}")
        return EXIT_FAILURE


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        if args.tor_path:
            config.tor.path = args.tor_path
            config.proxy.tor_path = args.tor_path
        if args.behavior:
            config.tor.start_behavior = args.behavior
        if args.window:
            config.tor.window_style = args.window
        if args.retry_interval is not None:
            config.tor.retry_interval = args.retry_interval
        if args.max_wait is not None:
            config.tor.max_wait = args.max_wait
        config.validate()
    except TorBridgeError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count
    )
    logger = get_logger('main')

    try:
        return run(config, kill_only=args.kill_existing)
    except KeyboardInterrupt:
        print("\n🛑 Interrupted")
        return EXIT_FAILURE
    except Exception as e:
        logger.error(f"❌ {e}")
        print(f"❌ Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
