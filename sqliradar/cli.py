# sqliradar/cli.py - Command line entry point

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Tuple

import colorama
from colorama import Fore, Style

from .modules import BaseModule, ModuleRegistry, ModuleResult, build_registry
from .utils.error_handler import get_global_error_handler, handle_async_errors
from .utils.logger import add_file_handler, set_level

# Setup error handler
error_handler = get_global_error_handler()

DEFAULT_MODULE = "auxiliary/sql_injection"
SCAN_LOGGERS = ("sqliradar", "modules", "crawler", "baseline", "sqli", "headers", "ports", "error_handler")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="SQLiRadar - SQL Injection Scanner",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "options",
        nargs="*",
        metavar="KEY=VALUE",
        help="Module options, e.g. RHOSTS=http://target CRAWL_DEPTH=1 THREADS=5",
    )
    parser.add_argument(
        "-m", "--module", default=DEFAULT_MODULE, help="Module to run"
    )
    parser.add_argument(
        "--list", action="store_true", help="List available modules and exit"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir", help="Also write the scan log to a timestamped file in this directory"
    )

    return parser.parse_args(argv)


def parse_option_pairs(raw: List[str]) -> List[Tuple[str, str]]:
    """Split KEY=VALUE arguments, keeping their order."""
    pairs = []
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Option '{item}' is not in KEY=VALUE form")
        pairs.append((key.strip(), value))
    return pairs


def list_modules(registry: ModuleRegistry) -> None:
    print(f"\n{Fore.CYAN}Available modules:{Style.RESET_ALL}")
    for module in registry:
        print(f"  {module.describe()}")


@handle_async_errors(
    error_handler=error_handler,
    user_message="Module run failed. Please check your options and try again.",
    return_on_error=ModuleResult(success=False, message="Module run failed"),
)
async def run_module(module: BaseModule, options: List[Tuple[str, str]]) -> ModuleResult:
    """Run a module with the given options."""
    return await module.run(options)


def print_result(result: ModuleResult) -> None:
    if not result.success:
        print(f"\n{Fore.RED}[-] {result.message}{Style.RESET_ALL}")
        return

    color = Fore.RED if result.message.startswith("Critical") else Fore.GREEN
    lines = result.message.splitlines()
    print(f"\n{color}[+] {lines[0]}{Style.RESET_ALL}")
    for line in lines[1:]:
        print(line)


def main(argv: Optional[List[str]] = None) -> int:
    """Main SQLiRadar function."""
    colorama.just_fix_windows_console()
    args = parse_arguments(argv)
    registry = build_registry()

    if args.verbose:
        set_level(logging.DEBUG, *SCAN_LOGGERS)
    if args.log_dir:
        log_file = add_file_handler(args.log_dir, *SCAN_LOGGERS)
        print(f"Logging to {log_file}")

    if args.list:
        list_modules(registry)
        return 0

    module = registry.get(args.module)
    if module is None:
        print(f"{Fore.RED}Unknown module '{args.module}'. Use --list to see available modules.{Style.RESET_ALL}")
        return 2

    try:
        options = parse_option_pairs(args.options)
    except argparse.ArgumentTypeError as e:
        print(f"{Fore.RED}{e}{Style.RESET_ALL}")
        return 2

    result = asyncio.run(run_module(module, options))
    print_result(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
