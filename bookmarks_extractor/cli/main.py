#!/usr/bin/env python3
"""
Bookmarks Extractor CLI

Command-line interface that signs into Twitter, extracts bookmarked tweets
and exports them to the console and optionally to a JSON file.
"""

import argparse
import asyncio
import getpass
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt

# Load environment variables at the entry point
load_dotenv()

from ..adapters.config import EnvironmentConfigAdapter
from ..adapters.factories import create_extraction_task
from ..adapters.progress.cli import CLIProgressAdapter, SilentProgressAdapter
from ..core.domain import BrowserName, Credentials, TaskOptions
from ..core.exceptions import ConfigurationError


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog='bookmarks-extractor',
        description='Extract bookmarked tweets from a Twitter account',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # Extract every bookmark and print it
  bookmarks-extractor

  # Extract the 50 most recent bookmarks to a JSON file
  bookmarks-extractor --max 50 -o bookmarks.json

  # Watch the browser while it works
  bookmarks-extractor --no-headless --browser firefox
        '''
    )

    parser.add_argument(
        '-o', '--output',
        default=None,
        help='JSON file to export the tweets to (default: console only)'
    )

    parser.add_argument(
        '-n', '--max',
        type=int,
        default=None,
        dest='max_limit',
        help='Maximum number of tweets to extract (default: all)'
    )

    parser.add_argument(
        '--browser',
        choices=BrowserName.names(),
        default=None,
        help='Browser driver to use (default: BOOKMARKS_BROWSER or chromium)'
    )

    parser.add_argument(
        '--browser-path',
        default=None,
        help='Path of a browser executable to launch instead of the bundled one'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Run browser with GUI visible (explicit override of environment/config)'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Do not display a progress bar'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--check-config',
        action='store_true',
        help='Only validate the environment configuration and exit'
    )

    return parser


def configure_logging(verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)]
    )


def resolve_credentials(config: EnvironmentConfigAdapter, console: Console) -> Credentials:
    """Credentials from the environment, prompting for whatever is missing"""
    try:
        return config.get_credentials()
    except ConfigurationError as e:
        if not sys.stdin.isatty():
            raise
        console.print(f"[yellow]{e}[/yellow]")

    username = Prompt.ask("Twitter username", console=console)
    password = getpass.getpass("Twitter password: ")
    return Credentials(username=username, password=password)


def create_code_prompt(console: Console):
    """Code provider asking the user to type the code requested by the login flow"""

    async def prompt_for_code(message: str) -> str:
        return await asyncio.to_thread(Prompt.ask, f"[bold]{message}[/bold] Code", console=console)

    return prompt_for_code


def build_task_options(args, config: EnvironmentConfigAdapter, console: Console) -> TaskOptions:
    """Merge environment configuration with CLI overrides"""
    browser_config = config.get_browser_config()

    if args.max_limit is not None and args.max_limit < 0:
        raise ConfigurationError(f"--max must be non-negative, got: {args.max_limit}")

    return TaskOptions(
        credentials=resolve_credentials(config, console),
        browser_name=args.browser or browser_config['browser_name'],
        browser_path=args.browser_path or browser_config['browser_path'],
        headless=False if args.no_headless else browser_config['headless'],
        timeout_ms=browser_config['timeout_ms'],
        max_limit=args.max_limit,
        file_name=args.output,
        code_provider=create_code_prompt(console)
    )


async def run_extraction(options: TaskOptions, show_progress: bool, console: Console) -> bool:
    """
    Run one extraction task.

    Returns:
        True if extraction completed, False if it failed
    """
    errors: List[BaseException] = []

    def on_error(error: BaseException) -> None:
        errors.append(error)

    def on_success() -> None:
        console.print("[green]✅ Extraction complete[/green]")

    options = replace(options, success_callback=on_success, error_callback=on_error)
    task = create_extraction_task(options, console=console)

    progress = CLIProgressAdapter(task.num_events, console=console) if show_progress else SilentProgressAdapter()
    with progress:
        progress.attach(task)
        try:
            await task.run()
        finally:
            # A failed run still exports what was collected and releases the browser
            await task.stop()

    if errors:
        console.print(f"[red]❌ Extraction failed: {errors[0]}[/red]")
        return False
    return True


def check_config_mode(config: EnvironmentConfigAdapter, console: Console) -> bool:
    """Handle check-config mode"""
    try:
        config.validate_config()
    except ConfigurationError as e:
        console.print(f"[red]❌ Configuration validation failed: {e}[/red]")
        return False

    console.print("[green]✅ Configuration is valid[/green]")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    console = Console()
    configure_logging(args.verbose, console)
    config = EnvironmentConfigAdapter()

    if args.check_config:
        return 0 if check_config_mode(config, console) else 1

    try:
        options = build_task_options(args, config, console)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1

    try:
        succeeded = asyncio.run(run_extraction(options, not args.no_progress, console))
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        return 130

    return 0 if succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
