"""Main CLI entry point for safe-publish"""

import os
import sys
import logging

import click
from rich.logging import RichHandler
from rich.markup import escape

from ..constants import APP_NAME, LOG_FORMAT, ENV_LOG_LEVEL
from .commands import publish
from .utils.output import err_console


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.getLevelName(os.environ.get(ENV_LOG_LEVEL, "WARNING").upper())
        if not isinstance(level, int):
            level = logging.WARNING

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=err_console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ],
        force=True
    )

    # Adjust third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class Context:
    """CLI context object"""

    def __init__(self):
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False


@click.group(name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, verbose, debug, quiet):
    """Safe Publish - Publish crates that match their repository

    Refuses to publish when the files cargo would package disagree with
    version control, and checks after upload that the registry serves
    exactly the local files.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        logging.disable(logging.NOTSET)
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context()
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    ctx.obj.quiet = quiet


# Register commands
cli.add_command(publish.publish)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        err_console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            err_console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
