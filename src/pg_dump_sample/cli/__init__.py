"""Command-line interface for pg-dump-sample.

Dumps the tables named in a manifest file, plus every table they reference
through foreign keys, as a psql script that loads into an empty schema.

Usage:
    pg-dump-sample -f manifest.yml shop > sample.sql
    pg-dump-sample -h db.internal -U reader -f manifest.yml -o sample.sql shop
    pg-dump-sample --profile staging -f manifest.yml -o sample.sql
    PGHOST=localhost PGDATABASE=shop pg-dump-sample -w -f manifest.yml

Connection parameters default to the PGHOST, PGPORT, PGUSER, PGPASSWORD,
PGDATABASE and PGSSLMODE environment variables.  When the server refuses
the connection, the password is asked for on the terminal unless
``--no-password`` is given.
"""

import argparse
import logging
import os
import stat
import sys
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pg_dump_sample.config.models import ConnectionSettings
from pg_dump_sample.dump.writer import make_dump
from pg_dump_sample.exceptions import DumpError
from pg_dump_sample.factory import build_conninfo, connect, get_profile, resolve_url
from pg_dump_sample.manifest.loader import load_manifest

console = Console(stderr=True)


# ============================================================================
# Helpers
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _settings_from_args(args: argparse.Namespace) -> ConnectionSettings:
    """Merge command-line flags over the PG* environment defaults."""
    overrides = {
        "host": args.host,
        "port": args.port,
        "user": args.username,
        "database": args.database,
    }
    if args.tls:
        overrides["sslmode"] = "require"
    return ConnectionSettings(**{k: v for k, v in overrides.items() if v is not None})


def _resolve_conninfo(args: argparse.Namespace) -> str:
    if args.profile:
        config_path = Path(args.config) if args.config else None
        return resolve_url(get_profile(args.profile, config_path))
    return build_conninfo(_settings_from_args(args))


def _output_mode(target: Path) -> int:
    """Permissions for the output file: the existing file's, else 0666 less umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@contextmanager
def _open_output(output_file: str | None) -> Iterator[BinaryIO]:
    """Yield the output sink.

    A named output file is written to a temporary file in the same
    directory and moved into place only when the block completes, so an
    aborted dump never leaves a truncated file behind.
    """
    if not output_file:
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return

    target = Path(output_file)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
    )
    try:
        with os.fdopen(fd, "wb") as tmp:
            yield tmp
        os.chmod(tmp_name, _output_mode(target))
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# ============================================================================
# Command implementation
# ============================================================================


def cmd_dump(args: argparse.Namespace) -> int:
    """Run a dump.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 on failure.
    """
    try:
        manifest = load_manifest(args.manifest_file)
        conninfo = _resolve_conninfo(args)
    except DumpError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] invalid configuration: {escape(str(e))}")
        return 1

    try:
        adapter = connect(conninfo, prompt_password=not args.no_password)
    except DumpError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1

    try:
        with _open_output(args.output_file) as sink:
            summary = make_dump(adapter, manifest, sink)
    except DumpError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] cannot write output: {escape(str(e))}")
        return 1
    finally:
        adapter.close()

    if args.verbose:
        console.print(
            f"[bold green]v[/bold green] Dumped {len(summary.tables)} tables "
            f"({summary.bytes_written} bytes of row data)"
        )
        if summary.added_tables:
            console.print(
                f"  Added for foreign keys: [yellow]"
                f"{escape(', '.join(summary.added_tables))}[/yellow]"
            )

    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    ``-h`` selects the host, as in the PostgreSQL client tools, so help is
    only available as ``--help``.
    """
    parser = argparse.ArgumentParser(
        prog="pg-dump-sample",
        usage="%(prog)s [options] [database]",
        description="Dump a foreign-key consistent sample of a PostgreSQL database",
        add_help=False,
    )

    parser.add_argument(
        "database",
        nargs="?",
        default=None,
        help="Database name (default: PGDATABASE)",
    )
    parser.add_argument(
        "-h", "--host",
        help="Database server host or socket directory (default: PGHOST or /tmp)",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        help="Database server port (default: PGPORT or 5432)",
    )
    parser.add_argument(
        "-U", "--username",
        help="Database user name (default: PGUSER or current user)",
    )
    parser.add_argument(
        "-w", "--no-password",
        action="store_true",
        help="Don't prompt for password",
    )
    parser.add_argument(
        "-f", "--manifest-file",
        required=True,
        help="Path to manifest file",
    )
    parser.add_argument(
        "-o", "--output-file",
        help="Path to the output file (default: stdout)",
    )
    parser.add_argument(
        "-s", "--tls",
        action="store_true",
        help="Use SSL/TLS database connection",
    )
    parser.add_argument(
        "--profile",
        help="Connect using a named profile from db.toml instead of PG* settings",
    )
    parser.add_argument(
        "--config",
        help="Path to db.toml (default: ./db.toml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--help",
        action="help",
        help="Show help",
    )
    parser.set_defaults(func=cmd_dump)

    return parser


def _check_profile_conflicts(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> None:
    """Reject connection flags, which a profile URL leaves unused."""
    if not args.profile:
        return
    given = [
        flag
        for flag, value in (
            ("-h/--host", args.host),
            ("-p/--port", args.port),
            ("-U/--username", args.username),
            ("-s/--tls", args.tls or None),
            ("database", args.database),
        )
        if value is not None
    ]
    if given:
        parser.error(f"--profile cannot be combined with {', '.join(given)}")


def main() -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = build_parser()
    args = parser.parse_args()
    _check_profile_conflicts(parser, args)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
