"""Command line interface for youload package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import httpx

from . import __version__
from .cli_progress import BatchUploadProgressDisplay, render_batch_table, render_configuration_summary
from .config import Settings
from .exceptions import ValidationError
from .models import Visibility
from .orchestrator import BatchOrchestrator, FileCollector
from .services.api_client import HTTPSubmissionClient
from .services.prober import VIDEO_EXTENSIONS, MediaProber
from .session import CredentialStore, SessionGuard
from .store import ItemStore

logger = logging.getLogger(__name__)

VERIFY_TIMEOUT = 30


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    from rich.logging import RichHandler

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _build_session(settings: Settings) -> SessionGuard:
    return SessionGuard(CredentialStore(settings.session_file))


def _describe_identity(identity: Optional[Dict]) -> str:
    if not identity:
        return "(unknown user)"
    name = identity.get("name") or identity.get("displayName")
    email = identity.get("email")
    if name and email:
        return f"{name} <{email}>"
    return str(name or email or identity.get("id") or "(unknown user)")


async def _verify_session(settings: Settings, session: SessionGuard) -> bool:
    async with httpx.AsyncClient(base_url=settings.backend_url, timeout=VERIFY_TIMEOUT) as http:
        return await session.verify(http)


def _item_metadata(args: argparse.Namespace, index: int, count: int) -> Dict[str, object]:
    """User edits to apply to the item at `index` (1-based) of `count`."""
    changes: Dict[str, object] = {}
    if args.title:
        changes["title"] = args.title if count == 1 else f"{args.title} {index}"
    if args.description is not None:
        changes["description"] = args.description
    if args.tags is not None:
        changes["tags_raw"] = args.tags
    if args.visibility:
        changes["visibility"] = args.visibility
    return changes


async def _run_upload(settings: Settings, args: argparse.Namespace) -> int:
    session = _build_session(settings)
    if not session.is_authenticated():
        raise CLIError(
            f"not logged in. Open {session.login_url(settings.backend_url)} "
            "and run 'youload login --token <token>'"
        )

    files = FileCollector.collect_files(args.sources)
    if not files:
        extensions = ", ".join(sorted(VIDEO_EXTENSIONS))
        raise CLIError(f"no video files found (supported: {extensions})")

    store = ItemStore(settings.max_batch_size)
    items = store.add(files)
    if len(files) > len(items):
        print(
            f"WARNING: only the first {len(items)} of {len(files)} videos are uploaded "
            f"(limit {settings.max_batch_size} per batch)",
            file=sys.stderr,
        )

    prober = MediaProber(settings.ffprobe_path, settings.probe_timeout)
    for item in items:
        prober.schedule(store, item)
    await prober.wait()

    for index, item in enumerate(items, start=1):
        changes = _item_metadata(args, index, len(items))
        current = store.get(item.id)
        if args.no_short_form and current is not None and current.is_short_form:
            changes["is_short_form"] = False
        if changes:
            store.edit(item.id, **changes)

    render_batch_table(store.all(), store.progress())

    if not await _verify_session(settings, session):
        raise CLIError("session expired, please log in again")

    display = BatchUploadProgressDisplay()
    async with HTTPSubmissionClient(
        settings.backend_url,
        session,
        timeout=settings.request_timeout,
    ) as client:
        orchestrator = BatchOrchestrator(store, session, client)
        display.attach(orchestrator)
        try:
            summary = await orchestrator.run()
        except ValidationError as exc:
            raise CLIError(str(exc)) from exc
        finally:
            display.close()

    if summary is None:
        return 1
    return 0 if summary.all_success else 1


async def _run_login(settings: Settings, token: Optional[str]) -> int:
    session = _build_session(settings)
    if not token:
        print(f"Open {session.login_url(settings.backend_url)} in a browser to log in with Google,")
        print("then run: youload login --token <token>")
        return 0

    session.handle_auth_success(token, {})
    if not await _verify_session(settings, session):
        raise CLIError("token was rejected by the server")
    print(f"Logged in as {_describe_identity(session.identity)}")
    return 0


async def _run_whoami(settings: Settings) -> int:
    session = _build_session(settings)
    if not session.is_authenticated():
        print("Not logged in")
        return 1
    if not await _verify_session(settings, session):
        print("Session expired, please log in again")
        return 1
    print(_describe_identity(session.identity))
    return 0


def _run_logout(settings: Settings) -> int:
    _build_session(settings).sign_out()
    print("Logged out")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="youload",
        description="Upload up to 10 videos at once to the publishing service.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"youload {__version__}",
    )

    commands = parser.add_subparsers(dest="command")

    login = commands.add_parser("login", help="Store the credential returned by the Google login")
    login.add_argument("--token", default=None, help="Bearer token from the login redirect")

    commands.add_parser("logout", help="Forget the stored credential")
    commands.add_parser("whoami", help="Show the logged in user")

    upload = commands.add_parser("upload", help="Upload video files or folders")
    upload.add_argument("sources", nargs="+", type=Path, help="Video files or folders")
    upload.add_argument(
        "-t",
        "--title",
        default=None,
        help="Title (numbered when several videos are uploaded; default: file name)",
    )
    upload.add_argument("-d", "--description", default=None, help="Description for every video")
    upload.add_argument("--tags", default=None, help="Comma separated tags")
    upload.add_argument(
        "-v",
        "--visibility",
        choices=[v.value for v in Visibility],
        default=None,
        help="Visibility (default: public)",
    )
    upload.add_argument(
        "--no-short-form",
        action="store_true",
        help="Upload vertical clips of 60s or less as regular videos",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        if args.command == "logout":
            return _run_logout(settings)
        if args.command == "login":
            return asyncio.run(_run_login(settings, args.token))
        if args.command == "whoami":
            return asyncio.run(_run_whoami(settings))

        sources: List[Path] = [Path(source).expanduser() for source in args.sources]
        args.sources = sources
        render_configuration_summary(
            {
                "Sources": ", ".join(str(source) for source in sources),
                "Backend": settings.backend_url,
                "Session File": str(settings.session_file),
                "ffprobe": settings.ffprobe_path,
                "Visibility": args.visibility or "public",
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )
        return asyncio.run(_run_upload(settings, args))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
