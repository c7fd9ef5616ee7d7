#!/usr/bin/env python3
"""
Command-line interface for the lending-library email service.

Usage:
    python cli.py [command] [options]

Commands:
    serve       Start the API server
    preview     Render an event's emails without sending them
    test        Run the test suite

Examples:
    python cli.py serve --reload
    python cli.py preview status-updated --json '{"parentEmail": "a@b.c", "itemName": "Train", "newStatus": "Returned"}'
    python cli.py test -v
"""

import argparse
import json
import subprocess
import sys
from typing import Optional


def run_preview(event_type: str, payload: str, admin_email: Optional[str]) -> None:
    """Render an event through a console sender and print every message."""
    from pydantic import ValidationError as PayloadError

    from notifications.channels import ConsoleEmailSender
    from notifications.dispatcher import NotificationDispatcher
    from notifications.errors import ValidationError
    from notifications.models import EVENT_MODELS, EventType

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON payload: {e}")
        sys.exit(1)

    try:
        event = EVENT_MODELS[EventType(event_type)].model_validate(data)
    except PayloadError as e:
        print(f"Invalid event payload: {e.error_count()} error(s)")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "body"
            print(f"  {location}: {error['msg']}")
        sys.exit(1)

    dispatcher = NotificationDispatcher(sender=ConsoleEmailSender(), admin_email=admin_email)

    try:
        result = dispatcher.handle(event)
    except ValidationError as e:
        print(f"{e}: {', '.join(e.missing)}")
        sys.exit(1)

    if result.skipped:
        print("Skipped: no email is sent for this event")
        return

    for message in result.messages:
        print("=" * 70)
        print(f"To:      {message.to}")
        print(f"Subject: {message.subject}")
        print("-" * 70)
        print(message.html or "(empty body)")


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = [sys.executable, "-m", "pytest"] + args
    sys.exit(subprocess.run(cmd).returncode)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)


def main() -> None:
    """Main CLI entry point."""
    from notifications.config import get_settings

    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Lending Library Email Service CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --reload
  %(prog)s preview reservation-created --json '{"parentEmail": "a@b.c", "itemName": "Blocks"}'
  %(prog)s test -v
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=settings.host, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Preview command
    preview_parser = subparsers.add_parser("preview", help="Render an event's emails")
    preview_parser.add_argument(
        "event",
        choices=["reservation-created", "waitlist-created", "status-updated"],
        help="Which event to render",
    )
    preview_parser.add_argument("--json", dest="payload", default="{}", help="Event body as JSON")
    preview_parser.add_argument(
        "--admin-email",
        default=settings.admin_email,
        help="Also render the admin copy for this mailbox",
    )

    # Test command
    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    args = parser.parse_args()

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "preview":
        run_preview(args.event, args.payload, args.admin_email)
    elif args.command == "test":
        run_tests(args.pytest_args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
