"""CLI entry point for the WhatsApp Web REST client."""

from __future__ import annotations

import argparse
import os
import sys

from .client import WhatsAppClient
from .config import AppConfig
from .core.validation import format_to_whatsapp_id, is_valid_whatsapp_number
from .exceptions import WhatsAppError
from .utils.logging import configure_logging

EXIT_OK = 0
EXIT_ERROR = 1

CONTACT_PREVIEW_LIMIT = 10


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return EXIT_ERROR


def _session_id(args: argparse.Namespace) -> str:
    return getattr(args, "session", None) or args.session_id


def cmd_session_start(client: WhatsAppClient, args: argparse.Namespace) -> int:
    session_id = _session_id(args)
    print(f"Starting WhatsApp session: {session_id}")
    response = client.start_session(session_id)
    if not response.is_successful():
        return _fail(f"✗ Failed to start session: {response.get_error_message()}")
    print("✓ Session started successfully!")
    print(f"Message: {response.get('message', '')}")
    return cmd_session_qr(client, args)


def cmd_session_status(client: WhatsAppClient, args: argparse.Namespace) -> int:
    session_id = _session_id(args)
    response = client.get_session_status(session_id)
    if not response.is_successful():
        return _fail(f"✗ Failed to get session status: {response.get_error_message()}")
    state = response.get("state", "UNKNOWN")
    message = response.get("message", "")
    print(f"Session: {session_id}")
    print(f"State: {state}" + (f" ({message})" if message else ""))
    return EXIT_OK


def cmd_session_qr(client: WhatsAppClient, args: argparse.Namespace) -> int:
    session_id = _session_id(args)
    response = client.get_session_qr(session_id)
    if not response.is_successful():
        return _fail(f"✗ Failed to get QR code: {response.get_error_message()}")
    print("\nQR Code for session authentication:")
    print("Please scan this QR code with your WhatsApp mobile app:\n")
    print(f"{response.get('qr', '')}\n")
    print(f"Or visit: {client.qr_image_url(session_id)}")
    return EXIT_OK


def cmd_session_stop(client: WhatsAppClient, args: argparse.Namespace) -> int:
    session_id = _session_id(args)
    print(f"Stopping WhatsApp session: {session_id}")
    response = client.stop_session(session_id)
    if not response.is_successful():
        return _fail(f"✗ Failed to stop session: {response.get_error_message()}")
    print("✓ Session stopped successfully!")
    print(f"Message: {response.get('message', '')}")
    return EXIT_OK


def cmd_session_list(client: WhatsAppClient, args: argparse.Namespace) -> int:
    response = client.get_sessions()
    if not response.is_successful():
        return _fail(f"✗ Failed to get sessions: {response.get_error_message()}")
    sessions = response.get_result()
    if isinstance(sessions, dict):
        sessions = sessions.get("sessions", [])
    print("Active WhatsApp sessions:")
    if not sessions:
        print("No active sessions found.")
        return EXIT_OK
    for session in sessions:
        line = f"• {session}"
        status = client.get_session_status(str(session))
        if status.is_successful():
            line += f" ({status.get('state', 'UNKNOWN')})"
        print(line)
    return EXIT_OK


def cmd_message_send(client: WhatsAppClient, args: argparse.Namespace) -> int:
    session_id = _session_id(args)
    chat_id = args.chat_id
    if "@" not in chat_id and is_valid_whatsapp_number(chat_id):
        chat_id = format_to_whatsapp_id(chat_id)

    print(f"Sending message to: {chat_id}")
    if args.verbose:
        print(f"Message: {args.message}")
        print(f"Session: {session_id}")

    response = client.send_text_message(chat_id, args.message, session_id=session_id)
    if not response.is_successful():
        return _fail(f"✗ Failed to send message: {response.get_error_message()}")
    print("✓ Message sent successfully!")
    if args.verbose:
        message = response.get("message", {})
        message_id = message.get("id", {}) if isinstance(message, dict) else {}
        if isinstance(message_id, dict):
            message_id = message_id.get("_serialized", "")
        print(f"Message ID: {message_id or response.get('id', '')}")
    return EXIT_OK


def cmd_contact_list(client: WhatsAppClient, args: argparse.Namespace) -> int:
    response = client.get_contacts(_session_id(args))
    if not response.is_successful():
        return _fail(f"✗ Failed to get contacts: {response.get_error_message()}")
    contacts = response.get_result()
    if isinstance(contacts, dict):
        contacts = contacts.get("contacts", [])
    contacts = contacts or []

    print(f"Contacts (showing first {CONTACT_PREVIEW_LIMIT}):")
    for contact in contacts[:CONTACT_PREVIEW_LIMIT]:
        name = contact.get("name") or contact.get("number") or "Unknown"
        contact_id = contact.get("id")
        number = contact_id.get("user", "") if isinstance(contact_id, dict) else ""
        print(f"• {name} ({number})")
    if len(contacts) > CONTACT_PREVIEW_LIMIT:
        print(f"... and {len(contacts) - CONTACT_PREVIEW_LIMIT} more contacts")
    return EXIT_OK


def cmd_ping(client: WhatsAppClient, args: argparse.Namespace) -> int:
    response = client.ping()
    if not response.is_successful():
        return _fail("✗ API is not responding!")
    print(f"✓ API is responsive: {response.get('message', '')}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wwebclient",
        description="WhatsApp Web REST client console commands",
    )
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("WWEBJS_BASE_URL", ""),
        help="Base URL of the wwebjs-api container (env: WWEBJS_BASE_URL)",
    )
    parser.add_argument(
        "--api-key",
        default=os.environ.get("WWEBJS_API_KEY", ""),
        help="API key sent as x-api-key (env: WWEBJS_API_KEY)",
    )
    parser.add_argument(
        "--session-id",
        "-s",
        default=os.environ.get("WWEBJS_SESSION_ID", ""),
        help="Default session ID (env: WWEBJS_SESSION_ID, default: 'default')",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # session commands
    session_parser = subparsers.add_parser("session", help="Session management")
    session_sub = session_parser.add_subparsers(dest="action")
    for action, handler, help_text in [
        ("start", cmd_session_start, "Start a new session"),
        ("status", cmd_session_status, "Get session status"),
        ("qr", cmd_session_qr, "Get QR code for authentication"),
        ("stop", cmd_session_stop, "Stop a session"),
    ]:
        action_parser = session_sub.add_parser(action, help=help_text)
        action_parser.add_argument("session", nargs="?", help="Session ID")
        action_parser.set_defaults(handler=handler)
    list_parser = session_sub.add_parser("list", help="List all sessions")
    list_parser.set_defaults(handler=cmd_session_list)

    # message commands
    message_parser = subparsers.add_parser("message", help="Messaging")
    message_sub = message_parser.add_subparsers(dest="action")
    send_parser = message_sub.add_parser("send", help="Send a text message")
    send_parser.add_argument("chat_id", help="Chat ID or phone number")
    send_parser.add_argument("message", help="Message text")
    send_parser.add_argument("session", nargs="?", help="Session ID")
    send_parser.set_defaults(handler=cmd_message_send)

    # contact commands
    contact_parser = subparsers.add_parser("contact", help="Contacts")
    contact_sub = contact_parser.add_subparsers(dest="action")
    contact_list_parser = contact_sub.add_parser("list", help="List contacts")
    contact_list_parser.add_argument("session", nargs="?", help="Session ID")
    contact_list_parser.set_defaults(handler=cmd_contact_list)

    # ping command
    ping_parser = subparsers.add_parser("ping", help="Check API health")
    ping_parser.set_defaults(handler=cmd_ping)

    return parser


def load_config(args: argparse.Namespace) -> AppConfig:
    """Merge config file, environment and CLI flags, in that order."""
    config = AppConfig.from_json_file(args.config) if args.config else AppConfig()
    config.apply_env()
    if args.base_url:
        config.client.base_url = args.base_url
    if args.api_key:
        config.client.api_key = args.api_key
    if args.session_id:
        config.client.default_session_id = args.session_id
    if args.verbose:
        config.logging.level = "DEBUG"
    return config


def main(argv: list[str] | None = None, client: WhatsAppClient | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors and 0 after --help.
        return EXIT_OK if e.code in (0, None) else EXIT_ERROR

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        config = load_config(args)
        configure_logging(config.logging)
        client = client or WhatsAppClient(config.client)
        args.session_id = args.session_id or client.config.default_session_id
        return handler(client, args)
    except (WhatsAppError, OSError, ValueError) as e:
        return _fail(f"Error: {e}")


if __name__ == "__main__":
    sys.exit(main())
