"""Utility CLI for managing the message document and upload tree."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import json_utils as json  # noqa: E402
from config import config  # noqa: E402
from services.attachment_archiver import AttachmentArchiver  # noqa: E402
from services.attachment_paths import is_message_id  # noqa: E402
from services.message_store import MessageStore  # noqa: E402


class CLIError(Exception):
    """Raised when CLI validation fails."""


def _resolve_store(data_dir: Optional[str]) -> MessageStore:
    settings = config.STORAGE.model_copy()
    if data_dir:
        settings.data_dir = data_dir
    return MessageStore(settings.messages_path, settings.uploads_path)


def _summaries(store: MessageStore) -> List[Dict[str, Any]]:
    return [
        {
            "id": message.id,
            "timestamp": message.to_document()["timestamp"],
            "files": len(message.files),
            "text": message.text,
        }
        for message in store.sorted_messages()
    ]


def _print_table(entries: List[Dict[str, Any]]) -> None:
    if not entries:
        print("(no messages found)")
        return
    header = f"{'MESSAGE ID':<36}  {'CREATED':<32}  {'FILES':>5}  TEXT"
    print(header)
    print("-" * len(header))
    for entry in entries:
        text = entry["text"].replace("\n", " ")
        if len(text) > 40:
            text = text[:37] + "..."
        print(f"{entry['id']:<36}  {entry['timestamp']:<32}  {entry['files']:>5}  {text}")


def _command_init(args: argparse.Namespace) -> int:
    store = _resolve_store(args.data_dir)
    store.ensure_layout()
    print(f"Storage ready: {store.messages_file} and {store.uploads_root}")
    return 0


def _command_list(args: argparse.Namespace) -> int:
    store = _resolve_store(args.data_dir)
    entries = _summaries(store)
    if args.limit is not None:
        entries = entries[-args.limit:] if args.limit > 0 else []

    if args.as_json:
        print(json.dumps(entries, indent=2))
    else:
        _print_table(entries)
    return 0


def _command_delete(args: argparse.Namespace) -> int:
    if not is_message_id(args.id):
        raise CLIError("--id must be a canonical message UUID")
    store = _resolve_store(args.data_dir)
    message = store.get(args.id)
    if message is None:
        raise CLIError(f"Message {args.id} not found")

    print(json.dumps(message.to_document(), indent=2))
    if not args.commit:
        print("\nDry-run mode: nothing was removed. Re-run with --commit to delete.")
        return 0

    store.delete_by_id(args.id)
    print(f"Removed message {args.id} and its attachments.")
    return 0


def _command_clear(args: argparse.Namespace) -> int:
    store = _resolve_store(args.data_dir)
    count = len(store.read_all())
    if not args.commit:
        print(f"Dry-run mode: {count} message(s) would be removed. Re-run with --commit to clear.")
        return 0
    if not store.clear_all():
        raise CLIError("Unable to clear the message document")
    print(f"Removed {count} message(s).")
    return 0


def _command_verify(args: argparse.Namespace) -> int:
    store = _resolve_store(args.data_dir)
    archiver = AttachmentArchiver(store.uploads_root)
    problems: Dict[str, List[str]] = {}
    for message in store.read_all():
        missing = archiver.missing_files(message)
        if missing:
            problems[message.id] = [ref.stored_relative_path for ref in missing]

    if args.as_json:
        print(json.dumps(problems, indent=2))
    elif not problems:
        print("All attachment files are present.")
    else:
        for message_id, paths in problems.items():
            print(f"{message_id}:")
            for path in paths:
                print(f"  missing {path}")
    return 1 if problems else 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintenance tools for the message board storage")
    parser.add_argument("--data-dir", default=None, help="Override the configured data directory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create the data directory, uploads directory and empty document")
    init_parser.set_defaults(func=_command_init)

    list_parser = subparsers.add_parser("list", help="List stored messages, oldest first")
    list_parser.add_argument("--limit", type=int, default=None, help="Show only the newest N messages")
    list_parser.add_argument("--json", dest="as_json", action="store_true", help="Output as JSON")
    list_parser.set_defaults(func=_command_list)

    delete_parser = subparsers.add_parser("delete", help="Delete one message and its attachments")
    delete_parser.add_argument("--id", required=True, help="Message identifier")
    delete_parser.add_argument("--commit", action="store_true", help="Apply deletion (defaults to dry-run)")
    delete_parser.set_defaults(func=_command_delete)

    clear_parser = subparsers.add_parser("clear", help="Delete every message and attachment")
    clear_parser.add_argument("--commit", action="store_true", help="Apply deletion (defaults to dry-run)")
    clear_parser.set_defaults(func=_command_clear)

    verify_parser = subparsers.add_parser("verify", help="Report messages whose attachment files are missing")
    verify_parser.add_argument("--json", dest="as_json", action="store_true", help="Output as JSON")
    verify_parser.set_defaults(func=_command_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except CLIError as exc:
        parser.error(str(exc))
        return 2


if __name__ == "__main__":  # pragma: no cover - manual invocation only
    raise SystemExit(main())
