#!/usr/bin/env python3
"""Contact manager CLI."""
from __future__ import annotations

import argparse
import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Iterable, Optional

from contact_manager.config import ConfigError, load_settings
from contact_manager.contacts import Contact, ContactNotFoundError, PersistenceError
from contact_manager.currency import format_display
from contact_manager.services import ContactService, build_contact_service


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contact-manager",
        description="Keep personal contacts with salaries shown in BRL, USD and EUR.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output (rate fetches, storage operations).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List contacts, one page at a time.")
    list_parser.add_argument("--query", default="", help="Filter by name, email or phone.")
    list_parser.add_argument("--page", type=int, default=1, help="1-based page number.")

    add_parser = subparsers.add_parser("add", help="Create a contact.")
    add_parser.add_argument("--name", required=True)
    add_parser.add_argument("--phone", required=True)
    add_parser.add_argument("--email", required=True)
    add_parser.add_argument(
        "--salary", type=float, required=True, help="Monthly salary in BRL."
    )
    add_parser.add_argument(
        "--photo-file", type=Path, help="Image stored with the contact as a data URL."
    )

    edit_parser = subparsers.add_parser("edit", help="Change fields of a contact.")
    edit_parser.add_argument("contact_id")
    edit_parser.add_argument("--name")
    edit_parser.add_argument("--phone")
    edit_parser.add_argument("--email")
    edit_parser.add_argument("--salary", type=float, help="New salary in BRL.")
    edit_parser.add_argument("--photo-file", type=Path)

    remove_parser = subparsers.add_parser("remove", help="Delete a contact.")
    remove_parser.add_argument("contact_id")

    subparsers.add_parser("rates", help="Show the exchange rates in use.")

    import_parser = subparsers.add_parser(
        "import-legacy",
        help="Import contacts exported from the old browser app.",
    )
    import_parser.add_argument(
        "export_file",
        type=Path,
        help="JSON array, or an object holding it under \"contacts_db\".",
    )

    return parser


def _photo_data_url(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def format_contact_rows(contacts: Iterable[Contact]) -> str:
    """Return a human-friendly summary table string."""

    lines = ["ID | Name | Phone | Email | BRL | USD | EUR"]
    for contact in contacts:
        usd = format_display(contact.salary_usd, "USD") if contact.salary_usd is not None else "-"
        eur = format_display(contact.salary_eur, "EUR") if contact.salary_eur is not None else "-"
        lines.append(
            f"{contact.id} | {contact.name} | {contact.phone} | {contact.email} | "
            f"{format_display(contact.salary_base, 'BRL')} | {usd} | {eur}"
        )
    return "\n".join(lines)


def _cmd_list(service: ContactService, query: str, page: int) -> int:
    result = service.list_page(query, page)
    if not result.items:
        print("No contacts found.")
    else:
        print(format_contact_rows(result.items))
    print(f"\nPage {result.page} of {result.total_pages} ({result.total_items} contacts)")
    return 0


def _cmd_add(service: ContactService, args: argparse.Namespace) -> int:
    contact = service.create(
        {
            "name": args.name,
            "phone": args.phone,
            "email": args.email,
            "salary_base": args.salary,
            "photo": _photo_data_url(args.photo_file),
        }
    )
    print(f"Created contact {contact.id}")
    print(format_contact_rows([contact]))
    return 0


def _cmd_edit(service: ContactService, args: argparse.Namespace) -> int:
    changes = {
        key: value
        for key, value in (
            ("name", args.name),
            ("phone", args.phone),
            ("email", args.email),
            ("salary_base", args.salary),
            ("photo", _photo_data_url(args.photo_file)),
        )
        if value is not None
    }
    if not changes:
        print("Nothing to change.", file=sys.stderr)
        return 1

    contact = service.edit(args.contact_id, changes)
    print(f"Updated contact {contact.id}")
    print(format_contact_rows([contact]))
    return 0


def _load_legacy_export(path: Path) -> list:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("contacts_db", [])
        # localStorage dumps keep the value as a JSON string
        if isinstance(data, str):
            data = json.loads(data)
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a contact list")
    return data


def _cmd_import_legacy(service: ContactService, path: Path) -> int:
    imported, rejected = service.import_legacy(_load_legacy_export(path))
    print(f"Imported {imported} contact(s), rejected {rejected}.")
    return 0


def _cmd_rates(service: ContactService) -> int:
    rates = service.rates()
    source = "fallback" if rates.fallback else "live"
    print(f"USD: {format_display(rates.usd, 'BRL')} ({source})")
    print(f"EUR: {format_display(rates.eur, 'BRL')} ({source})")
    print(f"Fetched at: {rates.fetched_at.isoformat()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        service = build_contact_service(load_settings())
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    try:
        if args.command == "list":
            return _cmd_list(service, args.query, args.page)
        if args.command == "add":
            return _cmd_add(service, args)
        if args.command == "edit":
            return _cmd_edit(service, args)
        if args.command == "remove":
            service.remove(args.contact_id)
            print(f"Deleted contact {args.contact_id}")
            return 0
        if args.command == "rates":
            return _cmd_rates(service)
        if args.command == "import-legacy":
            return _cmd_import_legacy(service, args.export_file)
    except ContactNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
