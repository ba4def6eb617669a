"""
jmcompta.cli
============

Administrator command line.

Examples
--------
$ python -m jmcompta.cli init-db
$ python -m jmcompta.cli --password admin2024 clients
$ python -m jmcompta.cli --password admin2024 close 2024
$ python -m jmcompta.cli --password admin2024 delete Jean Dupont --yes
$ python -m jmcompta.cli --password admin2024 export Jean Dupont --out ./dupont
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .auth import DeleteConfirmation, authenticate_admin
from .errors import ConfirmationRequired, JmComptaError
from .service import DossierService, OperationResult
from .settings import DB_URL, LOG_FORMAT, LOG_LEVEL

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m jmcompta.cli", description="JM Comptabilité admin tools")
    parser.add_argument("--password", help="shared admin secret (prompted if omitted)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the database tables")
    sub.add_parser("clients", help="list client dossiers")
    sub.add_parser("years", help="list fiscal years and their status")

    for name, help_text in (("close", "close a fiscal year"), ("reopen", "reopen a fiscal year")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("year", type=int)

    for name, help_text in (
        ("delete", "delete a client dossier and all its documents"),
        ("export", "write every document of a client to a directory"),
        ("report", "show a client's documents by year and month"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("first_name")
        p.add_argument("last_name")
        if name == "delete":
            p.add_argument("--yes", action="store_true", help="do not ask for confirmation")
        if name == "export":
            p.add_argument("--out", type=Path, required=True, help="target directory")

    return parser


def _report_warnings(result: OperationResult) -> None:
    for warning in result.warnings:
        print(f"⚠️  not saved: {warning}", file=sys.stderr)


def main(argv: Optional[List[str]] = None, service: Optional[DossierService] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    if args.command == "init-db":
        from .db import create_all

        create_all()
        print(f"✅ database initialised ({DB_URL})")
        return 0

    svc = service or DossierService.from_settings()
    try:
        password = args.password if args.password is not None else getpass.getpass("Admin password: ")
        token = authenticate_admin(password)

        if args.command == "clients":
            for rec in svc.clients(token):
                print(f"{rec.first_name} {rec.last_name}\t{rec.business_type}\t{len(rec.documents)} documents")

        elif args.command == "years":
            for s in svc.year_overview(token):
                state = f"closed {s.closed_date:%Y-%m-%d}" if s.is_closed else "open"
                print(f"{s.year}\t{state}")

        elif args.command == "close":
            _report_warnings(svc.close_year(token, args.year))
            print(f"🔒 {args.year} closed")

        elif args.command == "reopen":
            _report_warnings(svc.reopen_year(token, args.year))
            print(f"🔓 {args.year} open")

        elif args.command == "delete":
            key = (args.first_name, args.last_name)
            confirmed = args.yes or input(
                f"Delete {args.first_name} {args.last_name} and all documents? [y/N] "
            ).strip().lower() in ("y", "yes", "o", "oui")
            confirmation = DeleteConfirmation.for_client(*key) if confirmed else None
            try:
                result = svc.delete_client(token, key, confirmation)
            except ConfirmationRequired:
                print("aborted")
                return 1
            _report_warnings(result)
            print(f"🗑️  deleted {args.first_name} {args.last_name}")

        elif args.command == "export":
            files = svc.export_all(token, (args.first_name, args.last_name))
            args.out.mkdir(parents=True, exist_ok=True)
            for filename, content in files:
                (args.out / filename).write_bytes(content)
            print(f"📁 {len(files)} documents written to {args.out}")

        elif args.command == "report":
            report = svc.client_report(token, (args.first_name, args.last_name))
            print(f"{report.first_name} {report.last_name} ({report.business_type}) "
                  f"– {report.total_documents} documents")
            for year in report.years:
                print(f"  {year.year}")
                for month in year.months:
                    print(f"    {month.name}")
                    for line in month.documents:
                        print(f"      {line.label}: {line.display_name}")

    except JmComptaError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
