"""Command line access to the record store.

Identities are Ed25519 key files containing the 32-byte private seed in hex,
as written by ``textstore keygen``. Every command runs directly against the
configured ``DATABASE_URL``.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from textstore.core.errors import RecordStoreError
from textstore.core.settings import settings
from textstore.db.session import SessionLocal, create_tables
from textstore.schemas.record import CounterResponse, RecordResponse
from textstore.services.crypto import CryptoService
from textstore.services.record_service import RecordStore


def load_identity(path: str) -> bytes:
    """Return the public key of the key file at `path`."""
    private_hex = Path(path).read_text(encoding="utf-8").strip()
    return CryptoService.public_key_from_private(private_hex)


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _keygen(args: argparse.Namespace) -> int:
    private_hex, public_hex = CryptoService.generate_key_pair()
    out = Path(args.out)
    if out.exists() and not args.force:
        print(f"{out} already exists; pass --force to overwrite", file=sys.stderr)
        return 1
    out.write_text(private_hex + "\n", encoding="utf-8")
    out.chmod(0o600)
    _emit({"pubkey": public_hex, "keypair": str(out)})
    return 0


def _run_store_command(args: argparse.Namespace) -> int:
    caller = None
    if getattr(args, "keypair", None) is not None:
        try:
            caller = load_identity(args.keypair)
        except (OSError, ValueError) as err:
            print(f"error: cannot load key file {args.keypair}: {err}", file=sys.stderr)
            return 1

    create_tables()
    db = SessionLocal()
    try:
        store = RecordStore(db)
        command = args.command
        if command == "init":
            state = store.initialize(caller)
            _emit(CounterResponse.from_state(state, store.counter_address).model_dump())
        elif command == "counter":
            state = store.counter()
            _emit(CounterResponse.from_state(state, store.counter_address).model_dump())
        elif command == "create":
            record = store.create_text(caller, args.title, args.content)
            _emit(RecordResponse.from_record(record, store.record_address(record.id)).model_dump())
        elif command == "read":
            record = store.read(args.id)
            _emit(RecordResponse.from_record(record, store.record_address(record.id)).model_dump())
        elif command == "update":
            record = store.update(caller, args.id, args.title, args.content)
            _emit(RecordResponse.from_record(record, store.record_address(record.id)).model_dump())
        elif command == "delete":
            refunded = store.delete(caller, args.id)
            _emit({"id": args.id, "refunded": refunded})
        elif command == "balance":
            _emit({"balance": store.deposit_balance(caller)})
    except RecordStoreError as err:
        print(f"error {err.number} {err.code}: {err.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="textstore", description="Textstore record store")
    sub = parser.add_subparsers(dest="command", required=True)

    keygen = sub.add_parser("keygen", help="Generate an Ed25519 key file")
    keygen.add_argument("--out", default="id.key", help="Key file to write")
    keygen.add_argument("--force", action="store_true", help="Overwrite an existing key file")

    def with_keypair(p: argparse.ArgumentParser) -> argparse.ArgumentParser:
        p.add_argument("--keypair", required=True, help="Key file of the caller")
        return p

    with_keypair(sub.add_parser("init", help="Initialize the global counter"))
    sub.add_parser("counter", help="Show the global counter")

    create = with_keypair(sub.add_parser("create", help="Create a record"))
    create.add_argument("--title", required=True)
    create.add_argument("--content", required=True)

    read = sub.add_parser("read", help="Read a record")
    read.add_argument("id", type=int)

    update = with_keypair(sub.add_parser("update", help="Update a record you own"))
    update.add_argument("id", type=int)
    update.add_argument("--title", required=True)
    update.add_argument("--content", required=True)

    delete = with_keypair(sub.add_parser("delete", help="Delete a record"))
    delete.add_argument("id", type=int)

    with_keypair(sub.add_parser("balance", help="Show net deposit flow"))
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper())
    if args.command == "keygen":
        return _keygen(args)
    return _run_store_command(args)


if __name__ == "__main__":
    sys.exit(main())
