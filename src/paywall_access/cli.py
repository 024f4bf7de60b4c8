"""Command line helpers for generating keys, encrypting content and checking proofs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from cryptography.exceptions import InvalidTag

from paywall_access.core.logging_config import configure_logging
from paywall_access.security.crypto import decrypt_content, encrypt_content, generate_encryption_key
from paywall_access.security.proof import generate_payment_proof, verify_user_access

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paywall-access",
        description="Encrypt paywalled content and check payment proofs.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("keygen", help="Print a new base64 256-bit content key")

    enc = sub.add_parser("encrypt", help="Encrypt text with a content key")
    enc.add_argument("--key", required=True, help="Base64 content key")
    enc.add_argument("text", nargs="?", help="Text to encrypt (default: read stdin)")

    dec = sub.add_parser("decrypt", help="Decrypt a payload with a content key")
    dec.add_argument("--key", required=True, help="Base64 content key")
    dec.add_argument("payload", nargs="?", help="Base64 payload (default: read stdin)")

    proof = sub.add_parser("proof", help="Print a stub payment proof")
    proof.add_argument("user_address")
    proof.add_argument("content_id")
    proof.add_argument("amount")

    verify = sub.add_parser("verify", help="Check a payment proof against a user and content id")
    verify.add_argument("user_address")
    verify.add_argument("content_id")
    verify.add_argument("proof")
    return parser


def _read_input(value: Optional[str]) -> str:
    if value is not None:
        return value
    return sys.stdin.read().strip()


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "keygen":
        print(generate_encryption_key())
        return 0

    if args.command == "encrypt":
        try:
            print(encrypt_content(_read_input(args.text), args.key))
        except ValueError as e:
            logger.debug(f"Encryption failed: {e!r}")
            print("error: content key must be base64 of 32 bytes", file=sys.stderr)
            return 1
        return 0

    if args.command == "decrypt":
        try:
            print(decrypt_content(_read_input(args.payload), args.key))
        except (InvalidTag, ValueError) as e:
            logger.debug(f"Decryption failed: {e!r}")
            print("error: decryption failed (wrong key or corrupted payload)", file=sys.stderr)
            return 1
        return 0

    if args.command == "proof":
        print(generate_payment_proof(args.user_address, args.content_id, args.amount))
        return 0

    if args.command == "verify":
        result = verify_user_access(args.user_address, args.content_id, args.proof)
        print(json.dumps(result.to_dict()))
        return 0 if result.is_valid else 1

    parser.error(f"unknown command {args.command!r}")
    return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
