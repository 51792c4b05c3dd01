#!/usr/bin/env python3
"""
credgate -- command-line helpers for password hashes and accounts.

Usage:
  python main.py hash
  python main.py hash --iterations 310000
  python main.py verify 'PBKDF2WithHmacSHA512:210000:2048:<salt>:<hash>'
  python main.py rehash-check 'PBKDF2WithHmacSHA512:100000:2048:<salt>:<hash>'
  python main.py create-account user@example.com

Passwords are always read with getpass, never from argv, so they do not land
in shell history or the process list.

Environment variables (see core/config.py):
  HASH_ALGORITHM, HASH_ITERATIONS, HASH_SALT_LENGTH, HASH_KEY_LENGTH
  DATABASE_URL   Account store used by create-account.
"""

import argparse
import sys
from getpass import getpass
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from auth.exceptions import ConfigurationError, MalformedHashError
from auth.passwords import HasherConfig, PasswordHasher, build_password_hasher, supported_algorithms
from auth.store import AccountStore
from core.config import get_settings


def _build_hasher(args: argparse.Namespace) -> PasswordHasher:
    """Settings-based hasher, with any command-line overrides applied on top."""
    settings = get_settings()
    if args.algorithm is None and args.iterations is None:
        return build_password_hasher(settings)
    return PasswordHasher(
        HasherConfig.with_algorithm(
            args.algorithm or settings.hash_algorithm,
            iterations=settings.hash_iterations if args.iterations is None else args.iterations,
            salt_length=settings.hash_salt_length,
            key_length=settings.hash_key_length,
        )
    )


def _prompt_password(confirm: bool) -> Optional[str]:
    """Read a password with getpass. Surrounding whitespace is dropped, as at login."""
    password = getpass("Password: ")
    if confirm and getpass("Repeat password: ") != password:
        print("  [!] Passwords do not match.", file=sys.stderr)
        return None
    return password.strip()


def cmd_hash(args: argparse.Namespace) -> int:
    password = _prompt_password(confirm=True)
    if password is None:
        return 1
    print(_build_hasher(args).hash_password(password))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    password = _prompt_password(confirm=False)
    if password is None:
        return 1
    try:
        matched = _build_hasher(args).verify_password(password, args.encoded)
    except MalformedHashError as e:
        print(f"  [!] Malformed hash: {e}", file=sys.stderr)
        return 2
    print("match" if matched else "no match")
    return 0 if matched else 1


def cmd_rehash_check(args: argparse.Namespace) -> int:
    try:
        stale = _build_hasher(args).needs_rehash(args.encoded)
    except MalformedHashError as e:
        print(f"  [!] Malformed hash: {e}", file=sys.stderr)
        return 2
    print("rehash needed" if stale else "up to date")
    return 0


def cmd_create_account(args: argparse.Namespace) -> int:
    email_address = args.email.strip()
    if not email_address:
        print("  [!] Email address is required.", file=sys.stderr)
        return 1
    password = _prompt_password(confirm=True)
    if not password:
        print("  [!] Password is required.", file=sys.stderr)
        return 1
    hashed = _build_hasher(args).hash_password(password)
    store = AccountStore(get_settings().database_url)
    try:
        account_id = store.create_account(email_address, hashed)
    except IntegrityError:
        print(f"  [!] An account for {email_address.lower()} already exists.", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(f"OK -> {account_id}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="credgate",
        description="Hash and verify passwords; seed the account store.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py hash
  python main.py verify 'PBKDF2WithHmacSHA512:210000:2048:<salt>:<hash>'
  HASH_ITERATIONS=600000 python main.py rehash-check '<stored hash>'
  DATABASE_URL=sqlite:///accounts.db python main.py create-account user@example.com
        """,
    )
    parser.add_argument(
        "--algorithm",
        choices=supported_algorithms(),
        default=None,
        metavar="NAME",
        help="Hash algorithm for new hashes (default: HASH_ALGORITHM setting)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        metavar="N",
        help="Iteration count for new hashes (default: HASH_ITERATIONS setting)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_hash = sub.add_parser("hash", help="Prompt for a password and print its encoded hash")
    p_hash.set_defaults(func=cmd_hash)

    p_verify = sub.add_parser("verify", help="Prompt for a password and check it against an encoded hash")
    p_verify.add_argument("encoded", help="Encoded hash as stored")
    p_verify.set_defaults(func=cmd_verify)

    p_rehash = sub.add_parser("rehash-check", help="Report whether an encoded hash uses outdated parameters")
    p_rehash.add_argument("encoded", help="Encoded hash as stored")
    p_rehash.set_defaults(func=cmd_rehash_check)

    p_create = sub.add_parser("create-account", help="Create an account in the configured store")
    p_create.add_argument("email", help="Account email address (stored lowercase)")
    p_create.set_defaults(func=cmd_create_account)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"  [!] Invalid hash configuration: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print(f"  [!] Invalid settings: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
