import argparse
import logging
import os
import sys
from typing import List, Optional

from . import crypto
from .errors import InvalidKeyLength, InvalidNonceLength, TokenError
from .signer import AUTO, FixedNonce, Signer

"""
run.py — command-line entry point.

What you can do here:
- keygen:  make a fresh 32-byte key (print it, or write it to a file)
- sign:    seal a message into a token and print it as Base64url
- verify:  check a token and print the message inside

Key lookup order (first one set wins):
  --key B64URL, --key-file PATH, $SEALTOK_KEY, $SEALTOK_KEY_PATH
"""

log = logging.getLogger(__name__)

KEY_ENV = "SEALTOK_KEY"
KEY_PATH_ENV = "SEALTOK_KEY_PATH"


# -------------------------
# Key resolution
# -------------------------

def resolve_key(args: argparse.Namespace) -> bytes:
    """Find the key from flags or environment; exit with a short message if none."""
    try:
        if args.key:
            return crypto.import_key_b64url(args.key)
        if args.key_file:
            return crypto.load_key_file(args.key_file)
        env_key = os.environ.get(KEY_ENV)
        if env_key:
            return crypto.import_key_b64url(env_key)
        env_path = os.environ.get(KEY_PATH_ENV)
        if env_path:
            return crypto.load_key_file(env_path)
    except InvalidKeyLength as exc:
        raise SystemExit(f"Bad key: {exc}")
    except ValueError as exc:
        raise SystemExit(f"Bad key encoding: {exc}")
    except OSError as exc:
        raise SystemExit(f"Cannot read key file: {exc}")
    raise SystemExit(f"No key given. Use --key/--key-file or set {KEY_ENV} / {KEY_PATH_ENV}.")


# -------------------------
# Commands
# -------------------------

def cmd_keygen(args: argparse.Namespace) -> None:
    """Print a new key as Base64url, or write the raw bytes to --out."""
    key = crypto.generate_key()
    if args.out:
        try:
            path = crypto.write_key_file(args.out, key)
        except FileExistsError:
            raise SystemExit(f"Refusing to overwrite existing key file {args.out}")
        print(f"Wrote key to {path}")
    else:
        print(crypto.export_key_b64url(key))


def cmd_sign(args: argparse.Namespace) -> None:
    """Seal the message words (joined by spaces) into a token."""
    signer = Signer(resolve_key(args))
    nonce = AUTO
    if args.nonce:
        try:
            nonce = FixedNonce(bytes.fromhex(args.nonce))
        except InvalidNonceLength as exc:
            raise SystemExit(f"Bad nonce: {exc}")
        except ValueError:
            raise SystemExit("Bad nonce: expected 48 hex characters")
    message = " ".join(args.message or []).encode("utf-8")
    token = signer.sign(message, nonce)
    if args.raw:
        sys.stdout.buffer.write(token)
        sys.stdout.buffer.flush()
    else:
        print(crypto.b64url_encode(token))


def cmd_verify(args: argparse.Namespace) -> None:
    """
    Verify a token and print the message it carries.

    With --raw the token is read as raw bytes from stdin and the message is
    written to stdout byte for byte, so binary payloads survive.
    """
    signer = Signer(resolve_key(args))
    if args.raw and args.token:
        raise SystemExit("--raw reads the token from stdin; drop the TOKEN argument")
    if not args.raw and not args.token:
        raise SystemExit("TOKEN is required unless --raw is given")
    try:
        if args.raw:
            message = signer.verify(sys.stdin.buffer.read())
        else:
            message = signer.verify_text(args.token)
    except TokenError as exc:
        # Same wording the library uses; no hint about what was wrong inside.
        raise SystemExit(f"Invalid token: {exc}")
    if args.raw:
        sys.stdout.buffer.write(message)
        sys.stdout.buffer.flush()
    else:
        print(message.decode("utf-8", errors="replace"))


# -------------------------
# Argument parsing
# -------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse subcommands.
    Quick examples:
      New key:  python -m sealtok.run keygen --out ~/.sealtok/key
      Sign:     SEALTOK_KEY_PATH=~/.sealtok/key python -m sealtok.run sign user=42
      Verify:   SEALTOK_KEY_PATH=~/.sealtok/key python -m sealtok.run verify <token>
      Binary:   ... sign --raw data | ... verify --raw > data.out
    """
    p = argparse.ArgumentParser(prog="sealtok")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    sub = p.add_subparsers(dest="command")
    sub.required = True

    sp = sub.add_parser("keygen", help="Generate a new secret key")
    sp.add_argument("--out", help="Write raw key bytes here instead of printing Base64url")
    sp.set_defaults(func=cmd_keygen)

    for name, func, helptext in (
        ("sign", cmd_sign, "Seal a message into a token"),
        ("verify", cmd_verify, "Check a token and print its message"),
    ):
        sp = sub.add_parser(name, help=helptext)
        sp.add_argument("--key", help="Base64url secret key")
        sp.add_argument("--key-file", help="File holding the raw 32-byte key")
        sp.set_defaults(func=func)
        if name == "sign":
            sp.add_argument("--nonce", help="24-byte nonce as hex, to reproduce a token exactly")
            sp.add_argument("--raw", action="store_true", help="Write raw token bytes instead of Base64url")
            sp.add_argument("message", nargs=argparse.REMAINDER)
        else:
            sp.add_argument("--raw", action="store_true", help="Read raw token bytes from stdin, write raw message bytes")
            sp.add_argument("token", nargs="?")

    return p.parse_args(argv)


# -------------------------
# Main entrypoint
# -------------------------

def main(argv: Optional[List[str]] = None) -> None:
    """Dispatch to the chosen command; keep top-level code very small."""
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
        # basicConfig leaves the level alone if root already has handlers
        logging.getLogger().setLevel(logging.DEBUG)
    log.debug("running %s", args.command)
    args.func(args)


if __name__ == "__main__":
    main()
