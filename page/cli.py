"""
page — command line front end

  page init                  generate the keypair and the store directory
  page ls                    list entries
  page open [-p] <entry>     copy an entry to the clipboard (or print it)
  page edit [-e ed] <entry>  create or edit an entry in $EDITOR
  page gen [-l n] <entry>    create an entry holding a random secret
  page save <entry>          create an entry from a secret typed at a prompt
  page rm [-f] <entry>       remove an entry

Each command resolves the configuration, loads only the keys it needs,
and performs one store operation.
"""

import argparse
import base64
import secrets
import sys

from page import clipboard
from page.config import Config
from page.editor import edit_bytes
from page.errors import ClipboardError, EntryExists, EntryNotFound, KeyFileError, KeyFileExists, KeyMaterialError, PageError
from page.keys import generate_identity, load_identity, load_recipient, write_keypair
from page.log import get_logger
from page.store import Store
from page.term import ask, read_secret

INIT_HINT = "did you forget to run `page init'?"
DEFAULT_GEN_LENGTH = 12

logger = get_logger()


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return n


def strip_comments(content: bytes) -> bytes:
    """Drop '#' comment lines and blank lines from an entry's plaintext."""
    kept = [
        line for line in content.split(b"\n")
        if line and not line.startswith(b"#")
    ]
    return b"".join(line + b"\n" for line in kept)


def cmd_init(args: argparse.Namespace, config: Config) -> int:
    Store.from_config(config).init()
    recipient = write_keypair(generate_identity(), config.identity_path, config.recipient_path)
    print(f"Public key: {recipient.encode()}", file=sys.stderr)
    return 0


def cmd_ls(args: argparse.Namespace, config: Config) -> int:
    store = Store.from_config(config)
    for entry in sorted(store.list()):
        print(entry)
    return 0


def cmd_open(args: argparse.Namespace, config: Config) -> int:
    store = Store.from_config(config, identity=load_identity(config.identity_path))
    content = strip_comments(store.read(args.entry))

    if args.print:
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
        return 0

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ClipboardError(f"entry {args.entry} is not UTF-8 text; use `page open -p'") from exc
    clipboard.copy(text)
    return 0


def cmd_edit(args: argparse.Namespace, config: Config) -> int:
    store = Store.from_config(
        config,
        identity=load_identity(config.identity_path),
        recipient=load_recipient(config.recipient_path),
    )

    existed = store.exists(args.entry)
    initial = store.read(args.entry) if existed else b""

    edited = edit_bytes(args.editor or config.editor, initial)
    if edited == initial:
        logger.info("%s unchanged", args.entry)
        return 0

    store.write(args.entry, edited)
    return 0


def generate_secret(length: int) -> bytes:
    """Random printable secret of exactly length characters."""
    return base64.b64encode(secrets.token_bytes(length))[:length]


def cmd_gen(args: argparse.Namespace, config: Config) -> int:
    store = Store.from_config(config, recipient=load_recipient(config.recipient_path))
    store.create(args.entry, generate_secret(args.length))
    return 0


def cmd_save(args: argparse.Namespace, config: Config) -> int:
    store = Store.from_config(config, recipient=load_recipient(config.recipient_path))
    if store.exists(args.entry):
        raise EntryExists(args.entry)

    secret = read_secret(f"secret for {args.entry}: ")
    if secret != read_secret("again: "):
        logger.error("secrets do not match")
        return 1

    store.create(args.entry, secret.encode("utf-8") + b"\n")
    return 0


def cmd_rm(args: argparse.Namespace, config: Config) -> int:
    # Removing needs no keys
    store = Store.from_config(config)
    if not store.exists(args.entry):
        raise EntryNotFound(args.entry)

    if not args.force and not ask(f"remove entry {args.entry}?"):
        logger.info("aborted.")
        return 0

    store.remove(args.entry)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="page", description="age-encrypted secret store")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd")

    p_help = sub.add_parser("help", help="show this help message")
    p_help.set_defaults(func=None)

    p_init = sub.add_parser("init", help="generate age keypair")
    p_init.set_defaults(func=cmd_init)

    p_ls = sub.add_parser("ls", help="list password entries")
    p_ls.set_defaults(func=cmd_ls)

    p_open = sub.add_parser("open", help="copy secret content to clipboard")
    p_open.add_argument("-p", dest="print", action="store_true",
                        help="print the secret instead of adding it to the clipboard")
    p_open.add_argument("entry", help="name of the secret")
    p_open.set_defaults(func=cmd_open)

    p_edit = sub.add_parser("edit", help="create/edit a secret")
    p_edit.add_argument("-e", dest="editor", help="editor to use instead of $EDITOR")
    p_edit.add_argument("entry", help="name of the secret")
    p_edit.set_defaults(func=cmd_edit)

    p_gen = sub.add_parser("gen", help="randomly generate a secret")
    p_gen.add_argument("-l", dest="length", type=_positive_int, default=DEFAULT_GEN_LENGTH,
                       help="length of the generated secret")
    p_gen.add_argument("entry", help="name of the secret")
    p_gen.set_defaults(func=cmd_gen)

    p_save = sub.add_parser("save", help="save/add a new password entry")
    p_save.add_argument("entry", help="name of the secret")
    p_save.set_defaults(func=cmd_save)

    p_rm = sub.add_parser("rm", help="delete a secret")
    p_rm.add_argument("-f", dest="force", action="store_true",
                      help="force deletion (do not prompt)")
    p_rm.add_argument("entry", help="name of the secret")
    p_rm.set_defaults(func=cmd_rm)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd is None:
        parser.print_help(sys.stderr)
        return 1
    if args.func is None:
        parser.print_help(sys.stderr)
        return 0

    get_logger(verbose=args.verbose)

    try:
        config = Config.from_env()
        return args.func(args, config)
    except (KeyFileExists, KeyFileError) as exc:
        logger.error("%s", exc)
    except KeyMaterialError as exc:
        logger.error("%s\n%s", exc, INIT_HINT)
    except PageError as exc:
        logger.error("%s", exc)
    except KeyboardInterrupt:
        return 130
    return 1


if __name__ == "__main__":
    sys.exit(main())
