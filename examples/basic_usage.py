"""
page — Basic Usage Example

Demonstrates the entry store on its own: generate a keypair, write a
few secrets, read them back, and see what happens with the wrong key.
Everything lives in a temporary directory and is removed at the end.
"""

import sys
import tempfile
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from page import (
    EntryNotFound,
    NoIdentityMatchError,
    Store,
    generate_identity,
    load_identity,
    load_recipient,
    write_keypair,
)


def main():
    print("=" * 50)
    print("  page — age-encrypted secret store")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        tmp = Path(tmp)

        # One keypair protects every entry
        write_keypair(generate_identity(), tmp / "privkey", tmp / "recipients")
        identity = load_identity(tmp / "privkey")
        recipient = load_recipient(tmp / "recipients")
        print(f"\nRecipient: {recipient}")

        store = Store(tmp / "secrets", identity=identity, recipient=recipient)
        store.init()

        secrets = {
            "example.com": b"user\npass123\n",
            "mail": b"me@example.com\ncorrect horse battery staple\n",
            "wifi": b"# home network\nhunter2\n",
        }
        for entry, content in secrets.items():
            store.write(entry, content)

        print(f"\nStored {len(secrets)} entries: {sorted(store.list())}")

        on_disk = (tmp / "secrets" / "example.com").read_text()
        print("\nexample.com on disk:")
        print(on_disk)

        for entry, content in secrets.items():
            status = "PASS" if store.read(entry) == content else "FAIL"
            print(f"  {entry}: {status}")

        # A store bound to another identity cannot read these entries
        stranger = Store(tmp / "secrets", identity=generate_identity())
        try:
            stranger.read("mail")
        except NoIdentityMatchError as e:
            print(f"\nWrong key: {e}")

        store.remove("example.com")
        try:
            store.read("example.com")
        except EntryNotFound as e:
            print(f"After remove: {e}")


if __name__ == "__main__":
    main()
