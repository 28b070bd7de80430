"""
Configuration
Where the store and the keys live, resolved once per invocation and
passed explicitly to whatever needs it.

  store       $XDG_DATA_HOME/page/secrets   (~/.local/share/page/secrets)
  privkey     $XDG_CONFIG_HOME/page/privkey (~/.config/page/privkey)
  recipients  $XDG_CONFIG_HOME/page/recipients

PAGE_STORE_DIR, PAGE_IDENTITY_FILE and PAGE_RECIPIENT_FILE override the
individual paths. EDITOR selects the editor (default: vi).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from page.errors import ConfigError


APP_NAME = "page"
DEFAULT_EDITOR = "vi"


def _user_dir(environ: Mapping[str, str], xdg_var: str, home_suffix: str) -> Path:
    path = environ.get(xdg_var)
    if path:
        return Path(path)
    home = environ.get("HOME")
    if not home:
        raise ConfigError(f"neither ${xdg_var} nor $HOME are defined")
    return Path(home) / home_suffix


@dataclass
class Config:
    store_path: Path
    identity_path: Path
    recipient_path: Path
    editor: str = DEFAULT_EDITOR

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "Config":
        """Resolve paths from XDG/HOME and the PAGE_* overrides."""
        if environ is None:
            environ = os.environ

        if environ.get("PAGE_STORE_DIR"):
            store_path = Path(environ["PAGE_STORE_DIR"])
        else:
            store_path = _user_dir(environ, "XDG_DATA_HOME", ".local/share") / APP_NAME / "secrets"

        config_dir = None
        if not (environ.get("PAGE_IDENTITY_FILE") and environ.get("PAGE_RECIPIENT_FILE")):
            config_dir = _user_dir(environ, "XDG_CONFIG_HOME", ".config") / APP_NAME

        identity_path = Path(environ.get("PAGE_IDENTITY_FILE") or config_dir / "privkey")
        recipient_path = Path(environ.get("PAGE_RECIPIENT_FILE") or config_dir / "recipients")

        return cls(
            store_path=store_path,
            identity_path=identity_path,
            recipient_path=recipient_path,
            editor=environ.get("EDITOR") or DEFAULT_EDITOR,
        )
