import json
import os
from pathlib import Path
from typing import Any, Optional

from core.file_io import FilesystemFileReader, FilesystemFileWriter

TOKEN_ENV_VAR = "GITHUB_TOKEN"
TOKEN_FILE = Path("config") / "github_token.txt"
CONFIG_DIR = Path.home() / ".holidaysync"
CONFIG_FILE = CONFIG_DIR / "settings.json"


def get_config_file() -> dict[str, Any]:
    if not CONFIG_FILE.exists():
        return {}
    file_content = FilesystemFileReader().read_file(CONFIG_FILE)
    return json.loads(file_content)


def save_config(token: str) -> None:
    CONFIG_DIR.mkdir(exist_ok=True)
    config = get_config_file()
    config["github_token"] = token
    fw = FilesystemFileWriter.from_path(CONFIG_FILE)
    fw.write_json(config)


def load_token(token_file: Path = TOKEN_FILE) -> Optional[str]:
    """
    Find a GitHub token, or None to run unauthenticated.

    Lookup order: the GITHUB_TOKEN environment variable, a token file
    relative to the working directory, then the user settings file.
    """
    token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    if token:
        return token

    if token_file.is_file():
        token = FilesystemFileReader().read_file(token_file).strip()
        if token:
            return token

    return (get_config_file().get("github_token") or "").strip() or None
