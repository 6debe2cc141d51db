"""Configuration management for locale lookup and usage analysis."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv, set_key

load_dotenv()

ENV_PREFIX = "CODELENS_I18N_"

DEFAULT_EXCLUDE_PATTERNS = [
    "**/node_modules/**",
    "**/.git/**",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
    "**/.next/**",
    "**/.nuxt/**",
    "**/out/**",
    "**/public/**",
    "**/assets/**",
    "**/.vscode/**",
    "**/.idea/**",
    "**/tmp/**",
    "**/temp/**",
    "**/*.min.js",
    "**/*.min.css",
    "**/vendor/**",
    "**/lib/**",
    "**/libs/**",
]


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(ENV_PREFIX + name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_path(name: str) -> Path:
    """Path from the environment, or the current directory when unset."""
    raw = os.getenv(ENV_PREFIX + name)
    return Path(raw) if raw else Path.cwd()


@dataclass
class Config:
    """Application configuration."""

    # Project the i18n folders are relative to
    project_root: Path = field(default_factory=lambda: _env_path("PROJECT_ROOT"))

    # Locale folders, relative to project_root
    i18n_folders: List[str] = field(default_factory=lambda: _env_list("FOLDERS", "i18n"))

    # Source scanning settings
    include_extensions: List[str] = field(
        default_factory=lambda: _env_list("INCLUDE_EXTENSIONS", "ts,js,tsx,jsx")
    )
    exclude_patterns: List[str] = field(
        default_factory=lambda: _env_list("EXCLUDE_PATTERNS", ",".join(DEFAULT_EXCLUDE_PATTERNS))
    )

    # Preferred display locales, highest priority first
    display_languages: List[str] = field(
        default_factory=lambda: _env_list("DISPLAY_LANGUAGE", "ja")
    )

    enable_codelens: bool = field(default_factory=lambda: _env_flag("ENABLE_CODELENS", True))

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not Path(self.project_root).is_dir():
            errors.append(f"Project root does not exist: {self.project_root}")
        if not self.i18n_folders:
            errors.append(f"{ENV_PREFIX}FOLDERS is empty")
        return errors

    def folder_paths(self) -> List[Path]:
        """Absolute paths of the configured i18n folders."""
        root = Path(self.project_root)
        return [root / folder for folder in self.i18n_folders]


@dataclass
class FolderUpdate:
    """Outcome of adding a folder to the i18n folder list."""

    folders: List[str]
    status: str  # added, already_present, is_subfolder, replaced_children
    parent: Optional[str] = None
    removed: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.status in ("added", "replaced_children")


def normalize_folder(folder: str) -> str:
    """Use forward slashes and drop any trailing slash."""
    return folder.replace("\\", "/").rstrip("/")


def add_i18n_folder(folders: List[str], folder: str) -> FolderUpdate:
    """
    Add a folder to the i18n folder list.

    A folder nested inside an existing entry is not added. Existing entries
    nested inside the new folder are replaced by it.

    Args:
        folders: Current folder list
        folder: Folder to add, relative to the project root

    Returns:
        FolderUpdate with the resulting list
    """
    new = normalize_folder(folder)

    if new in folders or new in (normalize_folder(f) for f in folders):
        return FolderUpdate(folders=list(folders), status="already_present")

    for existing in folders:
        if new.startswith(normalize_folder(existing) + "/"):
            return FolderUpdate(folders=list(folders), status="is_subfolder", parent=existing)

    children = [f for f in folders if normalize_folder(f).startswith(new + "/")]
    remaining = [f for f in folders if f not in children]
    remaining.append(new)

    if children:
        return FolderUpdate(folders=remaining, status="replaced_children", removed=children)
    return FolderUpdate(folders=remaining, status="added")


def remove_i18n_folder(folders: List[str], folder: str) -> List[str]:
    """Remove a folder from the i18n folder list."""
    target = normalize_folder(folder)
    return [f for f in folders if normalize_folder(f) != target]


def save_folders(folders: List[str], env_path: Path) -> None:
    """Persist the folder list to a .env file."""
    env_path = Path(env_path)
    env_path.touch(exist_ok=True)
    set_key(str(env_path), ENV_PREFIX + "FOLDERS", ",".join(folders))
    os.environ[ENV_PREFIX + "FOLDERS"] = ",".join(folders)


# Global config instance
config = Config()
