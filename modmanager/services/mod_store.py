import logging
import os
import shutil
from datetime import datetime, timezone
from typing import BinaryIO, Iterable, Optional, Protocol

from ..models import ModEntry
from . import path_confiner
from .errors import (
    AlreadyExists,
    InvalidPath,
    NotAModFile,
    NotFound,
    ServiceError,
    UnsupportedFileType,
)

logger = logging.getLogger(__name__)

MOD_EXTENSION = ".jar"
DISABLED_SUFFIX = ".disabled"
DISABLED_EXTENSION = MOD_EXTENSION + DISABLED_SUFFIX
MAX_UPLOAD_FILES = 20


class IncomingFile(Protocol):
    filename: Optional[str]
    file: BinaryIO


def is_mod_name(name: str) -> bool:
    return name.endswith(MOD_EXTENSION) or name.endswith(DISABLED_EXTENSION)


def is_enabled_name(name: str) -> bool:
    return name.endswith(MOD_EXTENSION)


def toggled_name(name: str) -> str:
    if name.endswith(DISABLED_EXTENSION):
        return name[: -len(DISABLED_SUFFIX)]
    if name.endswith(MOD_EXTENSION):
        return name + DISABLED_SUFFIX
    raise NotAModFile("Not a mod file")


class ModStore:
    """Plugin archives in a single directory.

    A mod is enabled when its file ends in ``.jar`` and disabled when it ends
    in ``.jar.disabled``; there is no other record of the state.
    """

    def __init__(self, mods_dir: str) -> None:
        self.root = os.path.abspath(mods_dir)

    def ensure_root(self) -> None:
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as exc:
            raise ServiceError(f"Failed to create mods directory: {exc}") from exc

    def list_mods(self) -> list[ModEntry]:
        if not os.path.isdir(self.root):
            return []
        mods: list[ModEntry] = []
        for name in sorted(os.listdir(self.root)):
            if not is_mod_name(name):
                continue
            full_path = os.path.join(self.root, name)
            if not os.path.isfile(full_path):
                continue
            try:
                stat = os.stat(full_path)
            except OSError:
                continue
            mods.append(
                ModEntry(
                    name=name,
                    size=int(stat.st_size),
                    enabled=is_enabled_name(name),
                    modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return mods

    def upload(self, files: Iterable[IncomingFile]) -> tuple[list[str], list[str]]:
        """Write the ``.jar`` uploads into the mods directory.

        Returns the accepted and the rejected file names. Accepted names are
        stored with a lowercase ``.jar`` extension so listing and toggling see
        them. A batch where nothing is accepted raises UnsupportedFileType, and
        an invalid name anywhere in the batch fails it before anything is written.
        """
        files = list(files)
        if not files:
            raise ServiceError("No files uploaded", 400)
        if len(files) > MAX_UPLOAD_FILES:
            raise ServiceError(f"Too many files (max {MAX_UPLOAD_FILES})", 400)

        pending: list[tuple[str, str, IncomingFile]] = []
        rejected: list[str] = []
        for upload in files:
            name = self._upload_name(upload.filename)
            stem, ext = os.path.splitext(name)
            if ext.lower() != MOD_EXTENSION:
                rejected.append(name)
                continue
            name = stem + MOD_EXTENSION
            pending.append((name, self._mod_path(name), upload))

        if not pending:
            raise UnsupportedFileType(f"Only {MOD_EXTENSION} files are allowed: {', '.join(rejected)}")

        for name, target, _ in pending:
            if os.path.isdir(target):
                raise ServiceError(f"{name} is a directory", 400)

        self.ensure_root()
        accepted: list[str] = []
        for name, target, upload in pending:
            try:
                with open(target, "wb") as handle:
                    shutil.copyfileobj(upload.file, handle)
            except OSError as exc:
                raise ServiceError(f"Failed to save mod file: {exc}") from exc
            accepted.append(name)
            logger.info("Uploaded mod %s", name)
        return accepted, rejected

    def delete(self, name: str) -> None:
        target = self._mod_path(name)
        if not os.path.isfile(target):
            raise NotFound("Not found")
        try:
            os.remove(target)
        except FileNotFoundError as exc:
            raise NotFound("Not found") from exc
        except OSError as exc:
            raise ServiceError(f"Failed to remove mod: {exc}") from exc
        logger.info("Deleted mod %s", name)

    def toggle(self, name: str) -> str:
        """Flip a mod between enabled and disabled, returning its new name."""
        source = self._mod_path(name)
        if not os.path.isfile(source):
            raise NotFound("Not found")
        new_name = toggled_name(name)
        target = self._mod_path(new_name)
        if os.path.exists(target):
            raise AlreadyExists(f"{new_name} already exists")
        try:
            os.rename(source, target)
        except FileNotFoundError as exc:
            raise NotFound("Not found") from exc
        except OSError as exc:
            raise ServiceError(f"Failed to rename mod: {exc}") from exc
        logger.info("Renamed mod %s to %s", name, new_name)
        return new_name

    def _mod_path(self, name: str) -> str:
        if not name or "/" in name or "\\" in name:
            raise InvalidPath("Invalid mod filename")
        target = path_confiner.resolve(self.root, name)
        if target == self.root:
            raise InvalidPath("Invalid mod filename")
        return target

    def _upload_name(self, filename: Optional[str]) -> str:
        name = os.path.basename((filename or "").replace("\\", "/"))
        if name in {"", ".", ".."}:
            raise InvalidPath("Invalid file name")
        return name
