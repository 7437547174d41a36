import logging
import os
import shutil
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..models import FileEntry
from . import path_confiner
from .errors import (
    AlreadyExists,
    InvalidPath,
    NotADirectory,
    NotAFile,
    NotFound,
    NotText,
    ServiceError,
    TooLarge,
)
from .mod_store import MAX_UPLOAD_FILES, IncomingFile

logger = logging.getLogger(__name__)

READ_MAX_BYTES = 512 * 1024


class FileManager:
    """General purpose file operations confined to one directory tree.

    Every public method takes paths relative to the root. Each path is checked
    on every call; nothing about the tree is cached between calls.
    """

    def __init__(self, files_dir: str) -> None:
        self.root = os.path.abspath(files_dir)

    def ensure_root(self) -> None:
        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as exc:
            raise ServiceError(f"Failed to create files directory: {exc}") from exc

    def list_directory(self, path: Optional[str]) -> list[FileEntry]:
        target = self._resolve(path or "")
        if not os.path.exists(target):
            raise NotFound("Directory not found")
        if not os.path.isdir(target):
            raise NotADirectory("Not a directory")

        entries: list[FileEntry] = []
        try:
            names = os.listdir(target)
        except OSError as exc:
            raise ServiceError(f"Failed to list directory: {exc}") from exc
        for name in names:
            try:
                stat = os.stat(os.path.join(target, name))
            except OSError:
                continue
            is_directory = os.path.isdir(os.path.join(target, name))
            entries.append(
                FileEntry(
                    name=name,
                    is_directory=is_directory,
                    size=int(stat.st_size),
                    modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        # directories first, then by name
        entries.sort(key=lambda entry: (not entry.is_directory, entry.name))
        return entries

    def read_file(self, path: Optional[str]) -> tuple[str, str]:
        """Return ``(name, content)`` for a small UTF-8 text file."""
        target = self._resolve(path)
        if not os.path.isfile(target):
            raise NotAFile("Not a file")

        try:
            size = os.path.getsize(target)
        except OSError as exc:
            raise ServiceError(f"Failed to read file: {exc}") from exc
        if size >= READ_MAX_BYTES:
            raise TooLarge(f"File too large to open (max {READ_MAX_BYTES} bytes)")

        try:
            with open(target, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise ServiceError(f"Failed to read file: {exc}") from exc

        if b"\x00" in data:
            raise NotText("File appears to be binary")
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NotText("File appears to be binary") from exc
        return os.path.basename(target), content

    def write_file(self, path: Optional[str], content: Optional[str]) -> None:
        target = self._resolve(path)
        if os.path.isdir(target):
            raise NotAFile("Cannot write to a directory")
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as handle:
                handle.write(content or "")
        except OSError as exc:
            raise ServiceError(f"Failed to save file: {exc}") from exc
        logger.info("Wrote %s", self._relative(target))

    def create_file(self, path: Optional[str]) -> None:
        target = self._resolve(path)
        if os.path.lexists(target):
            raise AlreadyExists("Already exists")
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            # "x" makes the losing side of a create race see AlreadyExists
            with open(target, "x", encoding="utf-8"):
                pass
        except FileExistsError as exc:
            raise AlreadyExists("Already exists") from exc
        except OSError as exc:
            raise ServiceError(f"Failed to create file: {exc}") from exc
        logger.info("Created file %s", self._relative(target))

    def create_directory(self, path: Optional[str]) -> None:
        target = self._resolve(path)
        if os.path.lexists(target):
            raise AlreadyExists("Already exists")
        try:
            os.makedirs(target)
        except FileExistsError as exc:
            raise AlreadyExists("Already exists") from exc
        except OSError as exc:
            raise ServiceError(f"Failed to create directory: {exc}") from exc
        logger.info("Created directory %s", self._relative(target))

    def rename(self, old_path: Optional[str], new_path: Optional[str]) -> None:
        source = self._resolve(old_path)
        target = self._resolve(new_path)
        if source == self.root or target == self.root:
            raise InvalidPath("Invalid path")
        if not os.path.lexists(source):
            raise NotFound("Not found")
        if os.path.lexists(target):
            raise AlreadyExists("Target already exists")
        if os.path.isdir(source) and path_confiner.is_within(source, target):
            raise InvalidPath("Cannot move a directory into itself")
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            os.rename(source, target)
        except FileNotFoundError as exc:
            raise NotFound("Not found") from exc
        except OSError as exc:
            raise ServiceError(f"Failed to rename: {exc}") from exc
        logger.info("Renamed %s to %s", self._relative(source), self._relative(target))

    def delete(self, path: Optional[str]) -> None:
        target = self._resolve(path)
        if target == self.root:
            raise InvalidPath("Cannot delete the root directory")
        if not os.path.lexists(target):
            raise NotFound("Not found")
        try:
            if os.path.isdir(target) and not os.path.islink(target):
                shutil.rmtree(target)
            else:
                os.remove(target)
        except FileNotFoundError as exc:
            raise NotFound("Not found") from exc
        except OSError as exc:
            raise ServiceError(f"Failed to delete: {exc}") from exc
        logger.info("Deleted %s", self._relative(target))

    def upload(self, path: Optional[str], files: Iterable[IncomingFile]) -> list[str]:
        files = list(files)
        if not files:
            raise ServiceError("No files uploaded", 400)
        if len(files) > MAX_UPLOAD_FILES:
            raise ServiceError(f"Too many files (max {MAX_UPLOAD_FILES})", 400)

        target_dir = self._resolve(path or "")
        if os.path.exists(target_dir) and not os.path.isdir(target_dir):
            raise NotADirectory("Upload target is not a directory")

        pending: list[tuple[str, str, IncomingFile]] = []
        for upload in files:
            name = os.path.basename((upload.filename or "").replace("\\", "/"))
            if name in {"", ".", ".."}:
                raise InvalidPath("Invalid file name")
            dest = self._check_real(path_confiner.resolve(target_dir, name))
            if os.path.isdir(dest):
                raise NotAFile(f"{name} is a directory")
            pending.append((name, dest, upload))

        try:
            os.makedirs(target_dir, exist_ok=True)
        except OSError as exc:
            raise ServiceError(f"Failed to create directory: {exc}") from exc

        saved: list[str] = []
        for name, dest, upload in pending:
            try:
                with open(dest, "wb") as handle:
                    shutil.copyfileobj(upload.file, handle)
            except OSError as exc:
                raise ServiceError(f"Failed to save {name}: {exc}") from exc
            saved.append(name)
        logger.info("Uploaded %d file(s) to %s", len(saved), self._relative(target_dir) or "/")
        return saved

    def _resolve(self, path: Optional[str]) -> str:
        return self._check_real(path_confiner.resolve(self.root, path))

    def _check_real(self, target: str) -> str:
        # symlinks are never followed out of the tree
        root_real = os.path.realpath(self.root)
        parent_real = os.path.realpath(os.path.dirname(target)) if target != self.root else root_real
        if not path_confiner.is_within(root_real, parent_real):
            raise InvalidPath("Invalid path")
        if os.path.islink(target):
            link_real = os.path.realpath(target)
            if not path_confiner.is_within(root_real, link_real):
                raise InvalidPath("Invalid path")
        return target

    def _relative(self, target: str) -> str:
        rel = os.path.relpath(target, self.root)
        return "" if rel == "." else rel.replace(os.sep, "/")
