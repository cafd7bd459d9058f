"""VaultWriter — writes converted notes into a Markdown vault on disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel

from granola_md.config.models import ImportConfig
from granola_md.errors import VaultPathError
from granola_md.models import ConvertedNote

logger = logging.getLogger(__name__)

WriteStatus = Literal["created", "updated", "unchanged", "skipped"]


class WriteResult(BaseModel):
    path: Path
    status: WriteStatus
    dry_run: bool = False


class VaultWriter:
    """Writes ConvertedNote payloads under ``vault_path / folder``.

    Existing files are overwritten when their content differs (``update``
    strategy) or left alone (``skip``). Dry-run reports what would happen
    without touching the disk.
    """

    def __init__(self, config: ImportConfig, vault_path: str | Path | None = None) -> None:
        self.config = config
        self.vault_path = Path(vault_path if vault_path is not None else config.vault_path)
        self.target_dir = self.vault_path / config.folder if config.folder else self.vault_path

    def resolve(self, filename: str) -> Path:
        """Return the destination path, refusing anything outside the vault."""
        dest = self.target_dir / filename
        if not dest.resolve().is_relative_to(self.vault_path.resolve()):
            raise VaultPathError(f"Path traversal detected: {filename}")
        return dest

    def write(self, note: ConvertedNote, *, dry_run: bool = False) -> WriteResult:
        dest = self.resolve(note.filename)

        if dest.exists():
            if self.config.strategy == "skip":
                logger.debug("exists, skipping %s", dest)
                return WriteResult(path=dest, status="skipped", dry_run=dry_run)
            if dest.read_text(encoding="utf-8") == note.content:
                return WriteResult(path=dest, status="unchanged", dry_run=dry_run)
            status: WriteStatus = "updated"
        else:
            status = "created"

        if dry_run:
            logger.debug("dry-run: would write %s (%s)", dest, status)
            return WriteResult(path=dest, status=status, dry_run=True)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(note.content, encoding="utf-8")
        logger.info("%s %s (%d bytes)", status, dest, len(note.content))
        return WriteResult(path=dest, status=status)
