"""NoteImporter — classifies, converts and writes Granola documents into a vault."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from granola_md.classify import is_empty_document
from granola_md.config.models import GranolaMdConfig
from granola_md.converter.note import NoteConverter
from granola_md.models import DocumentRecord, SyncError, SyncReport
from granola_md.output.writer import VaultWriter
from granola_md.source.client import GranolaClient

logger = logging.getLogger(__name__)


class NoteImporter:
    def __init__(
        self,
        config: GranolaMdConfig,
        writer: VaultWriter | None = None,
        converter: NoteConverter | None = None,
        *,
        dry_run: bool = False,
    ):
        """
        Args:
            config: Loaded configuration.
            writer: VaultWriter; built from ``config.import_`` when omitted.
            converter: NoteConverter; built from ``config`` when omitted.
            dry_run: Report what would be written without touching the vault.
        """
        self.config = config
        self.writer = writer or VaultWriter(config.import_)
        self.converter = converter or NoteConverter(config)
        self.dry_run = dry_run

    # -- Public API ----------------------------------------------------------

    def run(self, documents: Iterable[Any]) -> SyncReport:
        """Import every document, continuing past per-document failures."""
        start = time.monotonic()
        report = SyncReport()

        for doc in documents:
            self.import_one(doc, report)

        report.duration = time.monotonic() - start
        return report

    async def run_async(self, client: GranolaClient) -> SyncReport:
        """Stream documents from the API and import them as they arrive.

        A failure while fetching a page propagates; documents already written
        stay written.
        """
        start = time.monotonic()
        report = SyncReport()

        async for doc in client.iter_documents():
            self.import_one(doc, report)

        report.duration = time.monotonic() - start
        return report

    def import_one(self, doc: Any, report: SyncReport) -> None:
        record = DocumentRecord.from_raw(doc)
        label = record.id or "<no id>"
        try:
            if self.config.import_.skip_empty and is_empty_document(
                record, max_depth=self.config.content.max_depth
            ):
                logger.warning("Skipping empty document %s (%r)", label, record.title)
                report.empty += 1
                return

            note = self.converter.convert(record)
            result = self.writer.write(note, dry_run=self.dry_run)

            setattr(report, result.status, getattr(report, result.status) + 1)
            logger.info("%s: %s", result.status, result.path.name)
        except Exception as exc:
            report.errors.append(
                SyncError(document_id=record.id, title=record.title or "", error=str(exc))
            )
            logger.error("Error importing %s: %s", label, exc)
