"""
Local JSON File Storage

DESIGN DECISION: The default backend is a single JSON file on disk,
the desktop counterpart of browser-local storage:
1. Zero setup
2. Human-readable and easy to back up
3. Records and settings live side by side

Writes go to a temporary file in the same directory which is then
renamed over the original, so a crash mid-write leaves the previous
file intact.

File layout:
    {"settings": {...} | null, "records": [{...}, ...]}
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from earnings_ledger.models.record import DailyRecord, EarningSettings
from earnings_ledger.services.storage.interface import (
    BackendError,
    CorruptDataError,
    LedgerStorageInterface,
)


class LocalFileLedgerStorage(LedgerStorageInterface):
    """Ledger storage in one JSON document."""

    def __init__(
        self,
        path: Path | str,
        default_settings: Optional[EarningSettings] = None,
    ):
        self._path = Path(path)
        self._default_settings = default_settings or EarningSettings()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        """Read the whole document. A missing file is an empty ledger."""
        if not self._path.exists():
            return {"settings": None, "records": []}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Ledger file is not valid JSON: {self._path}: {e}") from e
        except OSError as e:
            raise BackendError(f"Failed to read ledger file {self._path}: {e}") from e

        if not isinstance(document, dict):
            raise CorruptDataError(f"Unexpected ledger file layout: {self._path}")
        document.setdefault("settings", None)
        document.setdefault("records", [])
        return document

    def _dump(self, document: dict) -> None:
        """Atomically replace the file with `document`."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise BackendError(f"Failed to write ledger file {self._path}: {e}") from e

    async def read_all(self) -> list[DailyRecord]:
        document = self._load()
        try:
            return [DailyRecord.model_validate(item) for item in document["records"]]
        except ValidationError as e:
            raise CorruptDataError(f"Invalid record in {self._path}: {e}") from e

    async def write_all(self, records: list[DailyRecord]) -> None:
        document = self._load()
        document["records"] = [r.model_dump(mode="json") for r in records]
        self._dump(document)

    async def read_settings(self) -> EarningSettings:
        stored = self._load()["settings"]
        if not stored:
            return self._default_settings.model_copy()
        try:
            return EarningSettings.model_validate(stored)
        except ValidationError as e:
            raise CorruptDataError(f"Invalid settings in {self._path}: {e}") from e

    async def write_settings(self, settings: EarningSettings) -> None:
        document = self._load()
        document["settings"] = settings.model_dump(mode="json")
        self._dump(document)

    async def write_ledger(
        self,
        records: list[DailyRecord],
        settings: EarningSettings,
    ) -> None:
        self._dump({
            "settings": settings.model_dump(mode="json"),
            "records": [r.model_dump(mode="json") for r in records],
        })

    async def clear(self) -> None:
        self._dump({"settings": None, "records": []})
