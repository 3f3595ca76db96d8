"""Local file-based storage for minted achievements."""

import json
import logging
from pathlib import Path

from trophy_mint.models import MintEvent, MintRecord

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".trophy_mint"


class MintLedger:
    """File-based ledger of AchievementMinted events.

    Recording is idempotent on (transaction hash, log index), so the
    reconciliation worker can replay a block window safely.
    """

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.ledger_path = self.data_dir / "mints.json"

    def load(self) -> list[MintRecord]:
        """Load all records from disk."""
        if not self.ledger_path.exists():
            return []
        with open(self.ledger_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [MintRecord.model_validate(item) for item in data]

    def _save(self, records: list[MintRecord]) -> None:
        tmp_path = self.ledger_path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump([r.model_dump(mode="json") for r in records], f, indent=2)
        tmp_path.replace(self.ledger_path)

    def record(self, event: MintEvent) -> bool:
        """Store an event. Returns False if it was already recorded."""
        records = self.load()
        if any(r.dedupe_key == event.dedupe_key for r in records):
            logger.debug("Mint event %s already recorded", event.dedupe_key)
            return False
        records.append(MintRecord(**event.model_dump()))
        self._save(records)
        return True

    def find_by_token_id(self, token_id: int) -> MintRecord | None:
        """Return the first recorded mint of a token id."""
        return next((r for r in self.load() if r.token_id == token_id), None)

    def list_by_owner(self, owner: str) -> list[MintRecord]:
        """Mints owned by an address, newest block first."""
        owner = owner.lower()
        records = [r for r in self.load() if r.owner.lower() == owner]
        records.sort(key=lambda r: (r.block_number, r.log_index), reverse=True)
        return records

    def clear(self) -> None:
        """Delete all records."""
        if self.ledger_path.exists():
            self.ledger_path.unlink()
