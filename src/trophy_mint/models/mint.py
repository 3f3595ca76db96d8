"""Models for on-chain achievement mints."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MintEvent(BaseModel):
    """A decoded ``AchievementMinted`` log."""

    owner: str
    token_id: int
    app_id: int
    achievement_id: str
    block_number: int
    transaction_hash: str
    log_index: int

    @property
    def dedupe_key(self) -> str:
        return f"{self.transaction_hash.lower()}:{self.log_index}"


class MintRecord(MintEvent):
    """A mint event as stored in the local ledger."""

    recorded_at: datetime = Field(default_factory=datetime.now)


class MintStage(str, Enum):
    """Stages of the mint pipeline, in execution order."""

    DERIVE = "derive"
    SUBMIT = "submit"
    CONFIRM = "confirm"
    RECORD = "record"


class MintResult(BaseModel):
    """Outcome of a mint attempt. ``failed_stage`` is None on success."""

    owner: str
    app_id: int
    achievement_id: str
    token_id: int | None = None
    transaction_hash: str | None = None
    block_number: int | None = None
    failed_stage: MintStage | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.failed_stage is None


class MintReceipt(BaseModel):
    """Confirmation of a submitted mint transaction."""

    transaction_hash: str
    block_number: int
    succeeded: bool
    events: list[MintEvent] = Field(default_factory=list)
