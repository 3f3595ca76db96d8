"""Tests for the staged mint pipeline."""

from trophy_mint.chain import MintPipeline, derive_token_id
from trophy_mint.models import MintEvent, MintReceipt, MintStage

OWNER = "0x00000000000000000000000000000000000000aa"
TX_HASH = "0x" + "ab" * 32


class FakeWriter:
    def __init__(self, submit_error=None, reverted=False, confirm_error=None):
        self.submit_error = submit_error
        self.confirm_error = confirm_error
        self.reverted = reverted
        self.submitted = []

    async def submit(self, owner, token_id, app_id, achievement_id):
        if self.submit_error:
            raise self.submit_error
        self.submitted.append((owner, token_id, app_id, achievement_id))
        return TX_HASH

    async def confirm(self, transaction_hash):
        if self.confirm_error:
            raise self.confirm_error
        owner, token_id, app_id, achievement_id = self.submitted[-1]
        return MintReceipt(
            transaction_hash=transaction_hash,
            block_number=1234,
            succeeded=not self.reverted,
            events=[]
            if self.reverted
            else [
                MintEvent(
                    owner=owner,
                    token_id=token_id,
                    app_id=app_id,
                    achievement_id=achievement_id,
                    block_number=1234,
                    transaction_hash=transaction_hash,
                    log_index=3,
                )
            ],
        )


async def test_successful_mint_is_recorded(ledger):
    writer = FakeWriter()

    result = await MintPipeline(writer, ledger).mint(OWNER, 440, "TF_PLAY_GAME")

    token_id = derive_token_id(440, "TF_PLAY_GAME")
    assert result.ok
    assert result.token_id == token_id
    assert result.transaction_hash == TX_HASH
    assert result.block_number == 1234
    assert writer.submitted == [(OWNER, token_id, 440, "TF_PLAY_GAME")]
    assert ledger.find_by_token_id(token_id).log_index == 3


async def test_invalid_app_id_fails_at_derive(ledger):
    writer = FakeWriter()

    result = await MintPipeline(writer, ledger).mint(OWNER, -1, "TF_PLAY_GAME")

    assert result.failed_stage == MintStage.DERIVE
    assert writer.submitted == []


async def test_rejected_submission_fails_at_submit(ledger):
    writer = FakeWriter(submit_error=ValueError("execution reverted: already minted"))

    result = await MintPipeline(writer, ledger).mint(OWNER, 440, "TF_PLAY_GAME")

    assert not result.ok
    assert result.failed_stage == MintStage.SUBMIT
    assert "already minted" in result.error
    assert result.token_id == derive_token_id(440, "TF_PLAY_GAME")
    assert ledger.load() == []


async def test_reverted_transaction_fails_at_confirm(ledger):
    result = await MintPipeline(FakeWriter(reverted=True), ledger).mint(OWNER, 440, "TF_PLAY_GAME")

    assert result.failed_stage == MintStage.CONFIRM
    assert result.transaction_hash == TX_HASH
    assert ledger.load() == []


async def test_receipt_timeout_fails_at_confirm(ledger):
    writer = FakeWriter(confirm_error=TimeoutError("receipt not found"))

    result = await MintPipeline(writer, ledger).mint(OWNER, 440, "TF_PLAY_GAME")

    assert result.failed_stage == MintStage.CONFIRM


async def test_ledger_failure_fails_at_record(tmp_path):
    class BrokenLedger:
        def record(self, event):
            raise OSError("read-only file system")

    result = await MintPipeline(FakeWriter(), BrokenLedger()).mint(OWNER, 440, "TF_PLAY_GAME")

    assert result.failed_stage == MintStage.RECORD
    assert result.block_number == 1234
