"""Achievement mint pipeline.

A mint runs as four named stages: derive the token id, submit the
transaction, wait for its receipt, then record the emitted events in the
local ledger. The result says which stage failed, if any. A duplicate mint of
the same (owner, token id) is rejected by the contract and surfaces as a
SUBMIT or CONFIRM failure.
"""

import logging
from typing import Protocol

from web3 import AsyncWeb3, Web3

from trophy_mint.chain.reader import MintEventDecoder, is_mint_log
from trophy_mint.chain.token_id import derive_token_id
from trophy_mint.models import MintReceipt, MintResult, MintStage
from trophy_mint.storage import MintLedger

logger = logging.getLogger(__name__)


class MintRejected(Exception):
    """The chain accepted the transaction but it reverted."""


class MintWriter(Protocol):
    async def submit(self, owner: str, token_id: int, app_id: int, achievement_id: str) -> str: ...

    async def confirm(self, transaction_hash: str) -> MintReceipt: ...


class Web3MintWriter:
    """Sends ``mint`` from a node-managed account and decodes the receipt."""

    def __init__(
        self,
        w3: AsyncWeb3,
        contract_address: str,
        sender: str,
        receipt_timeout: float = 120.0,
    ):
        self.w3 = w3
        self.decoder = MintEventDecoder(w3, contract_address)
        self.sender = Web3.to_checksum_address(sender)
        self.receipt_timeout = receipt_timeout

    async def submit(self, owner: str, token_id: int, app_id: int, achievement_id: str) -> str:
        call = self.decoder.contract.functions.mint(
            Web3.to_checksum_address(owner), token_id, app_id, achievement_id, b""
        )
        tx_hash = await call.transact({"from": self.sender})
        return Web3.to_hex(tx_hash)

    async def confirm(self, transaction_hash: str) -> MintReceipt:
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            transaction_hash, timeout=self.receipt_timeout
        )
        events = []
        for log in receipt["logs"]:
            if not is_mint_log(log):
                continue
            event = self.decoder.decode(log)
            if event is not None:
                events.append(event)
        return MintReceipt(
            transaction_hash=transaction_hash,
            block_number=receipt["blockNumber"],
            succeeded=receipt["status"] == 1,
            events=events,
        )


class MintPipeline:
    """derive id -> submit transaction -> await confirmation -> record locally."""

    def __init__(self, writer: MintWriter, ledger: MintLedger):
        self.writer = writer
        self.ledger = ledger

    async def mint(self, owner: str, app_id: int, achievement_id: str) -> MintResult:
        result = MintResult(owner=owner, app_id=app_id, achievement_id=achievement_id)
        stage = MintStage.DERIVE
        try:
            result.token_id = derive_token_id(app_id, achievement_id)

            stage = MintStage.SUBMIT
            result.transaction_hash = await self.writer.submit(
                owner, result.token_id, app_id, achievement_id
            )
            logger.info("Submitted mint of %s/%s: %s", app_id, achievement_id, result.transaction_hash)

            stage = MintStage.CONFIRM
            receipt = await self.writer.confirm(result.transaction_hash)
            if not receipt.succeeded:
                raise MintRejected(f"Transaction {result.transaction_hash} reverted")
            result.block_number = receipt.block_number

            stage = MintStage.RECORD
            for event in receipt.events:
                self.ledger.record(event)
        except Exception as e:
            logger.error("Mint of %s/%s failed at %s: %s", app_id, achievement_id, stage.value, e)
            result.failed_stage = stage
            result.error = str(e)

        return result
