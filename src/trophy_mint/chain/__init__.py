"""On-chain achievement tokens."""

from trophy_mint.chain.mint import MintPipeline, MintRejected, Web3MintWriter
from trophy_mint.chain.reader import MintEventDecoder, Web3ChainReader, connect
from trophy_mint.chain.token_id import derive_token_id
from trophy_mint.chain.worker import ReconciliationWorker

__all__ = [
    "MintEventDecoder",
    "MintPipeline",
    "MintRejected",
    "ReconciliationWorker",
    "Web3ChainReader",
    "Web3MintWriter",
    "connect",
    "derive_token_id",
]
