"""Chain RPC access for AchievementMinted events."""

import logging

from aiohttp import ClientTimeout
from eth_abi.exceptions import DecodingError
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import MismatchedABI

from trophy_mint.chain.abi import ACHIEVEMENT_NFT_ABI, MINT_EVENT_SIGNATURE
from trophy_mint.errors import ChainQueryFailure
from trophy_mint.models import MintEvent

logger = logging.getLogger(__name__)

MINT_EVENT_TOPIC = Web3.to_hex(Web3.keccak(text=MINT_EVENT_SIGNATURE))


def connect(node_url: str, timeout: float = 30.0) -> AsyncWeb3:
    """Create an async web3 instance over HTTP with a bounded request timeout."""
    provider = AsyncHTTPProvider(
        node_url, request_kwargs={"timeout": ClientTimeout(total=timeout)}
    )
    return AsyncWeb3(provider)


def is_mint_log(log) -> bool:
    topics = log.get("topics") or []
    return bool(topics) and _hex(topics[0]).lower() == MINT_EVENT_TOPIC


class MintEventDecoder:
    """Decodes raw logs of the achievement contract into MintEvents."""

    def __init__(self, w3: AsyncWeb3, contract_address: str):
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(contract_address), abi=ACHIEVEMENT_NFT_ABI
        )

    @property
    def address(self) -> str:
        return self.contract.address

    def decode(self, log) -> MintEvent | None:
        """Decode one log. Returns None for logs that are not mint events."""
        # topics: [event signature, owner, tokenId]
        if not is_mint_log(log) or len(log["topics"]) < 3:
            logger.warning(
                "Log at block %s tx %s is not an AchievementMinted event, skipping",
                log.get("blockNumber"),
                _hex(log.get("transactionHash")),
            )
            return None

        try:
            decoded = self.contract.events.AchievementMinted().process_log(log)
        except (MismatchedABI, DecodingError, ValueError) as e:
            logger.error(
                "Error decoding log %s in block %s: %s",
                log.get("logIndex"),
                log.get("blockNumber"),
                e,
            )
            return None

        args = decoded["args"]
        return MintEvent(
            owner=args["owner"],
            token_id=args["tokenId"],
            app_id=args["appId"],
            achievement_id=args["achievementApiName"],
            block_number=decoded["blockNumber"],
            transaction_hash=_hex(decoded["transactionHash"]),
            log_index=decoded["logIndex"],
        )


class Web3ChainReader:
    """Reads chain height and mint events from an RPC node."""

    def __init__(self, w3: AsyncWeb3, contract_address: str):
        self.w3 = w3
        self.decoder = MintEventDecoder(w3, contract_address)

    async def block_number(self) -> int:
        try:
            return await self.w3.eth.block_number
        except Exception as e:
            raise ChainQueryFailure(f"Failed to query block number: {e}") from e

    async def mint_events(self, from_block: int, to_block: int) -> list[MintEvent]:
        """Fetch and decode mint events in an inclusive block range."""
        try:
            logs = await self.w3.eth.get_logs(
                {
                    "address": self.decoder.address,
                    "topics": [MINT_EVENT_TOPIC],
                    "fromBlock": from_block,
                    "toBlock": to_block,
                }
            )
        except Exception as e:
            raise ChainQueryFailure(
                f"Failed to fetch logs for blocks {from_block}-{to_block}: {e}"
            ) from e

        logger.debug("Processing %d raw logs", len(logs))
        events = []
        for log in logs:
            event = self.decoder.decode(log)
            if event is not None:
                events.append(event)
        return events


def _hex(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return Web3.to_hex(value)
