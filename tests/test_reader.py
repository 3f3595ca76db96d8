"""Tests for decoding AchievementMinted logs and chain query error handling."""

import pytest
from eth_abi import encode
from hexbytes import HexBytes

from trophy_mint.chain import MintEventDecoder, Web3ChainReader, connect
from trophy_mint.chain.reader import MINT_EVENT_TOPIC, is_mint_log
from trophy_mint.errors import ChainQueryFailure

CONTRACT = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
OWNER = "0x00000000000000000000000000000000000000Aa"
TRANSFER_TOPIC = "0xc3d58168c5ae7397731d063d5bbf3d657854427343f4c083240f7aacaa2d0f62"


def _word(value: int) -> HexBytes:
    return HexBytes(value.to_bytes(32, "big"))


def mint_log(token_id=12345, app_id=440, name="TF_PLAY_GAME", topics=None, log_index=2):
    return {
        "address": CONTRACT,
        "topics": topics
        if topics is not None
        else [HexBytes(MINT_EVENT_TOPIC), _word(int(OWNER, 16)), _word(token_id)],
        "data": HexBytes(encode(["uint32", "string"], [app_id, name])),
        "blockNumber": 777,
        "blockHash": HexBytes(b"\x01" * 32),
        "transactionHash": HexBytes(b"\x02" * 32),
        "transactionIndex": 0,
        "logIndex": log_index,
        "removed": False,
    }


@pytest.fixture()
def decoder():
    return MintEventDecoder(connect("http://localhost:8545"), CONTRACT)


def test_decode_mint_log(decoder):
    event = decoder.decode(mint_log())

    assert event.owner.lower() == OWNER.lower()
    assert event.token_id == 12345
    assert event.app_id == 440
    assert event.achievement_id == "TF_PLAY_GAME"
    assert event.block_number == 777
    assert event.transaction_hash == "0x" + "02" * 32
    assert event.log_index == 2


def test_non_mint_log_skipped(decoder):
    log = mint_log(topics=[HexBytes(TRANSFER_TOPIC), _word(1), _word(2)])

    assert not is_mint_log(log)
    assert decoder.decode(log) is None


def test_log_missing_indexed_topics_skipped(decoder):
    log = mint_log(topics=[HexBytes(MINT_EVENT_TOPIC)])

    assert decoder.decode(log) is None


def test_undecodable_data_skipped(decoder):
    log = mint_log()
    log["data"] = HexBytes(b"\x00")

    assert decoder.decode(log) is None


class FakeEth:
    def __init__(self, logs=None, error=None):
        self.logs = logs or []
        self.error = error
        self.filters = []

    @property
    def block_number(self):
        return self._block_number()

    async def _block_number(self):
        if self.error:
            raise self.error
        return 1000

    async def get_logs(self, filter_params):
        self.filters.append(filter_params)
        if self.error:
            raise self.error
        return self.logs


class FakeWeb3:
    def __init__(self, eth):
        self.eth = eth


@pytest.fixture()
def reader():
    return Web3ChainReader(connect("http://localhost:8545"), CONTRACT)


async def test_reader_filters_by_contract_and_topic(reader):
    eth = FakeEth(logs=[mint_log(), mint_log(topics=[HexBytes(MINT_EVENT_TOPIC)])])
    reader.w3 = FakeWeb3(eth)

    events = await reader.mint_events(901, 1000)

    assert [e.token_id for e in events] == [12345]
    assert eth.filters == [
        {"address": CONTRACT, "topics": [MINT_EVENT_TOPIC], "fromBlock": 901, "toBlock": 1000}
    ]
    assert await reader.block_number() == 1000


async def test_rpc_errors_become_chain_query_failures(reader):
    reader.w3 = FakeWeb3(FakeEth(error=ConnectionError("node down")))

    with pytest.raises(ChainQueryFailure):
        await reader.block_number()
    with pytest.raises(ChainQueryFailure):
        await reader.mint_events(1, 2)
