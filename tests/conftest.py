import itertools

import pytest
from hexbytes import HexBytes
from web3 import Web3

from hexattest.errors import WalletRequestError
from hexattest.settings import AttestationConfig

CONTRACT = "0x4200000000000000000000000000000000000021"
SCHEMA_UID = "0xdf4c41ea0f6263c72aa385580124f41f2898d3613e86c50519fc3cfd7ff13ad4"
ACCOUNT = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"
TX_HASH = "0x" + "ab" * 32
ATTESTED_TOPIC = Web3.keccak(text="Attested(address,address,bytes32,bytes32)")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    return AttestationConfig(contract_address=CONTRACT, schema_uid=SCHEMA_UID)


def uid_for(n: int) -> str:
    return "0x" + f"{n:064x}"


def attested_receipt(uid: str, contract: str = CONTRACT, status: int = 1, tx_hash: str = TX_HASH):
    """Receipt carrying one Attested(recipient, attester, uid, schemaUID) log."""
    return {
        "transactionHash": tx_hash,
        "transactionIndex": "0x0",
        "blockHash": "0x" + "cd" * 32,
        "blockNumber": "0x10",
        "from": ACCOUNT,
        "to": contract,
        "cumulativeGasUsed": "0x5208",
        "gasUsed": "0x5208",
        "effectiveGasPrice": "0x1",
        "contractAddress": None,
        "logsBloom": "0x" + "00" * 256,
        "type": "0x2",
        "status": hex(status),
        "logs": [
            {
                "address": contract,
                "topics": [
                    ATTESTED_TOPIC.to_0x_hex(),
                    "0x" + "00" * 32,
                    "0x" + "00" * 12 + ACCOUNT[2:].lower(),
                    SCHEMA_UID,
                ],
                "data": uid,
                "blockNumber": "0x10",
                "blockHash": "0x" + "cd" * 32,
                "transactionHash": tx_hash,
                "transactionIndex": "0x0",
                "logIndex": "0x0",
                "removed": False,
            }
        ],
    }


def formatted_receipt(uid: str, contract: str = CONTRACT, status: int = 1, tx_hash: str = TX_HASH):
    """The same receipt as web3 hands it back: ints, HexBytes and checksum addresses."""
    log = attested_receipt(uid, contract, status, tx_hash)["logs"][0]
    return {
        "transactionHash": HexBytes(tx_hash),
        "blockNumber": 16,
        "status": status,
        "logs": [
            {
                "address": Web3.to_checksum_address(contract),
                "topics": [HexBytes(t) for t in log["topics"]],
                "data": HexBytes(uid),
                "blockNumber": 16,
                "blockHash": HexBytes(log["blockHash"]),
                "transactionHash": HexBytes(tx_hash),
                "transactionIndex": 0,
                "logIndex": 0,
                "removed": False,
            }
        ],
    }


class FakeWallet:
    """Request-only wallet client recording every JSON-RPC call."""

    def __init__(self, address=ACCOUNT, connected=True, exposed=True, grant=True,
                 receipt=None, fail=None):
        self.address = address
        self.connected = connected
        self.accounts = [address] if exposed else []
        self.grant = grant
        self.receipt = receipt
        self.fail = fail or {}
        self.calls = []

    async def request(self, method, params=None):
        self.calls.append((method, params))
        if method in self.fail:
            raise self.fail[method]
        if method == "eth_accounts":
            return list(self.accounts)
        if method == "eth_requestAccounts":
            if self.grant:
                self.accounts = [self.address]
            return list(self.accounts)
        if method == "eth_sendTransaction":
            return TX_HASH
        if method == "eth_getTransactionReceipt":
            return self.receipt
        if method == "eth_chainId":
            return "0x2105"
        raise WalletRequestError(f"method {method} not supported", -32601)

    def methods(self):
        return [m for m, _ in self.calls]


class FakeInjectedProvider:
    def __init__(self, address=ACCOUNT):
        self.address = address
        self.calls = []

    async def request(self, args):
        self.calls.append(args)
        if args["method"] in ("eth_accounts", "eth_requestAccounts"):
            return [self.address]
        if args["method"] == "eth_sendTransaction":
            return TX_HASH
        return None


class FakeSigner:
    def __init__(self, address=ACCOUNT, receipt=None, fail=None):
        self.address = address
        self.receipt = receipt
        self.fail = fail
        self.sent = []
        self._uids = itertools.count(1)

    async def send_transaction(self, tx):
        if self.fail is not None:
            raise self.fail
        self.sent.append(tx)
        return HexBytes(TX_HASH)

    async def wait_for_receipt(self, tx_hash):
        if self.receipt is not None:
            return self.receipt
        return formatted_receipt(uid_for(next(self._uids)))


class FakeTx:
    def __init__(self, uid, fail=None):
        self.uid = uid
        self.fail = fail
        self.tx_hash = HexBytes(TX_HASH)

    async def wait(self):
        if self.fail is not None:
            raise self.fail
        return self.uid


class FakeEASService:
    """Stands in for the EAS client; every attest yields a fresh UID."""

    def __init__(self, fail=None):
        self.fail = fail
        self.bound = []
        self.signers = []
        self.requests = []
        self._uids = itertools.count(1)

    def __call__(self, address):
        self.bound.append(address)
        return self

    def connect(self, signer):
        self.signers.append(signer)
        return self

    async def attest(self, schema_uid, data):
        self.requests.append((schema_uid, data))
        return FakeTx(uid_for(next(self._uids)), fail=self.fail)


@pytest.fixture
def wallet():
    return FakeWallet()


@pytest.fixture
def service():
    return FakeEASService()
