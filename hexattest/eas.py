# hexattest/eas.py
"""
Minimal Ethereum Attestation Service client: schema encoding, the `attest`
call and UID extraction from the `Attested` event.
"""
import json
import logging
import os
from dataclasses import dataclass

from eth_abi import encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from hexbytes import HexBytes
from web3 import Web3
from web3.logs import DISCARD

from hexattest.errors import EncodingError, NoSignerError, TransactionError
from hexattest.settings import ZERO_ADDRESS, ZERO_BYTES32

log = logging.getLogger("hexattest.eas")

# load ABI
HERE = os.path.dirname(__file__)
ABI_PATH = os.path.join(HERE, "artifacts", "EAS.json")
with open(ABI_PATH) as f:
    artifact = json.load(f)
ABI = artifact.get("abi", artifact)  # if the file is just the abi array

# offline instance: only used for ABI encoding and log decoding
w3 = Web3()


class SchemaEncoder:
    """
    Encode values for an EAS schema string such as "bytes32 contentHash".

    Fields are given as [{"name": ..., "type": ..., "value": ...}] in schema
    order; the result is the 0x-prefixed ABI encoding of the values.
    """

    def __init__(self, schema: str):
        self.schema = schema
        self.fields = []
        for item in schema.split(","):
            pieces = item.split()
            if len(pieces) != 2:
                raise EncodingError(f"Invalid schema field: {item.strip()!r}")
            self.fields.append((pieces[0], pieces[1]))

    @property
    def types(self):
        return [t for t, _ in self.fields]

    def encode_data(self, values: list) -> str:
        if len(values) != len(self.fields):
            raise EncodingError(f"Schema has {len(self.fields)} fields, got {len(values)} values")

        encoded_values = []
        for (abi_type, name), item in zip(self.fields, values):
            if item.get("name") != name or item.get("type") != abi_type:
                raise EncodingError(
                    f"Expected field {abi_type} {name}, got {item.get('type')} {item.get('name')}"
                )
            encoded_values.append(self._coerce(abi_type, name, item.get("value")))

        try:
            return "0x" + encode(self.types, encoded_values).hex()
        except (AbiEncodingError, TypeError) as e:
            raise EncodingError(f"Could not encode schema data: {e}") from e

    @staticmethod
    def _coerce(abi_type: str, name: str, value):
        if not abi_type.startswith("bytes") or abi_type == "bytes":
            return value
        size = int(abi_type[len("bytes"):])
        try:
            b = bytes(HexBytes(value))
        except (TypeError, ValueError) as e:
            raise EncodingError(f"{name}: not a hex value: {value!r}") from e
        if len(b) != size:
            raise EncodingError(f"{name}: expected {size} bytes, got {len(b)}")
        return b


@dataclass(frozen=True)
class AttestationRequestData:
    data: str
    recipient: str = ZERO_ADDRESS
    expiration_time: int = 0
    revocable: bool = True
    ref_uid: str = ZERO_BYTES32
    value: int = 0


def eas_contract(address: str):
    return w3.eth.contract(address=Web3.to_checksum_address(address), abi=ABI)


def encode_attest_call(contract, schema_uid: str, request: AttestationRequestData) -> HexBytes:
    """Calldata for EAS.attest((schema, (recipient, expiration, revocable, refUID, data, value)))."""
    args = (
        HexBytes(schema_uid),
        (
            Web3.to_checksum_address(request.recipient),
            int(request.expiration_time),
            bool(request.revocable),
            HexBytes(request.ref_uid),
            HexBytes(request.data),
            int(request.value),
        ),
    )
    return HexBytes(contract.encode_abi("attest", args=[args]))


def uids_from_receipt(contract, receipt) -> list:
    """UIDs of every Attested event the contract emitted in the receipt."""
    events = contract.events.Attested().process_receipt(receipt, errors=DISCARD)
    return [
        "0x" + bytes(ev["args"]["uid"]).hex()
        for ev in events
        if ev["address"].lower() == contract.address.lower()
    ]


class Transaction:
    """A broadcast attest transaction; `wait()` yields the new attestation UID."""

    def __init__(self, signer, tx_hash: HexBytes, contract):
        self.signer = signer
        self.tx_hash = HexBytes(tx_hash)
        self.contract = contract
        self.receipt = None

    async def wait(self) -> str:
        receipt = await self.signer.wait_for_receipt(self.tx_hash)
        self.receipt = receipt
        if receipt.get("status", 1) == 0:
            raise TransactionError(f"Transaction {self.tx_hash.to_0x_hex()} reverted")

        uids = uids_from_receipt(self.contract, receipt)
        if not uids:
            raise TransactionError(
                f"No Attested event in receipt of {self.tx_hash.to_0x_hex()}"
            )
        return uids[0]


class EAS:
    def __init__(self, address: str):
        self.contract = eas_contract(address)
        self.address = self.contract.address
        self.signer = None

    def connect(self, signer):
        self.signer = signer
        return self

    async def attest(self, schema_uid: str, data: AttestationRequestData) -> Transaction:
        if self.signer is None:
            raise NoSignerError("EAS client is not connected to a signer")

        calldata = encode_attest_call(self.contract, schema_uid, data)
        tx_hash = await self.signer.send_transaction({
            "to": self.address,
            "data": calldata.to_0x_hex(),
            "value": int(data.value),
        })
        log.info("attest tx sent: %s", tx_hash.to_0x_hex())
        return Transaction(self.signer, tx_hash, self.contract)
