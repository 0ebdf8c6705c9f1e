# hexattest/submitter.py
import logging
from dataclasses import dataclass
from typing import Callable

from hexbytes import HexBytes

from hexattest.eas import EAS, AttestationRequestData, SchemaEncoder
from hexattest.errors import AttestationError, NoSignerError, TransactionError
from hexattest.settings import AttestationConfig

log = logging.getLogger("hexattest.submitter")


@dataclass(frozen=True)
class AttestationResult:
    uid: str
    tx_hash: str


class AttestationSubmitter:
    """
    Attest a canonical bytes32 under the configured schema.

    Each call issues one state-changing transaction. Nothing is deduplicated:
    attesting the same value twice creates two attestations.
    """

    def __init__(self, config: AttestationConfig, service_factory: Callable = EAS):
        self.config = config
        self.service_factory = service_factory
        self.encoder = SchemaEncoder(config.schema)

    def encode(self, content_hash: str) -> str:
        (abi_type, name), = self.encoder.fields
        return self.encoder.encode_data([{"name": name, "value": content_hash, "type": abi_type}])

    async def submit(self, signer, content_hash: str) -> AttestationResult:
        if signer is None:
            raise NoSignerError()

        eas = self.service_factory(self.config.contract_address)
        eas.connect(signer)

        request = AttestationRequestData(data=self.encode(content_hash))

        try:
            tx = await eas.attest(self.config.schema_uid, request)
            uid = await tx.wait()
        except AttestationError:
            raise
        except Exception as e:
            raise TransactionError(str(e) or type(e).__name__) from e

        tx_hash = HexBytes(tx.tx_hash).to_0x_hex()
        log.info("New attestation UID: %s (tx %s)", uid, tx_hash)
        return AttestationResult(uid=uid, tx_hash=tx_hash)
