# hexattest/settings.py
import logging
from dataclasses import dataclass

from pydantic_settings import BaseSettings

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = "0x" + "00" * 32


@dataclass(frozen=True)
class AttestationConfig:
    """Contract address and schema every submission is made against."""
    contract_address: str
    schema_uid: str
    schema: str = "bytes32 contentHash"


class Settings(BaseSettings):
    EAS_CONTRACT_ADDRESS: str = "0x4200000000000000000000000000000000000021"
    SCHEMA_UID: str = "0xdf4c41ea0f6263c72aa385580124f41f2898d3613e86c50519fc3cfd7ff13ad4"
    SCHEMA: str = "bytes32 contentHash"

    RPC_URL: str = "https://mainnet.base.org"
    CHAIN_ID: int = 8453
    SUBMITTER_PK: str | None = None

    RECEIPT_TIMEOUT: float = 120
    RECEIPT_POLL_INTERVAL: float = 0.5

    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    def attestation_config(self) -> AttestationConfig:
        return AttestationConfig(
            contract_address=self.EAS_CONTRACT_ADDRESS,
            schema_uid=self.SCHEMA_UID,
            schema=self.SCHEMA,
        )


settings = Settings()


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
