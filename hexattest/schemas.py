# hexattest/schemas.py
from pydantic import BaseModel

from hexattest.canonical import InputMode


class ConfigResponse(BaseModel):
    contract_address: str
    schema_uid: str
    schema_string: str
    chain_id: int


class ProcessUrlIn(BaseModel):
    url: str


class ProcessUrlResponse(BaseModel):
    extracted_parts: str
    combined_string: str
    hex_bytes32: str


class FormatHexIn(BaseModel):
    hex: str


class FormatHexResponse(BaseModel):
    hex_bytes32: str


class AttestIn(BaseModel):
    input: str
    mode: InputMode = InputMode.URL


class AttestResponse(BaseModel):
    uid: str
    tx_hash: str
    hex_bytes32: str
    message: str
