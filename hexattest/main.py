# hexattest/main.py
from typing import Optional

from fastapi import FastAPI, HTTPException

from .canonical import format_hex, process_url
from .controller import State, SubmissionController
from .errors import CanonicalizationError, ErrorKind
from .schemas import (
    AttestIn,
    AttestResponse,
    ConfigResponse,
    FormatHexIn,
    FormatHexResponse,
    ProcessUrlIn,
    ProcessUrlResponse,
)
from .settings import configure_logging, settings
from .submitter import AttestationSubmitter
from .wallet import LocalKeyWallet

app = FastAPI(title="Hex Attestation Service")

config = settings.attestation_config()
submitter = AttestationSubmitter(config)

CLIENT_ERRORS = {
    ErrorKind.INPUT_SHAPE,
    ErrorKind.INVALID_HEX,
    ErrorKind.EMPTY_INPUT,
    ErrorKind.PAYLOAD_TOO_LONG,
    ErrorKind.PRECONDITION,
    ErrorKind.NO_WALLET,
    ErrorKind.NO_SIGNER,
}


@app.on_event("startup")
def startup():
    configure_logging()


def wallet_for_submission() -> Optional[LocalKeyWallet]:
    if not settings.SUBMITTER_PK:
        return None
    return LocalKeyWallet(settings.SUBMITTER_PK)


@app.get("/config", response_model=ConfigResponse)
def get_config():
    return {
        "contract_address": config.contract_address,
        "schema_uid": config.schema_uid,
        "schema_string": config.schema,
        "chain_id": settings.CHAIN_ID,
    }


@app.post("/process-url", response_model=ProcessUrlResponse)
def process_url_endpoint(data: ProcessUrlIn):
    """
    Show the processing steps for a URL: extracted parts, combined string and
    the padded bytes32.
    """
    try:
        processed = process_url(data.url)
    except CanonicalizationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "extracted_parts": processed.extracted_parts,
        "combined_string": processed.combined_string,
        "hex_bytes32": processed.hex_bytes32,
    }


@app.post("/format-hex", response_model=FormatHexResponse)
def format_hex_endpoint(data: FormatHexIn):
    try:
        return {"hex_bytes32": format_hex(data.hex)}
    except CanonicalizationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/attest", response_model=AttestResponse)
async def attest(data: AttestIn):
    """
    Canonicalize the input and attest it with the server-side key.
    """
    wallet = wallet_for_submission()
    if wallet is None:
        raise HTTPException(status_code=503, detail="SUBMITTER_PK not configured")

    controller = SubmissionController(config, wallet=wallet, mode=data.mode, submitter=submitter)
    controller.set_input(data.input)
    if controller.state == State.FAILED:
        raise HTTPException(status_code=400, detail=controller.error)

    result = await controller.submit()
    if result is None:
        if controller.error_kind in CLIENT_ERRORS:
            status = 400
        elif controller.error_kind == ErrorKind.TRANSACTION:
            status = 502
        else:
            status = 500
        raise HTTPException(status_code=status, detail=controller.error)

    return {
        "uid": result.uid,
        "tx_hash": result.tx_hash,
        "hex_bytes32": controller.hex_bytes32,
        "message": controller.result_message,
    }
