# hexattest/controller.py
"""
Submission state machine:

    IDLE -> PROCESSING -> VALIDATING -> AWAITING_SIGNER -> SUBMITTING -> SUCCEEDED | FAILED

`set_input` canonicalizes on every change; `submit` runs one attestation and
records every failure in `error` / `error_kind`. Cancellation still propagates,
after the state has left AWAITING_SIGNER / SUBMITTING.
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from hexattest.canonical import InputMode, ProcessedUrl, canonicalize
from hexattest.errors import (
    AttestationError,
    CanonicalizationError,
    ErrorKind,
    NoWalletError,
    PreconditionError,
)
from hexattest.settings import AttestationConfig
from hexattest.signer import WalletClient, wallet_to_signer
from hexattest.submitter import AttestationResult, AttestationSubmitter

log = logging.getLogger("hexattest.controller")


class State(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    VALIDATING = "validating"
    AWAITING_SIGNER = "awaiting_signer"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


IN_FLIGHT = (State.AWAITING_SIGNER, State.SUBMITTING)


class SubmissionController:
    def __init__(
        self,
        config: AttestationConfig,
        wallet: Optional[WalletClient] = None,
        mode: InputMode = InputMode.URL,
        submitter: Optional[AttestationSubmitter] = None,
        signer_factory: Callable[[WalletClient], Awaitable] = wallet_to_signer,
    ):
        self.config = config
        self.wallet = wallet
        self.mode = InputMode(mode)
        self.submitter = submitter or AttestationSubmitter(config)
        self.signer_factory = signer_factory

        self.state = State.IDLE
        self.raw_input = ""
        self.processed: Optional[ProcessedUrl] = None
        self.hex_bytes32 = ""
        self.error = ""
        self.error_kind: Optional[ErrorKind] = None
        self.result: Optional[AttestationResult] = None
        self.result_message = ""

    @property
    def in_flight(self) -> bool:
        return self.state in IN_FLIGHT

    @property
    def can_submit(self) -> bool:
        connected = self.wallet is not None and getattr(self.wallet, "connected", False)
        return bool(self.hex_bytes32) and connected and not self.in_flight

    def _fail(self, kind: ErrorKind, message: str):
        self.state = State.FAILED
        self.error_kind = kind
        self.error = message

    # ---------- input ----------
    def set_input(self, raw: str):
        self.raw_input = raw or ""
        in_flight = self.in_flight

        if not self.raw_input.strip():
            self.processed = None
            self.hex_bytes32 = ""
            if not in_flight:
                self.state = State.IDLE
                self.error = ""
                self.error_kind = None
            return

        if not in_flight:
            self.state = State.PROCESSING
        try:
            value = canonicalize(self.raw_input, self.mode)
        except CanonicalizationError as e:
            self.processed = None
            self.hex_bytes32 = ""
            if not in_flight:
                self._fail(e.kind, str(e))
            return

        self.processed = value.processed
        self.hex_bytes32 = value.hex_bytes32
        if not in_flight:
            self.error = ""
            self.error_kind = None

    # ---------- submission ----------
    async def submit(self) -> Optional[AttestationResult]:
        """Run one attestation; returns None when ignored or failed."""
        if self.in_flight:
            log.warning("Submission already in flight; ignoring submit")
            return None

        self.state = State.VALIDATING
        self.error = ""
        self.error_kind = None
        self.result = None
        self.result_message = ""
        content_hash = self.hex_bytes32

        try:
            if self.wallet is None or not getattr(self.wallet, "connected", False):
                raise NoWalletError()
            if not content_hash:
                raise PreconditionError(
                    "No processed hex data available. Please enter a valid URL first."
                    if self.mode is InputMode.URL
                    else "No processed hex data available. Please enter a valid hex value first."
                )

            self.state = State.AWAITING_SIGNER
            signer = await self.signer_factory(self.wallet)

            self.state = State.SUBMITTING
            result = await self.submitter.submit(signer, content_hash)
        except Exception as e:
            log.exception("Error submitting attestation")
            if isinstance(e, AttestationError):
                self._fail(e.kind, str(e))
            else:
                self._fail(ErrorKind.UNKNOWN, str(e) or "An unknown error occurred")
            return None
        else:
            self.state = State.SUCCEEDED
            self.result = result
            self.result_message = f"Attestation successful! UID: {result.uid}"
            return result
        finally:
            # caller stopped waiting (cancelled); the tx may still land
            if self.in_flight:
                log.warning("Submission abandoned in state %s", self.state.value)
                self._fail(ErrorKind.ABANDONED, "Submission abandoned")
