# hexattest/errors.py
from enum import Enum


class ErrorKind(str, Enum):
    INPUT_SHAPE = "input_shape"
    INVALID_HEX = "invalid_hex"
    EMPTY_INPUT = "empty_input"
    PAYLOAD_TOO_LONG = "payload_too_long"
    PRECONDITION = "precondition"
    NO_WALLET = "no_wallet"
    NO_SIGNER = "no_signer"
    ENCODING = "encoding"
    TRANSACTION = "transaction"
    ABANDONED = "abandoned"
    UNKNOWN = "unknown"


class AttestationError(Exception):
    kind = ErrorKind.UNKNOWN


# ---------- canonicalization ----------
class CanonicalizationError(AttestationError, ValueError):
    pass


class InputShapeError(CanonicalizationError):
    kind = ErrorKind.INPUT_SHAPE


class InvalidHexFormatError(CanonicalizationError):
    kind = ErrorKind.INVALID_HEX


class EmptyInputError(CanonicalizationError):
    kind = ErrorKind.EMPTY_INPUT


class PayloadTooLongError(CanonicalizationError):
    kind = ErrorKind.PAYLOAD_TOO_LONG


# ---------- preconditions ----------
class PreconditionError(AttestationError):
    kind = ErrorKind.PRECONDITION


class NoWalletError(PreconditionError):
    kind = ErrorKind.NO_WALLET

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


class NoSignerError(PreconditionError):
    kind = ErrorKind.NO_SIGNER

    def __init__(self, message: str = "Failed to get signer from wallet"):
        super().__init__(message)


# ---------- submission ----------
class EncodingError(AttestationError):
    """Schema encoding rejected a value. Unreachable for well-formed bytes32 input."""
    kind = ErrorKind.ENCODING


class TransactionError(AttestationError):
    kind = ErrorKind.TRANSACTION


class WalletRequestError(Exception):
    """A JSON-RPC request answered by the wallet with an error object."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code
