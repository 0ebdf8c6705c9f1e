# hexattest/signer.py
"""
Bridge a connected wallet client into a web3.py provider and a signer bound to
the wallet's active account.

The wallet client is anything with `connected`, `address` and an async
`request(method, params)`. If it also carries an injected EIP-1193 provider
(`injected_provider`, whose `request` takes a single {"method", "params"}
dict) that one is used instead of the client's own request method.
"""
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

from eth_utils import to_hex
from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3
from web3.providers.async_base import AsyncBaseProvider
from web3.types import RPCEndpoint, RPCResponse

from hexattest.errors import NoSignerError, NoWalletError, WalletRequestError
from hexattest.settings import settings

log = logging.getLogger("hexattest.signer")


class Eip1193Provider(Protocol):
    async def request(self, args: dict) -> Any: ...


class WalletClient(Protocol):
    connected: bool
    address: Optional[str]

    async def request(self, method: str, params: Optional[list] = None) -> Any: ...


# ---------- transports ----------
@dataclass(frozen=True)
class InjectedTransport:
    provider: Eip1193Provider

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        return await self.provider.request({"method": method, "params": params or []})


@dataclass(frozen=True)
class RequestTransport:
    client: WalletClient

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        return await self.client.request(method, params or [])


WalletTransport = Union[InjectedTransport, RequestTransport]


def resolve_transport(wallet: WalletClient) -> WalletTransport:
    injected = getattr(wallet, "injected_provider", None)
    if injected is not None:
        return InjectedTransport(injected)
    return RequestTransport(wallet)


# ---------- provider ----------
class WalletProvider(AsyncBaseProvider):
    """web3.py provider answering every JSON-RPC call through the wallet."""

    def __init__(self, transport: WalletTransport, **kwargs):
        super().__init__(**kwargs)
        self.transport = transport
        self._ids = itertools.count(1)

    async def make_request(self, method: RPCEndpoint, params: Any) -> RPCResponse:
        request_id = next(self._ids)
        try:
            result = await self.transport.request(method, list(params or []))
        except Exception as e:
            # EIP-1193 errors carry a numeric code (4001 = user rejected)
            code = getattr(e, "code", None)
            return {
                "jsonrpc": "2.0",
                "id": request_id,
                "error": {"code": code if isinstance(code, int) else -32603, "message": str(e)},
            }
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    async def is_connected(self, show_traceback: bool = False) -> bool:
        return True

    async def send(self, method: str, params: Optional[list] = None) -> Any:
        """Make a request and unwrap the result, raising on a JSON-RPC error."""
        response = await self.make_request(RPCEndpoint(method), params or [])
        error = response.get("error")
        if error:
            raise WalletRequestError(error.get("message", str(error)), error.get("code"))
        return response.get("result")

    async def get_signer(self, address: str) -> "WalletSigner":
        """
        Signer for `address`. Asks the wallet for account access
        (eth_requestAccounts) when the account is not already exposed.
        """
        wanted = address.lower()
        accounts = await self.send("eth_accounts") or []
        if wanted not in (a.lower() for a in accounts):
            accounts = await self.send("eth_requestAccounts") or []
            if wanted not in (a.lower() for a in accounts):
                raise NoSignerError(f"Wallet does not expose account {address}")
        return WalletSigner(self, Web3.to_checksum_address(address))


# ---------- signer ----------
class WalletSigner:
    def __init__(self, provider: WalletProvider, address: str):
        self.provider = provider
        self.address = address
        self.w3 = AsyncWeb3(provider)

    async def send_transaction(self, tx: dict) -> HexBytes:
        """Hand the transaction to the wallet, which fills gas/nonce and signs it."""
        payload = {"from": self.address}
        for key, value in tx.items():
            payload[key] = to_hex(value) if isinstance(value, int) else value
        tx_hash = await self.provider.send("eth_sendTransaction", [payload])
        return HexBytes(tx_hash)

    async def wait_for_receipt(self, tx_hash):
        return await self.w3.eth.wait_for_transaction_receipt(
            tx_hash,
            timeout=settings.RECEIPT_TIMEOUT,
            poll_latency=settings.RECEIPT_POLL_INTERVAL,
        )


async def wallet_to_signer(wallet: Optional[WalletClient]) -> WalletSigner:
    """Turn a connected wallet client into a WalletSigner for its active account."""
    if wallet is None or not getattr(wallet, "connected", False) or not wallet.address:
        raise NoWalletError()

    provider = WalletProvider(resolve_transport(wallet))
    try:
        signer = await provider.get_signer(wallet.address)
    except WalletRequestError as e:
        raise NoSignerError(f"Failed to get signer from wallet: {e}") from e
    log.info("Signer acquired for %s via %s", signer.address, type(provider.transport).__name__)
    return signer
