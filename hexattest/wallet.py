# hexattest/wallet.py
"""
Wallet client backed by a private key, for submitting without a browser
wallet. Transactions are signed locally with eth-account and broadcast as raw
transactions; any other JSON-RPC method goes straight to the node.
"""
import logging
from typing import Any, Optional

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from hexattest.errors import WalletRequestError
from hexattest.settings import settings

log = logging.getLogger("hexattest.wallet")

ACCOUNT_METHODS = ("eth_accounts", "eth_requestAccounts")


def _quantity(value, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value)


class LocalKeyWallet:
    injected_provider = None

    def __init__(self, private_key: str, rpc_url: Optional[str] = None,
                 chain_id: Optional[int] = None, w3: Optional[AsyncWeb3] = None):
        self.account = Account.from_key(private_key)
        self.address = self.account.address
        self.connected = True
        self.chain_id = int(chain_id if chain_id is not None else settings.CHAIN_ID)
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(rpc_url or settings.RPC_URL))

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        params = params or []
        if method in ACCOUNT_METHODS:
            return [self.address]
        if method == "eth_sendTransaction":
            return await self._send_transaction(params[0])

        response = await self.w3.provider.make_request(method, params)
        if response.get("error"):
            error = response["error"]
            raise WalletRequestError(error.get("message", str(error)), error.get("code"))
        return response.get("result")

    async def _send_transaction(self, tx: dict) -> str:
        sender = tx.get("from")
        if sender and sender.lower() != self.address.lower():
            raise WalletRequestError(f"Unknown account {sender}", 4100)

        to = Web3.to_checksum_address(tx["to"])
        value = _quantity(tx.get("value"))
        data = tx.get("data") or "0x"

        if tx.get("gas") is not None:
            gas = _quantity(tx["gas"])
        else:
            gas = await self.w3.eth.estimate_gas(
                {"from": self.address, "to": to, "value": value, "data": data}
            )

        signable = {
            "to": to,
            "value": value,
            "data": data,
            "gas": gas,
            "gasPrice": _quantity(tx.get("gasPrice")) or await self.w3.eth.gas_price,
            "nonce": await self.w3.eth.get_transaction_count(self.address),
            "chainId": self.chain_id,
        }

        # Sign the tx
        signed = self.account.sign_transaction(signable)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        log.info("Broadcast tx %s from %s", tx_hash.to_0x_hex(), self.address)
        return tx_hash.to_0x_hex()
