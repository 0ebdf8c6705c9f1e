# hexattest/cast.py
"""
Share a cast, then attest its hash.

The compose/view API is a black box reached through `CastClient`. Composing
is one awaitable with a tagged outcome, so the caller sees success or failure
in order before any attestation starts.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Union

from hexattest.canonical import InputMode
from hexattest.controller import SubmissionController
from hexattest.settings import AttestationConfig

log = logging.getLogger("hexattest.cast")

NO_HASH_PREFIX = "no hash"
SHARE_FAILED_MESSAGE = "Failed to share cast. Please try again."


class CastClient(Protocol):
    async def compose_cast(self, text: str, embeds: list) -> Optional[dict]: ...

    async def view_cast(self, hash: str, close: bool = False) -> Any: ...


@dataclass(frozen=True)
class CastShared:
    hash: str
    payload: dict = field(default_factory=dict)

    @property
    def has_hash(self) -> bool:
        return not self.hash.startswith(NO_HASH_PREFIX)


@dataclass(frozen=True)
class CastFailed:
    cause: str
    message: str = SHARE_FAILED_MESSAGE


CastOutcome = Union[CastShared, CastFailed]


def hello_world_text(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"Hello World! 🌍 Posted at {stamp}"


async def share_hello_world(client: CastClient, embed_url: str,
                            now: Optional[datetime] = None) -> CastOutcome:
    try:
        data = await client.compose_cast(hello_world_text(now), [embed_url])
    except Exception as e:
        log.exception("Error sharing cast")
        return CastFailed(cause=str(e) or type(e).__name__)

    data = data or {}
    cast_hash = (data.get("cast") or {}).get("hash")
    if not cast_hash:
        cast_hash = f"{NO_HASH_PREFIX} _{int(time.time() * 1000)}"
    return CastShared(hash=cast_hash, payload=data)


class PostAttestationFlow:
    def __init__(self, client: CastClient, config: AttestationConfig, embed_url: str,
                 wallet=None, **controller_kwargs):
        self.client = client
        self.config = config
        self.embed_url = embed_url
        self.wallet = wallet
        self.controller_kwargs = controller_kwargs
        self.outcome: Optional[CastOutcome] = None
        self.composing = False

    @property
    def shared_hash(self) -> Optional[str]:
        if isinstance(self.outcome, CastShared) and self.outcome.has_hash:
            return self.outcome.hash
        return None

    async def share(self, now: Optional[datetime] = None) -> Optional[CastOutcome]:
        if self.composing:
            return None
        self.composing = True
        try:
            self.outcome = await share_hello_world(self.client, self.embed_url, now)
        finally:
            self.composing = False
        return self.outcome

    async def view(self) -> bool:
        if not self.shared_hash:
            return False
        await self.client.view_cast(self.shared_hash, close=False)
        return True

    def attestation_controller(self) -> Optional[SubmissionController]:
        """Hex-mode controller prefilled with the shared cast hash."""
        if not self.shared_hash:
            return None
        controller = SubmissionController(
            self.config, wallet=self.wallet, mode=InputMode.HEX, **self.controller_kwargs
        )
        controller.set_input(self.shared_hash)
        return controller
