from __future__ import annotations

import time
import uuid
from typing import ClassVar, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

from vax_ledger import __schema__
from vax_ledger.hashing import event_topic, h_state
from vax_ledger.identity import ZERO_ADDRESS


def now_utc() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def new_id(prefix: str) -> str:
    """
    Generate UUIDv7-style time-ordered ID for audit ordering.

    Format: {prefix}_{timestamp_ms:013x}_{random:016x}
    """
    timestamp_ms = int(time.time() * 1000)
    random_bits = uuid.uuid4().hex[:16]  # 64 random bits
    return f"{prefix}_{timestamp_ms:013x}_{random_bits}"

class CredentialRecord(BaseModel):
    """
    Per-subject vaccination credential.

    id == 0 is the "absent" sentinel returned for subjects that were never
    issued a credential; callers must not treat it as a valid record.
    """
    id: int = 0
    issuer: str = ZERO_ADDRESS
    vaccine_type: int = 0
    dose_count: int = 0
    payload: str = ""
    created_at: int = 0  # unix seconds

    @property
    def is_issued(self) -> bool:
        return self.id > 0

class LedgerEvent(BaseModel):
    """Observable notification emitted by a role-management operation."""
    signature: ClassVar[str] = ""

    schema_version: str = Field(default=__schema__, alias="schema")  # Schema version stamp
    event_id: str = Field(default_factory=lambda: new_id("ev"))
    created_utc: str = Field(default_factory=now_utc)

    model_config = {"populate_by_name": True}

    @property
    def topic(self) -> str:
        return event_topic(self.signature)

class AdministratorTransferProposed(LedgerEvent):
    """
    Administrator changed.

    Despite the name, the transfer has already taken effect when this is
    emitted; there is no acceptance step.
    """
    signature: ClassVar[str] = "AdministratorTransferProposed(address,address)"

    kind: Literal["AdministratorTransferProposed"] = "AdministratorTransferProposed"
    previous_administrator: str
    proposed_administrator: str

class IssuerAdded(LedgerEvent):
    signature: ClassVar[str] = "IssuerAdded(address)"

    kind: Literal["IssuerAdded"] = "IssuerAdded"
    issuer: str

class IssuerRemoved(LedgerEvent):
    signature: ClassVar[str] = "IssuerRemoved(address)"

    kind: Literal["IssuerRemoved"] = "IssuerRemoved"
    issuer: str

Event = Union[AdministratorTransferProposed, IssuerAdded, IssuerRemoved]

class LedgerSnapshot(BaseModel):
    """
    Full persisted state of a CredentialLedger.

    state_hash covers every state field (not the snapshot metadata), so a
    tampered snapshot is rejected on restore.
    """
    kind: Literal["LedgerSnapshot"] = "LedgerSnapshot"
    schema_version: str = Field(default=__schema__, alias="schema")  # Schema version stamp
    snapshot_id: str = Field(default_factory=lambda: new_id("ss"))
    created_utc: str = Field(default_factory=now_utc)
    administrator: str
    issuers: Dict[str, bool] = Field(default_factory=dict)
    vaccine_types: Dict[int, str] = Field(default_factory=dict)
    credentials: Dict[str, CredentialRecord] = Field(default_factory=dict)
    next_credential_id: int = 1
    state_hash: Optional[str] = None  # computed after model creation

    model_config = {"populate_by_name": True}

    def state_body(self) -> dict:
        body = self.model_dump(
            mode="json",
            include={"administrator", "issuers", "vaccine_types", "credentials", "next_credential_id"},
        )
        # JSON mode stringifies int keys; keep them stable for hashing
        body["vaccine_types"] = {str(k): v for k, v in body["vaccine_types"].items()}
        return body

    def compute_hash(self) -> str:
        return h_state(self.state_body())

    def seal(self) -> LedgerSnapshot:
        self.state_hash = self.compute_hash()
        return self
