from typing import Optional, List

from pydantic import BaseModel, Field

from core.models.base import MongoModel


class InviteInfo(BaseModel):
    """One live invite as returned by the platform."""
    code: str
    uses: int = Field(default=0, ge=0)
    inviter_id: Optional[str] = None


class InviterRecord(MongoModel):
    user_id: str = Field(..., description="Discord ID of the inviter")
    total_invites: int = Field(default=0, ge=0)
    regular_invites: int = Field(default=0, ge=0)
    bonus_invites: int = Field(default=0, ge=0)
    fake_invites: int = Field(default=0, ge=0)
    leaves: int = Field(default=0, ge=0)
    invite_codes: List[str] = Field(default_factory=list, description="Codes credited to this inviter, in order")


class LedgerResult(BaseModel):
    ok: bool
    reason: Optional[str] = None
    record: Optional[InviterRecord] = None

    @classmethod
    def success(cls, record: Optional[InviterRecord] = None) -> "LedgerResult":
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, reason: str) -> "LedgerResult":
        return cls(ok=False, reason=reason)


class JoinOutcome(BaseModel):
    """What the tracker learned about a single join."""
    invite: Optional[InviteInfo] = None
    inviter_id: Optional[str] = None
    total_before: int = 0
    ledger: Optional[LedgerResult] = None

    @property
    def attributed(self) -> bool:
        return self.inviter_id is not None
