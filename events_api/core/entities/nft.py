from typing import List, Optional

from pydantic import BaseModel

from events_api.core.entities.balance import VecBalance
from events_api.core.entities.event import TransactionEvent


class NftMintEvent(TransactionEvent):
    owner_id: str
    token_ids: List[str]
    memo: Optional[str] = None
    contract_id: str


class NftTransferEvent(TransactionEvent):
    old_owner_id: str
    new_owner_id: str
    token_ids: List[str]
    memo: Optional[str] = None
    token_prices_near: VecBalance
    contract_id: str


class NftBurnEvent(TransactionEvent):
    owner_id: str
    token_ids: List[str]
    memo: Optional[str] = None
    contract_id: str


# --- Filters ---

class NftMintFilter(BaseModel):
    token_account_id: Optional[str] = None
    account_id: Optional[str] = None


class NftTransferFilter(BaseModel):
    token_account_id: Optional[str] = None
    old_owner_id: Optional[str] = None
    new_owner_id: Optional[str] = None
    involved_account_ids: Optional[str] = None  # comma separated


class NftBurnFilter(BaseModel):
    token_account_id: Optional[str] = None
    account_id: Optional[str] = None
