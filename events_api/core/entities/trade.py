from typing import Any, Optional

from pydantic import BaseModel

from events_api.core.entities.balance import Balance
from events_api.core.entities.event import BlockEvent, TransactionEvent


class TradePoolEvent(TransactionEvent):
    """
    Swap through a single pool.
    """
    trader: str
    pool: str
    token_in: str
    token_out: str
    amount_in: Balance
    amount_out: Balance


class TradeSwapEvent(TransactionEvent):
    """
    Net result of a (possibly multi-hop) swap.
    `balance_changes` maps token account id to the trader's signed balance change.
    """
    trader: str
    balance_changes: Any


class TradePoolChangeEvent(BlockEvent):
    pool_id: str
    pool: Any  # pool state as reported by the exchange contract


# --- Filters ---

class TradePoolFilter(BaseModel):
    pool_id: Optional[str] = None
    account_id: Optional[str] = None


class TradeSwapFilter(BaseModel):
    account_id: Optional[str] = None
    involved_token_account_ids: Optional[str] = None  # comma separated


class TradePoolChangeFilter(BaseModel):
    pool_id: Optional[str] = None
