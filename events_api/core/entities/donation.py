"""
Potlock donation events.

`donated_at` is the time recorded by the donation contract and is serialised
in milliseconds. It is independent of the block timestamp and never used for
pagination.
"""
from typing import Optional

from pydantic import BaseModel

from events_api.core.entities.balance import Balance, OptionalBalance
from events_api.core.entities.event import TransactionEvent
from events_api.core.entities.timestamps import MillisTimestamp


class PotlockDonationEvent(TransactionEvent):
    donation_id: int
    donor_id: str
    total_amount: Balance
    message: Optional[str] = None
    donated_at: MillisTimestamp
    project_id: str
    protocol_fee: Balance
    referrer_id: Optional[str] = None
    referrer_fee: OptionalBalance = None


class PotlockPotDonationEvent(TransactionEvent):
    donation_id: int
    pot_id: str
    donor_id: str
    total_amount: Balance
    net_amount: Balance
    message: Optional[str] = None
    donated_at: MillisTimestamp
    referrer_id: Optional[str] = None
    referrer_fee: OptionalBalance = None
    protocol_fee: Balance
    chef_id: Optional[str] = None
    chef_fee: OptionalBalance = None


class PotlockPotProjectDonationEvent(PotlockPotDonationEvent):
    project_id: str


# --- Filters ---

class PotlockDonationFilter(BaseModel):
    project_id: Optional[str] = None
    donor_id: Optional[str] = None
    referrer_id: Optional[str] = None


class PotlockPotProjectDonationFilter(BaseModel):
    pot_id: Optional[str] = None
    project_id: Optional[str] = None
    donor_id: Optional[str] = None
    referrer_id: Optional[str] = None


class PotlockPotDonationFilter(BaseModel):
    pot_id: Optional[str] = None
    donor_id: Optional[str] = None
    referrer_id: Optional[str] = None
