from dataclasses import dataclass, field
from typing import Tuple, Type

from pydantic import BaseModel

from events_api.core.entities.donation import (
    PotlockDonationEvent,
    PotlockDonationFilter,
    PotlockPotDonationEvent,
    PotlockPotDonationFilter,
    PotlockPotProjectDonationEvent,
    PotlockPotProjectDonationFilter,
)
from events_api.core.entities.event import BlockEvent
from events_api.core.entities.nft import (
    NftBurnEvent,
    NftBurnFilter,
    NftMintEvent,
    NftMintFilter,
    NftTransferEvent,
    NftTransferFilter,
)
from events_api.core.entities.trade import (
    TradePoolChangeEvent,
    TradePoolChangeFilter,
    TradePoolEvent,
    TradePoolFilter,
    TradeSwapEvent,
    TradeSwapFilter,
)
from events_api.core.filters import AnyOf, Equals, FilterSpec, HasAnyKey
from events_api.core.use_cases.block_window import block_window_query


@dataclass(frozen=True)
class EventVariant:
    """
    Everything needed to query one event table.

    Rows sharing a block timestamp are ordered by `receipt_id`, then by the
    columns in `tiebreak`. Text columns sort by code point (`COLLATE "C"`),
    whatever the database collation, matching the in-memory store.
    """
    name: str
    family: str
    table: str
    model: Type[BlockEvent]
    filter_model: Type[BaseModel]
    filters: FilterSpec
    columns: Tuple[str, ...]
    tiebreak: Tuple[str, ...] = field(default=())

    @property
    def order_by(self) -> Tuple[str, ...]:
        return ("receipt_id",) + self.tiebreak

    @property
    def sort_keys(self) -> Tuple[str, ...]:
        return tuple(
            f"e.{c}" if c in _NUMERIC_COLUMNS else f'e.{c} COLLATE "C"'
            for c in self.order_by
        )

    def query(self) -> str:
        return block_window_query(self.table, self.columns, self.filters.condition(), self.sort_keys)


_NUMERIC_COLUMNS = {"donation_id", "block_height"}


_NFT_COLUMNS = ("transaction_id", "receipt_id", "block_height", "contract_id")
_DONATION_COLUMNS = ("transaction_id", "receipt_id", "block_height", "donation_id")

NFT_MINT = EventVariant(
    name="nft_mint",
    family="nft",
    table="nft_mint",
    model=NftMintEvent,
    filter_model=NftMintFilter,
    filters=FilterSpec(
        Equals("token_account_id", "contract_id"),
        Equals("account_id", "owner_id"),
    ),
    columns=_NFT_COLUMNS + ("owner_id", "token_ids", "memo"),
    tiebreak=("contract_id", "owner_id", "token_ids"),
)

NFT_TRANSFER = EventVariant(
    name="nft_transfer",
    family="nft",
    table="nft_transfer",
    model=NftTransferEvent,
    filter_model=NftTransferFilter,
    filters=FilterSpec(
        Equals("token_account_id", "contract_id"),
        Equals("old_owner_id"),
        Equals("new_owner_id"),
        AnyOf("involved_account_ids", ("old_owner_id", "new_owner_id")),
    ),
    columns=_NFT_COLUMNS + ("old_owner_id", "new_owner_id", "token_ids", "memo", "token_prices_near"),
    tiebreak=("contract_id", "old_owner_id", "new_owner_id", "token_ids"),
)

NFT_BURN = EventVariant(
    name="nft_burn",
    family="nft",
    table="nft_burn",
    model=NftBurnEvent,
    filter_model=NftBurnFilter,
    filters=FilterSpec(
        Equals("token_account_id", "contract_id"),
        Equals("account_id", "owner_id"),
    ),
    columns=_NFT_COLUMNS + ("owner_id", "token_ids", "memo"),
    tiebreak=("contract_id", "owner_id", "token_ids"),
)

POTLOCK_DONATION = EventVariant(
    name="potlock_donation",
    family="potlock",
    table="potlock_donation",
    model=PotlockDonationEvent,
    filter_model=PotlockDonationFilter,
    filters=FilterSpec(
        Equals("project_id"),
        Equals("donor_id"),
        Equals("referrer_id"),
    ),
    columns=_DONATION_COLUMNS + (
        "donor_id", "total_amount", "message", "donated_at", "project_id",
        "protocol_fee", "referrer_id", "referrer_fee",
    ),
    tiebreak=("donation_id",),
)

POTLOCK_POT_PROJECT_DONATION = EventVariant(
    name="potlock_pot_project_donation",
    family="potlock",
    table="potlock_pot_project_donation",
    model=PotlockPotProjectDonationEvent,
    filter_model=PotlockPotProjectDonationFilter,
    filters=FilterSpec(
        Equals("pot_id"),
        Equals("project_id"),
        Equals("donor_id"),
        Equals("referrer_id"),
    ),
    columns=_DONATION_COLUMNS + (
        "pot_id", "donor_id", "total_amount", "net_amount", "message", "donated_at",
        "project_id", "referrer_id", "referrer_fee", "protocol_fee", "chef_id", "chef_fee",
    ),
    tiebreak=("pot_id", "donation_id"),
)

POTLOCK_POT_DONATION = EventVariant(
    name="potlock_pot_donation",
    family="potlock",
    table="potlock_pot_donation",
    model=PotlockPotDonationEvent,
    filter_model=PotlockPotDonationFilter,
    filters=FilterSpec(
        Equals("pot_id"),
        Equals("donor_id"),
        Equals("referrer_id"),
    ),
    columns=_DONATION_COLUMNS + (
        "pot_id", "donor_id", "total_amount", "net_amount", "message", "donated_at",
        "referrer_id", "referrer_fee", "protocol_fee", "chef_id", "chef_fee",
    ),
    tiebreak=("pot_id", "donation_id"),
)

TRADE_POOL = EventVariant(
    name="trade_pool",
    family="trade",
    table="trade_pool",
    model=TradePoolEvent,
    filter_model=TradePoolFilter,
    filters=FilterSpec(
        Equals("pool_id", "pool"),
        Equals("account_id", "trader"),
    ),
    columns=(
        "trader", "block_height", "transaction_id", "receipt_id",
        "pool", "token_in", "token_out", "amount_in", "amount_out",
    ),
    tiebreak=("pool",),
)

TRADE_SWAP = EventVariant(
    name="trade_swap",
    family="trade",
    table="trade_swap",
    model=TradeSwapEvent,
    filter_model=TradeSwapFilter,
    filters=FilterSpec(
        Equals("account_id", "trader"),
        HasAnyKey("involved_token_account_ids", "balance_changes"),
    ),
    columns=("trader", "block_height", "transaction_id", "receipt_id", "balance_changes"),
    tiebreak=("trader",),
)

TRADE_POOL_CHANGE = EventVariant(
    name="trade_pool_change",
    family="trade",
    table="trade_pool_change",
    model=TradePoolChangeEvent,
    filter_model=TradePoolChangeFilter,
    filters=FilterSpec(Equals("pool_id")),
    columns=("pool_id", "receipt_id", "block_height", "pool"),
    tiebreak=("pool_id",),
)

VARIANTS = {
    v.name: v
    for v in (
        NFT_MINT, NFT_TRANSFER, NFT_BURN,
        POTLOCK_DONATION, POTLOCK_POT_PROJECT_DONATION, POTLOCK_POT_DONATION,
        TRADE_POOL, TRADE_SWAP, TRADE_POOL_CHANGE,
    )
}
