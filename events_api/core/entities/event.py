from pydantic import BaseModel, Field


class BlockEvent(BaseModel):
    """
    Fields shared by every indexed event.
    `timestamp` is the block's ledger time in nanoseconds; all events with the
    same timestamp belong to the same block.
    """
    receipt_id: str
    block_height: int
    timestamp: int = Field(alias="block_timestamp_nanosec")

    class Config:
        frozen = True
        populate_by_name = True


class TransactionEvent(BlockEvent):
    transaction_id: str
