MAX_BLOCKS_PER_REQUEST = 50


class EventsApiError(Exception):
    """Base class for every failure raised while answering an event query."""


class BlocksOutOfRange(EventsApiError):
    def __init__(self, blocks: int):
        self.blocks = blocks
        if blocks > MAX_BLOCKS_PER_REQUEST:
            message = f"Blocks per request must be less or equal to {MAX_BLOCKS_PER_REQUEST}"
        else:
            message = "Blocks per request must be at least 1"
        super().__init__(message)


class BalanceDecodeError(EventsApiError, ValueError):
    """
    Raised when a stored or wire value is not a valid decimal amount.
    Subclasses ValueError so pydantic reports it as a validation failure.
    """


class EventDecodeError(EventsApiError):
    pass


class EventFetchError(EventsApiError):
    pass
