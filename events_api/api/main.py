import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

import psycopg2
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

# --- Imports ---
from events_api.config import Settings
from events_api.core import variants
from events_api.core.entities.donation import (
    PotlockDonationEvent,
    PotlockDonationFilter,
    PotlockPotDonationEvent,
    PotlockPotDonationFilter,
    PotlockPotProjectDonationEvent,
    PotlockPotProjectDonationFilter,
)
from events_api.core.entities.nft import (
    NftBurnEvent,
    NftBurnFilter,
    NftMintEvent,
    NftMintFilter,
    NftTransferEvent,
    NftTransferFilter,
)
from events_api.core.entities.pagination import DEFAULT_BLOCKS_PER_REQUEST, PaginationInfo
from events_api.core.entities.trade import (
    TradePoolChangeEvent,
    TradePoolChangeFilter,
    TradePoolEvent,
    TradePoolFilter,
    TradeSwapEvent,
    TradeSwapFilter,
)
from events_api.core.errors import BlocksOutOfRange, EventDecodeError, EventFetchError
from events_api.core.interfaces.event_store import IEventStore
from events_api.core.services import EventService
from events_api.infrastructure.cache.redis_service import RedisService
from events_api.infrastructure.persistence.postgres_repo import PostgresEventStore

settings = Settings.from_env()

# Setup Logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("EventsApi")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.event_store = None
    if settings.database_url:
        try:
            app.state.event_store = PostgresEventStore(
                settings.database_url,
                min_conn=settings.db_pool_min,
                max_conn=settings.db_pool_max,
                statement_timeout_ms=settings.db_statement_timeout_ms,
            )
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to DB: {e}")
    else:
        logger.warning("DATABASE_URL not set. Event queries will fail.")
    app.state.cache = RedisService(settings.redis_url)

    yield

    if app.state.event_store is not None:
        app.state.event_store.close()
    app.state.cache.close()


app = FastAPI(
    title="Events API",
    version="0.1.0",
    description="Block windowed access to indexed NFT, Potlock and trade events",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
    allow_credentials=True,
    max_age=3600,
)


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    client = request.client.host if request.client else "-"
    target = request.url.path + (f"?{request.url.query}" if request.url.query else "")
    size = response.headers.get("content-length", "-")
    logger.info(
        f'{client} "{request.method} {target}" Code: {response.status_code} Size: {size} bytes '
        f'"{request.headers.get("referer", "-")}" "{request.headers.get("user-agent", "-")}" '
        f'{time.perf_counter() - started:.6f}'
    )
    return response


# --- Error Mapping ---

@app.exception_handler(BlocksOutOfRange)
async def blocks_out_of_range(request: Request, exc: BlocksOutOfRange):
    return PlainTextResponse(str(exc), status_code=400)


@app.exception_handler(RequestValidationError)
async def invalid_query(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ())[1:])}: {err.get('msg')}" for err in exc.errors()
    )
    return PlainTextResponse(f"Invalid query parameters: {details}", status_code=400)


@app.exception_handler(EventFetchError)
@app.exception_handler(EventDecodeError)
async def query_failed(request: Request, exc: Exception):
    # Storage details stay in the server log
    return Response(status_code=500)


# --- Dependency Injection ---

def get_event_store(request: Request) -> IEventStore:
    store = getattr(request.app.state, "event_store", None)
    if store is None:
        logger.error("No event store configured")
        raise EventFetchError("Event store unavailable")
    return store


def get_cache(request: Request) -> Optional[RedisService]:
    cache = getattr(request.app.state, "cache", None)
    if cache is None or not cache.enabled:
        return None
    return cache


def get_event_service(
    store: IEventStore = Depends(get_event_store),
    cache: Optional[RedisService] = Depends(get_cache),
) -> EventService:
    return EventService(store, cache, settings.cache_ttl_seconds)


def get_pagination(
    start_block_timestamp_nanosec: int = Query(0, ge=0, description="Inclusive lower bound on block timestamp"),
    blocks: int = Query(DEFAULT_BLOCKS_PER_REQUEST, description="Number of blocks with events to return"),
) -> PaginationInfo:
    return PaginationInfo(start_block_timestamp_nanosec=start_block_timestamp_nanosec, blocks=blocks).check()


# --- Endpoints ---

@app.get("/health")
async def health(request: Request):
    store = getattr(request.app.state, "event_store", None)
    return {"status": "healthy", "store": store.describe() if store else "unconfigured"}


nft = APIRouter(prefix="/nft", tags=["nft"])


@nft.get("/nft_mint", response_model=List[NftMintEvent])
async def nft_mint(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: NftMintFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.NFT_MINT, pagination, filters.model_dump())


@nft.get("/nft_transfer", response_model=List[NftTransferEvent])
async def nft_transfer(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: NftTransferFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.NFT_TRANSFER, pagination, filters.model_dump())


@nft.get("/nft_burn", response_model=List[NftBurnEvent])
async def nft_burn(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: NftBurnFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.NFT_BURN, pagination, filters.model_dump())


potlock = APIRouter(prefix="/potlock", tags=["potlock"])


@potlock.get("/potlock_donation", response_model=List[PotlockDonationEvent])
async def potlock_donation(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: PotlockDonationFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.POTLOCK_DONATION, pagination, filters.model_dump())


@potlock.get("/potlock_pot_project_donation", response_model=List[PotlockPotProjectDonationEvent])
async def potlock_pot_project_donation(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: PotlockPotProjectDonationFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.POTLOCK_POT_PROJECT_DONATION, pagination, filters.model_dump())


@potlock.get("/potlock_pot_donation", response_model=List[PotlockPotDonationEvent])
async def potlock_pot_donation(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: PotlockPotDonationFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.POTLOCK_POT_DONATION, pagination, filters.model_dump())


trade = APIRouter(prefix="/trade", tags=["trade"])


@trade.get("/trade_pool", response_model=List[TradePoolEvent])
async def trade_pool(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: TradePoolFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.TRADE_POOL, pagination, filters.model_dump())


@trade.get("/trade_swap", response_model=List[TradeSwapEvent])
async def trade_swap(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: TradeSwapFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.TRADE_SWAP, pagination, filters.model_dump())


@trade.get("/trade_pool_change", response_model=List[TradePoolChangeEvent])
async def trade_pool_change(
    pagination: PaginationInfo = Depends(get_pagination),
    filters: TradePoolChangeFilter = Depends(),
    service: EventService = Depends(get_event_service),
):
    return await service.fetch(variants.TRADE_POOL_CHANGE, pagination, filters.model_dump())


api_v0 = APIRouter(prefix="/v0")
api_v0.include_router(nft)
api_v0.include_router(potlock)
api_v0.include_router(trade)
app.include_router(api_v0)
