import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Annotated, AsyncGenerator, Awaitable, Callable

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.dependencies import get_quote_client
from config import config
from services.coinmarketcap_client import CoinMarketCapClient
from services.upstream_errors import UpstreamError

logger = logging.getLogger(__name__)


class PriceResponse(BaseModel):
    price: float
    change: float


class ErrorResponse(BaseModel):
    error: str
    details: str


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = config()
    if not settings.coinmarketcap_api_key:
        msg = "Missing CoinMarketCap API key in environment variables"
        raise RuntimeError(msg)
    fastapi_app.state.quote_client = CoinMarketCapClient(
        api_key=settings.coinmarketcap_api_key,
        base_url=settings.coinmarketcap_base_url,
        timeout=settings.request_timeout,
    )
    yield


app = FastAPI(lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])


@app.middleware("http")
async def log_process_time(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    start_time = perf_counter()
    response = await call_next(request)
    process_time = perf_counter() - start_time
    logger.info("Request time: %s %s: %.4fs", request.method, request.url, process_time)
    return response


@app.get("/api/crypto/price", response_model=PriceResponse, responses={500: {"model": ErrorResponse}})
def get_price(client: Annotated[CoinMarketCapClient, Depends(get_quote_client)]) -> PriceResponse | JSONResponse:
    try:
        quote = client.get_latest_quote()
    except UpstreamError as exc:
        logger.error("Failed to fetch price data: %s", exc)
        body = ErrorResponse(error="Failed to fetch price data", details=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump())
    return PriceResponse(price=float(quote.price), change=float(quote.percent_change_24h))
