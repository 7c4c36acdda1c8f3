from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from .routers.v2 import supply
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded
from ldfi.errors import SupplyError
from ldfi.settings import settings
import logging

logger = logging.getLogger("[API]")

app = FastAPI(redirect_slashes=False)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


limiter = Limiter(key_func=get_remote_address, default_limits=[settings.api_rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(SupplyError)
async def supply_error_handler(request: Request, exc: SupplyError):
    # The message names the failed query and its cause
    logger.error(f"Error on {request.url.path}: [{exc.__class__.__name__}] {exc}")
    return PlainTextResponse(str(exc), status_code=500)


app.include_router(supply.router)
