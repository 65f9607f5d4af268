from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import bridge, chains, health, portfolio, preferences, prices, wallet
from .config import settings
from .errors import (
    BridgeCoreError,
    ConnectRejected,
    ConnectTimeout,
    ExecuteFailed,
    InsufficientGasBalance,
    InvalidRequest,
    QuoteFailed,
    StaleQuote,
    UnsupportedChain,
    WalletNotConnected,
)
from .logging_config import setup_logging

ERROR_STATUS = (
    (InvalidRequest, 422),
    (StaleQuote, 422),
    (UnsupportedChain, 400),
    (WalletNotConnected, 409),
    (ConnectTimeout, 409),
    (ConnectRejected, 409),
    (InsufficientGasBalance, 402),
    (QuoteFailed, 502),
    (ExecuteFailed, 502),
)


def status_for(exc: BridgeCoreError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


setup_logging(settings.log_level)

# Create FastAPI app
app = FastAPI(
    title="HFV Bridge API",
    description="Cross-chain balance discovery, pricing and bridge orchestration",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BridgeCoreError)
async def bridge_core_error_handler(request: Request, exc: BridgeCoreError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(chains.router, tags=["Chains"])
app.include_router(portfolio.router, tags=["Portfolio"])
app.include_router(prices.router, tags=["Prices"])
app.include_router(bridge.router, tags=["Bridge"])
app.include_router(wallet.router, tags=["Wallet"])
app.include_router(preferences.router, tags=["Preferences"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "HFV Bridge API",
        "version": "0.1.0",
        "description": "Cross-chain balance discovery, pricing and bridge orchestration",
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "hfvbridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
