import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockwatch.api import stocks
from stockwatch.utils.config import config
from stockwatch.utils.errors import ConfigurationError, NotFoundError, UpstreamError
from stockwatch.utils.logger import logger

# -----------------------------------------------------------------------------
# Set up logging
# -----------------------------------------------------------------------------
log_cfg = config.get("logging", {})
handlers = []
if log_cfg.get("log_file"):
    handlers.append(logging.FileHandler(log_cfg["log_file"]))
if log_cfg.get("use_stream_handler", True):
    handlers.append(logging.StreamHandler())
if not handlers:
    handlers.append(logging.StreamHandler())

logging.basicConfig(
    level=log_cfg.get("level", "INFO").upper(),
    format=log_cfg.get(
        "format",
        "%(asctime)s - %(levelname)s - %(module)s - %(message)s"
    ),
    handlers=handlers
)

# -----------------------------------------------------------------------------
# Lifespan: drain outbound requests before closing the HTTP client
# -----------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await stocks.close_market_data_client()
    logger.info("Outbound client closed.")

# -----------------------------------------------------------------------------
# Initialize FastAPI
# -----------------------------------------------------------------------------
app_cfg = config.get("app", {})
app = FastAPI(
    title=app_cfg.get("name", "StockWatch API"),
    version=app_cfg.get("version", "0.1.0"),
    lifespan=lifespan,
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------
allowed_origins = os.getenv("ALLOWED_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Error mapping
# -----------------------------------------------------------------------------
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error(f"❌ Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": exc.message})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})

# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
app.include_router(stocks.router, tags=["Stocks & Watchlist"])


@app.get("/")
async def root():
    return {"message": f"Welcome to {app_cfg.get('name', 'the API')}!"}

# -----------------------------------------------------------------------------
# Startup log
# -----------------------------------------------------------------------------
logging.info(f"✅ {app_cfg.get('name', 'API')} is starting up!")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 3000))
    uvicorn.run(app, host="0.0.0.0", port=port)
