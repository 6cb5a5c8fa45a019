from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.env import env_str
from core.env_utils import load_dotenv_if_available
from core.logging import get_logger, setup_logging
from web import routers

load_dotenv_if_available()
setup_logging()

logger = get_logger(__name__)

app = FastAPI(
    title="TradeCard Membership API",
    description="Membership lookup, checkout proxy and billing portal endpoints.",
    version="0.1.0",
)

origins = [
    origin.strip()
    for origin in (env_str("CORS_ALLOW_ORIGINS", "http://localhost:3000") or "").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", summary="Health Check", tags=["Default"])
def health_check():
    """Basic liveness check."""
    return {"status": "ok", "message": "TradeCard Membership API is running."}


@app.get("/healthz", include_in_schema=False)
def cloud_run_health_check():
    """Lightweight health probe for the hosting platform."""
    return {"status": "ok"}


app.include_router(routers.membership.router, prefix="/api")
app.include_router(routers.checkout.router, prefix="/api")
app.include_router(routers.billing_portal.router, prefix="/api")
app.include_router(routers.health.router, prefix="/api")
