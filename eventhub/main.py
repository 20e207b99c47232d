# eventhub/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from eventhub.api.v1.api import api_router
from eventhub.core.exceptions import AdmissionError
from eventhub.core.kafka_producer import close_kafka_singleton
from eventhub.core.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("EventHub registration service starting up...")
    yield
    close_kafka_singleton()
    logger.info("EventHub registration service shutting down...")


app = FastAPI(
    title="EventHub Registration & Matchmaking Service",
    version="1.0.0",
    description="""
        **EventHub Registration & Matchmaking Service**

        ## Features

        * **Admission control**: event and session seats are never oversold,
          even under concurrent registrations
        * **All-or-nothing registration**: an event plus several sessions in one call
        * **Refunds**: idempotent cancellation that gives seats back
        * **Suggested connections**: B2B matchmaking ranked by offer/need fit
        """,
    lifespan=lifespan,
)


async def admission_error_handler(request: Request, exc: AdmissionError) -> JSONResponse:
    """Render typed registration failures with their code and resource."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.state.limiter = limiter

# Register exception handlers
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AdmissionError, admission_error_handler)

origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,  # Allow specific origins
    allow_credentials=True,  # Allow cookies and authorization headers
    allow_methods=["*"],  # Allow all methods (GET, POST, etc.)
    allow_headers=["*"],  # Allow all headers
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "EventHub registration service is running"}
