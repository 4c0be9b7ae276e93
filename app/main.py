import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.schemas.common import ErrorResponse
from app.services.fee import InvalidInputError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Fee schedule: booking {settings.normal_booking_rate}/{settings.urgent_booking_rate}, "
        f"professional {settings.professional_service_rate}, transfer {settings.fixed_transfer_cost} {settings.currency}"
    )
    yield


app = FastAPI(
    title="CareStint Fees API",
    description="Booking fees, platform fees, professional payouts, cancellation and settlement figures for CareStint stints.",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="invalid_input", detail=str(exc)).model_dump(),
    )


from app.routes import fees, settlements  # noqa: E402

app.include_router(fees.router, prefix="/v1/fees", tags=["Fees"])
app.include_router(settlements.router, prefix="/v1/settlements", tags=["Settlements"])


@app.get("/health")
async def health():
    return {"status": "ok"}
