import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()  # Load environment variables from .env

from isp_billing.data.base import create_tables  # noqa: E402
from isp_billing.domain.exceptions import BillingError  # noqa: E402
from isp_billing.logging_config import setup_logging  # noqa: E402
from isp_billing.presentation.auth_api import router as auth_router  # noqa: E402
from isp_billing.presentation.fees_api import router as fees_router  # noqa: E402
from isp_billing.presentation.payrequests_api import router as payrequests_router  # noqa: E402
from isp_billing.presentation.reports_api import router as reports_router  # noqa: E402
from isp_billing.presentation.user_api import router as users_router  # noqa: E402

setup_logging()
logger = logging.getLogger("isp_billing.main")

create_tables()

app = FastAPI(title="ISP Billing API", version="1.0.0")

cors_origins = os.getenv("CORS_ORIGINS", "")
origins = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    logger.info(
        "%s %s rejected with %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(fees_router)
app.include_router(reports_router)
app.include_router(payrequests_router)
