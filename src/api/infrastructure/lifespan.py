"""FastAPI lifespan for hosts of the authorization core.

Hosts pass it to their application so logging is configured before the first
request and the OpenFGA connection pool is released on shutdown::

    app = FastAPI(lifespan=authorization_lifespan)

Hosts with their own lifespan enter this one inside it.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.authorization_dependencies import get_openfga_client
from infrastructure.logging import configure_logging
from infrastructure.settings import get_authorization_settings


@asynccontextmanager
async def authorization_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - structlog configuration at the configured level
    - OpenFGA client lifecycle (created lazily, closed on shutdown)
    """
    configure_logging(get_authorization_settings().log_level)

    yield

    await get_openfga_client().close()
