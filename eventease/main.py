import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventease.core.config import AUTO_CREATE_TABLES, CORS_ORIGINS
from eventease.core.errors import EventEaseError
from eventease.core.logging_config import configure_logging
from eventease.database.db import Base, engine
from eventease.models import registry  # noqa: F401
from eventease.routes import admin, auth, bookings, events, invoices, me, social

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="EventEase")

# Create all tables (in production, use migrations such as Alembic)
if AUTO_CREATE_TABLES:
    Base.metadata.create_all(bind=engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EventEaseError)
def handle_domain_error(request: Request, exc: EventEaseError):
    """Render domain errors as a titled notice the client can show as-is."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code.value, "title": exc.title, "detail": exc.message},
        headers=headers,
    )


# Include the routers
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(bookings.router)
app.include_router(social.router)
app.include_router(invoices.router)
app.include_router(me.router)
app.include_router(admin.router)
