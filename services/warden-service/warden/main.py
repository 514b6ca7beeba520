from __future__ import annotations

import time
import uuid
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.responses import Response

from motor.motor_asyncio import AsyncIOMotorClient

from . import __version__
from .logger import setup_logging
from .settings import settings
from .errors import (
    ConflictError,
    InvalidInputError,
    InvitationExpired,
    NotFoundError,
    StateViolationError,
    WardenError,
)
from .memory import memory_store
from .dal import ensure_indexes, mongo_store
from .events.rabbit import RabbitPublisher
from .events.notifiers import (
    LoggingInvitationNotifier,
    NoOpContactConfirmationNotifier,
    RabbitContactNotifier,
    RabbitInvitationNotifier,
)
from .services import build_services
from .seeds.seed_authz import seed_authz

from .routers import (
    admin_permissions_router,
    admin_roles_router,
    admin_users_router,
    health_router,
    invitation_router,
    me_router,
)

setup_logging(settings.LOG_LEVEL)
log = logging.getLogger("warden")

app = FastAPI(
    title="Warden Service (Identity / Access)",
    version=__version__,
    default_response_class=ORJSONResponse,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    start = time.time()

    log.info(
        "REQ rid=%s method=%s path=%s client=%s",
        rid,
        request.method,
        request.url.path,
        request.client.host if request.client else None,
    )

    try:
        resp: Response = await call_next(request)
        dur_ms = int((time.time() - start) * 1000)
        log.info("RES rid=%s status=%s dur_ms=%s path=%s", rid, resp.status_code, dur_ms, request.url.path)
        resp.headers["x-request-id"] = rid
        return resp
    except Exception:
        dur_ms = int((time.time() - start) * 1000)
        log.exception("ERR rid=%s dur_ms=%s path=%s", rid, dur_ms, request.url.path)
        raise


def status_for(exc: WardenError) -> int:
    if isinstance(exc, InvitationExpired):
        return 410
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (ConflictError, StateViolationError)):
        return 409
    if isinstance(exc, InvalidInputError):
        return 400
    return 500


@app.exception_handler(WardenError)
async def warden_error_handler(request: Request, exc: WardenError):
    status = status_for(exc)
    log.info("domain error path=%s status=%s error=%s detail=%s", request.url.path, status, type(exc).__name__, exc)
    return ORJSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


@app.on_event("startup")
async def startup():
    if getattr(app.state, "services", None) is not None:
        # already wired (tests install their own services)
        return

    log.info(
        "startup begin store=%s notifier=%s provisioning=%s",
        settings.STORE,
        settings.NOTIFIER,
        settings.PROVISIONING_POLICY,
    )

    if settings.STORE == "mongo":
        client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
        db = client[settings.MONGO_DB]
        app.state.mongo_client = client
        app.state.mongo_db = db
        store = mongo_store(db)
        await ensure_indexes(store)
    else:
        store = memory_store()

    contact_notifier = None
    if settings.NOTIFIER == "rabbit":
        if not settings.RABBITMQ_URI:
            raise RuntimeError("WARDEN_RABBITMQ_URI is required when WARDEN_NOTIFIER=rabbit")
        publisher = RabbitPublisher(settings.RABBITMQ_URI, settings.RABBITMQ_EXCHANGE, settings.EVENTS_ORG)
        app.state.publisher = publisher
        invitation_notifier = RabbitInvitationNotifier(publisher, settings.INVITATION_BASE_URL)
        if settings.NOTIFY_ON_CONTACT_ADD:
            contact_notifier = RabbitContactNotifier(publisher)
    else:
        invitation_notifier = LoggingInvitationNotifier(settings.INVITATION_BASE_URL)
        if settings.NOTIFY_ON_CONTACT_ADD:
            contact_notifier = NoOpContactConfirmationNotifier()

    app.state.store = store
    app.state.services = build_services(
        store,
        invitation_notifier=invitation_notifier,
        contact_notifier=contact_notifier,
        provisioning_policy=settings.PROVISIONING_POLICY,
        ttl_hours=settings.INVITATION_TTL_HOURS,
        require_verified_email=settings.REQUIRE_VERIFIED_EMAIL,
        trust_issuer_verification=settings.TRUST_ISSUER_VERIFICATION,
    )
    await seed_authz(
        app.state.services,
        admin_issuer=settings.BOOTSTRAP_ADMIN_ISSUER,
        admin_subject=settings.BOOTSTRAP_ADMIN_SUBJECT,
    )

    log.info("startup complete")


@app.on_event("shutdown")
async def shutdown():
    p = getattr(app.state, "publisher", None)
    if p:
        await p.close()
    c = getattr(app.state, "mongo_client", None)
    if c:
        c.close()


app.include_router(health_router)
app.include_router(invitation_router, prefix=settings.MOUNT_POINT)
app.include_router(admin_roles_router, prefix=settings.MOUNT_POINT)
app.include_router(admin_permissions_router, prefix=settings.MOUNT_POINT)
app.include_router(admin_users_router, prefix=settings.MOUNT_POINT)
app.include_router(me_router, prefix=settings.MOUNT_POINT)


if __name__ == "__main__":
    uvicorn.run("warden.main:app", host="0.0.0.0", port=settings.PORT)
