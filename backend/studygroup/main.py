"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the study-group account
settings backend. Controllers are intentionally thin: they accept
requests, delegate to services, and return JSON responses.

Endpoints implemented:
- POST /auth/register
- POST /auth/login
- GET|POST /settings/profile
- POST /settings/password
- GET|POST /settings/notifications
- GET|POST /settings/account
- GET /settings/tags, POST /settings/tags/add, POST /settings/tags/remove
- GET /settings/zones, POST /settings/zones/add, POST /settings/zones/remove
- GET /health
"""

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import json
import logging
import time
import uuid
from .database import engine, create_db_and_tables, get_session
from . import services, models
from .auth import get_current_account
from .config import settings
from .exceptions import NotFoundError, ValidationError
from .schemas import (
    LoginIn,
    MessageOut,
    NicknameForm,
    Notifications,
    PasswordForm,
    ProfileForm,
    RegisterIn,
    TagForm,
    TagsOut,
    TokenOut,
    ZoneForm,
    ZonesOut,
)

app = FastAPI(title="Study Group Account Settings API")
logger = logging.getLogger("studygroup.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS keeps local frontends working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()
with Session(engine) as _session:
    services.ZoneService(_session).init_zone_data(settings.ZONES_CSV)


def _request_fields(request: Request, req_id: str, started: float) -> dict:
    return {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed %s", json.dumps(_request_fields(request, req_id, started), ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    fields = _request_fields(request, req_id, started)
    fields["status_code"] = response.status_code
    logger.info("request_done %s", json.dumps(fields, ensure_ascii=True))
    return response


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Rejected form fields become a 400 with one entry per field."""
    logger.info("validation_failed path=%s fields=%s", request.url.path, exc.codes())
    return JSONResponse(
        status_code=400,
        content={"detail": "validation failed", "errors": [e.to_dict() for e in exc.errors]},
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Unknown tag/zone references are client input errors."""
    logger.info("reference_not_found path=%s kind=%s key=%s", request.url.path, exc.kind, exc.key)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.post('/auth/register')
def register(payload: RegisterIn, db: Session = Depends(get_session)):
    """Register a new account.

    Duplicate nicknames or emails are rejected with field errors.
    """
    account = services.AuthService(db).register(payload.nickname, payload.email, payload.password)
    return {'id': account.id, 'nickname': account.nickname}


@app.post('/auth/login', response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_session)):
    """Authenticate with nickname or email and return a JWT token.

    The returned token contains `account_id` and `nickname` and is signed
    using the configured JWT secret.
    """
    token = services.AuthService(db).authenticate(payload.login, payload.password)
    if not token:
        raise HTTPException(status_code=401, detail='invalid credentials')
    return {'access_token': token}


@app.get('/settings/profile', response_model=ProfileForm)
def get_profile(account: models.Account = Depends(get_current_account)):
    return ProfileForm.from_account(account)


@app.post('/settings/profile', response_model=MessageOut)
def update_profile(form: ProfileForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    """Overwrite the profile fields; rejected as a whole if any field is invalid."""
    services.SettingsService(db).update_profile(account, form)
    return {'message': 'profile updated'}


@app.post('/settings/password', response_model=MessageOut)
def update_password(form: PasswordForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    services.SettingsService(db).update_password(account, form)
    return {'message': 'password updated'}


@app.get('/settings/notifications', response_model=Notifications)
def get_notifications(db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    return services.SettingsService(db).notifications_of(account)


@app.post('/settings/notifications', response_model=MessageOut)
def update_notifications(form: Notifications, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    services.SettingsService(db).update_notifications(account, form)
    return {'message': 'notification settings updated'}


@app.get('/settings/account', response_model=NicknameForm)
def get_account(account: models.Account = Depends(get_current_account)):
    return {'nickname': account.nickname}


@app.post('/settings/account')
def update_account(form: NicknameForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    """Change the nickname.

    A fresh token is returned since the previous one carries the old
    nickname.
    """
    account = services.SettingsService(db).update_nickname(account, form)
    return {'message': 'nickname updated', 'access_token': services.issue_token(account)}


@app.get('/settings/tags', response_model=TagsOut)
def get_tags(db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    """Tags of the account plus every known tag title as suggestions."""
    return {
        'tags': services.AssociationService(db).tags_of(account),
        'whitelist': services.TagService(db).whitelist(),
    }


@app.post('/settings/tags/add', response_model=TagsOut)
def add_tag(form: TagForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    """Attach a tag, creating it when the title is new."""
    tag = services.TagService(db).resolve_or_create_tag(form.tag_title)
    assoc = services.AssociationService(db)
    assoc.add_tag(account, tag)
    return {'tags': assoc.tags_of(account)}


@app.post('/settings/tags/remove', response_model=TagsOut)
def remove_tag(form: TagForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    """Detach a tag; unknown titles are rejected."""
    tag = services.TagService(db).find_tag(form.tag_title)
    assoc = services.AssociationService(db)
    assoc.remove_tag(account, tag)
    return {'tags': assoc.tags_of(account)}


@app.get('/settings/zones', response_model=ZonesOut)
def get_zones(db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    """Zones of the account plus every known zone as suggestions."""
    return {
        'zones': services.AssociationService(db).zones_of(account),
        'whitelist': services.ZoneService(db).whitelist(),
    }


@app.post('/settings/zones/add', response_model=ZonesOut)
def add_zone(form: ZoneForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    zone = services.ZoneService(db).resolve_zone(form.zone_name)
    assoc = services.AssociationService(db)
    assoc.add_zone(account, zone)
    return {'zones': assoc.zones_of(account)}


@app.post('/settings/zones/remove', response_model=ZonesOut)
def remove_zone(form: ZoneForm, db: Session = Depends(get_session), account: models.Account = Depends(get_current_account)):
    zone = services.ZoneService(db).resolve_zone(form.zone_name)
    assoc = services.AssociationService(db)
    assoc.remove_zone(account, zone)
    return {'zones': assoc.zones_of(account)}


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
