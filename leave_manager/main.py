# leave_manager/main.py
# Leave Manager API: leave requests + work-log submissions behind JWT/RBAC

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse

from leave_manager import config
from leave_manager.results import error_body

logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)

# Create app immediately (safer for circular imports)
app = FastAPI(title="Leave Manager")

# ---------------------------------------------------------------------
# Import routers AFTER app creation
# ---------------------------------------------------------------------
from .auth.login import router as login_router
from .auth.me import router as me_router
from .leaves.router import router as requests_router
from .worklogs.router import router as worklogs_router

from .bootstrap import init_db
from .database import engine, get_db
from .users.models import User

# -------------------- Middleware & static files --------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.CORS_ORIGIN],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)

# uploaded work logs: /static/worklogs/<file>
config.DOC_DIR.mkdir(parents=True, exist_ok=True)
(config.DOC_DIR / config.WORKLOG_SUBDIR).mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(config.DOC_DIR)), name="static")

if config.DEBUG_AUTH:
    @app.middleware("http")
    async def _debug_auth(request: Request, call_next):
        if request.url.path.startswith("/api/"):
            log.info("[DEBUG_AUTH] %s %s Authorization=%s",
                     request.method, request.url.path, request.headers.get("authorization"))
        return await call_next(request)


# -------------------- Error envelope --------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(error_body(str(exc.detail)), status_code=exc.status_code,
                        headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    field_errors = {}
    form_errors = []
    for err in exc.errors():
        # json_invalid locations are byte offsets, not field names
        if err.get("type") == "json_invalid":
            form_errors.append("Request body is not valid JSON")
            continue
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")]
        if not loc:
            form_errors.append(err.get("msg", "invalid"))
            continue
        field_errors.setdefault(loc[0], []).append(err.get("msg", "invalid"))
    return JSONResponse(
        error_body("Validation error", {"fieldErrors": field_errors, "formErrors": form_errors}),
        status_code=400,
    )


# -------------------- Dev endpoints --------------------
@app.get("/")
def home():
    return {
        "message": "Leave Manager API running!",
        "endpoints": {
            "login": "/api/login",
            "me": "/api/me",
            "requests": "/api/requests",
            "worklogs": "/api/worklogs",
        }
    }


@app.get("/__selftest")
def selftest(db: Session = Depends(get_db)):
    users = [
        {"username": u.username, "role": u.role}
        for u in db.query(User).order_by(User.username).all()
    ]
    return {"ok": True, "users": users}


# ------------------- ROUTERS -------------------
app.include_router(login_router)
app.include_router(me_router)
app.include_router(requests_router)
app.include_router(worklogs_router)


# ------------------- STARTUP -------------------
@app.on_event("startup")
def _init_database():
    init_db(engine, seed_users=config.SEED_DEFAULT_USERS)
    log.info("Leave Manager ready (db=%s, docs=%s)", engine.url, config.DOC_DIR)
