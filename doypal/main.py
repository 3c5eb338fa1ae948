import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from doypal.config import get_settings
from doypal.db import Base, get_engine

from doypal.models.profile import Profile
from doypal.models.event import Event
from doypal.models.template import Template
from doypal.models.template_analysis_run import TemplateAnalysisRun
from doypal.models.reward import Reward
from doypal.models.redemption import Redemption

from doypal.routes.events import router as events_router
from doypal.routes.points import router as points_router
from doypal.routes.profiles import router as profiles_router
from doypal.routes.templates import router as templates_router
from doypal.routes.rewards import router as rewards_router
from doypal.routes.redemptions import router as redemptions_router
from doypal.routes.admin import router as admin_router
from doypal.routes.linking import router as linking_router
from doypal.routes.embeddings import router as embeddings_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Doy Pal")

# ─── CORS ─────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── errors ───────────────────────────────────────────────────────
def jsonable_errors(errors) -> list[dict]:
    # ctx may carry exception instances
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": jsonable_errors(errors)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error(request: Request, exc: SQLAlchemyError):
    logger.error("database error", extra={"path": request.url.path}, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Database error"})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.error("unhandled error", extra={"path": request.url.path}, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=get_engine())


app.include_router(events_router)
app.include_router(points_router)
app.include_router(profiles_router)
app.include_router(templates_router)
app.include_router(rewards_router)
app.include_router(redemptions_router)
app.include_router(admin_router)
app.include_router(linking_router)
app.include_router(embeddings_router)


@app.get("/")
def read_root():
    return {"message": "Doy Pal API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8001, reload=True)
