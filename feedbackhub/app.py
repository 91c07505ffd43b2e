# feedbackhub/app.py
import os
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional

import anyio.to_thread
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response, PlainTextResponse
from fastapi.templating import Jinja2Templates

from feedbackhub import config
from feedbackhub import monitoring
from feedbackhub.errors import ConstraintViolation, NotFound, Unavailable, ValidationError
from feedbackhub.links import build_link
from feedbackhub.store import FeedbackStore

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")
templates = Jinja2Templates(directory=TEMPLATES_DIR)

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_store(request: Request) -> FeedbackStore:
    return request.app.state.store


async def read_form(request: Request) -> Dict[str, str]:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def require_fields(form: Dict[str, str], *names: str) -> Dict[str, str]:
    """Presence check only; empty strings are accepted."""
    missing = [name for name in names if name not in form]
    if missing:
        raise ValidationError(missing)
    return {name: form[name] for name in names}


def _error_page(request: Request, status_code: int, title: str, message: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "error.html", {"title": title, "message": message}, status_code=status_code
    )


# ---------------------------------------------------------------------------
# Admin pages
# ---------------------------------------------------------------------------
@router.get("/")
def index():
    return RedirectResponse("/admin", status_code=303)


@router.get("/admin", response_class=HTMLResponse)
def admin_list(request: Request, store: FeedbackStore = Depends(get_store)):
    prompts = store.list_prompts()
    counts = store.feedback_counts()
    return templates.TemplateResponse(request, "admin_list.html", {"prompts": prompts, "counts": counts})


@router.get("/admin/new", response_class=HTMLResponse)
def admin_new_form(request: Request):
    return templates.TemplateResponse(request, "admin_new.html", {})


@router.post("/admin/new")
def admin_new_submit(
    request: Request,
    form: Dict[str, str] = Depends(read_form),
    store: FeedbackStore = Depends(get_store),
):
    try:
        fields = require_fields(form, "title", "description")
    except ValidationError as e:
        monitoring.logger.info("Rejected prompt form", extra={"missing": e.missing})
        return templates.TemplateResponse(
            request,
            "admin_new.html",
            {"error": str(e), "title": form.get("title"), "description": form.get("description")},
            status_code=400,
        )
    prompt = store.create_prompt(fields["title"], fields["description"])
    monitoring.inc_prompt_created()
    monitoring.logger.info("Prompt created", extra={"prompt_id": prompt.id})
    return RedirectResponse(f"/admin/prompt/{prompt.id}", status_code=303)


@router.get("/admin/prompt/{prompt_id}", response_class=HTMLResponse)
def admin_detail(request: Request, prompt_id: str, store: FeedbackStore = Depends(get_store)):
    prompt = store.get_prompt(prompt_id)
    feedback_list = store.list_feedback_for_prompt(prompt_id)
    host = request.headers.get("host") or config.PUBLIC_HOST
    return templates.TemplateResponse(
        request,
        "admin_detail.html",
        {"prompt": prompt, "feedback_list": feedback_list, "feedback_url": build_link(host, prompt_id)},
    )


# ---------------------------------------------------------------------------
# Public feedback pages
# ---------------------------------------------------------------------------
@router.get("/feedback/{prompt_id}", response_class=HTMLResponse)
def feedback_form(request: Request, prompt_id: str, store: FeedbackStore = Depends(get_store)):
    prompt = store.get_prompt(prompt_id)
    return templates.TemplateResponse(request, "feedback_form.html", {"prompt": prompt})


@router.post("/feedback/{prompt_id}", response_class=HTMLResponse)
def feedback_submit(
    request: Request,
    prompt_id: str,
    form: Dict[str, str] = Depends(read_form),
    store: FeedbackStore = Depends(get_store),
):
    prompt = store.get_prompt(prompt_id)
    try:
        fields = require_fields(form, "content")
    except ValidationError as e:
        return templates.TemplateResponse(
            request, "feedback_form.html", {"prompt": prompt, "error": str(e)}, status_code=400
        )
    feedback = store.create_feedback(prompt_id, fields["content"])
    monitoring.inc_feedback_submitted()
    monitoring.logger.info("Feedback submitted", extra={"prompt_id": prompt_id, "feedback_id": feedback.id})
    return templates.TemplateResponse(request, "feedback_success.html", {})


# ---------------------------------------------------------------------------
# Ops
# ---------------------------------------------------------------------------
@router.get("/health")
def health(store: FeedbackStore = Depends(get_store)):
    try:
        store.ping()
    except Unavailable:
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok"}


@router.get("/metrics")
def metrics():
    if not monitoring.PROMETHEUS_ENABLED:
        return PlainTextResponse("Prometheus disabled", status_code=404)
    payload, content_type = monitoring.render_metrics()
    return Response(content=payload, media_type=content_type)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
async def not_found_handler(request: Request, exc: NotFound):
    monitoring.inc_storage_error("not_found")
    return _error_page(request, 404, "Not Found", f"{exc.entity} not found")


async def constraint_violation_handler(request: Request, exc: ConstraintViolation):
    monitoring.inc_storage_error("constraint_violation")
    return _error_page(request, 400, "Bad Request", "The submission could not be stored")


async def unavailable_handler(request: Request, exc: Unavailable):
    monitoring.inc_storage_error("unavailable")
    monitoring.logger.error("Storage unavailable", exc_info=exc, extra={"path": request.url.path})
    return _error_page(request, 500, "Internal Server Error", "Storage is unavailable")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    anyio.to_thread.current_default_thread_limiter().total_tokens = config.WORKER_THREADS
    if app.state.store is None:
        app.state.store = FeedbackStore.from_url(config.DATABASE_URL)
    yield


def create_app(store: Optional[FeedbackStore] = None) -> FastAPI:
    """Build the app. Without an explicit store, one is opened from DATABASE_URL at startup."""
    app = FastAPI(title="Feedback Prompts", lifespan=lifespan)
    app.state.store = store

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        except Exception:
            monitoring.logger.exception("Unhandled exception in request", extra={"path": request.url.path})
            raise
        finally:
            # label by route template so prompt ids don't explode cardinality
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)
            monitoring.observe_request(endpoint, method, status, time.perf_counter() - start)

    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(ConstraintViolation, constraint_violation_handler)
    app.add_exception_handler(Unavailable, unavailable_handler)
    app.include_router(router)
    return app


app = create_app()
