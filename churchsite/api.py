"""FastAPI application for the church website."""

from __future__ import annotations

import json
import logging
import secrets
from contextlib import asynccontextmanager
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from urllib.parse import urlencode
import tomllib

from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from . import database
from .config import settings
from .errors import (
    AttachmentTooLarge,
    ChurchSiteError,
    NoAttachment,
    NotFound,
    UnsupportedMediaType,
    ValidationError,
)
from .ordering import (
    event_status,
    event_with_status,
    homepage_messages,
    normalize_search_query,
)
from .records import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_EVENT_CATEGORY,
    DEFAULT_PRIORITY,
    DEFAULT_TEXT_COLOR,
    PRIORITY_MAX,
    PRIORITY_MIN,
    AnnouncementRecord,
    EventRecord,
    MessageRecord,
)
from .seed import SAMPLE_MESSAGES
from .storage import init_db
from .store import Stores, build_stores
from .uploads import read_image_upload, read_pdf_upload
from .utils import (
    display_date,
    form_date_value,
    form_datetime_value,
    highlight_text,
    humanize_time,
    localnow,
    parse_form_datetime,
)

# Use uvicorn's error logger so messages get the level prefix in the default log
# format.
logger = logging.getLogger("uvicorn.error")


class LoginRequired(Exception):
    """Raised when an admin route is requested without an authenticated session."""


ERROR_STATUS: dict[type[ChurchSiteError], int] = {
    ValidationError: 400,
    AttachmentTooLarge: 400,
    UnsupportedMediaType: 415,
    NotFound: 404,
    NoAttachment: 404,
}

PLACEHOLDER_SVG = """<svg width="200" height="150" xmlns="http://www.w3.org/2000/svg">
    <rect width="100%" height="100%" fill="#f8f9fa"/>
    <text x="50%" y="50%" font-family="Arial" font-size="14" fill="#6c757d"
          text-anchor="middle" dy=".3em">No Image</text>
</svg>"""


def _load_app_version() -> str:
    """Return the current package version, falling back to pyproject for dev runs."""
    try:
        return pkg_version("churchsite")
    except PackageNotFoundError:
        pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            data = tomllib.loads(pyproject_path.read_text())
            project = data.get("project") or {}
            return str(project.get("version") or "dev")
    return "dev"


APP_VERSION = _load_app_version()

stores = build_stores(
    database.backend,
    public_dir=settings.public_dir,
    initial_messages=SAMPLE_MESSAGES if settings.seed_fallback_messages else (),
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    status = stores.availability()
    logger.info("Durable backend status at startup: %s", status.value)
    yield


app = FastAPI(title="Church Website", version=APP_VERSION, lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=int(settings.session_max_age.total_seconds()),
)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

templates.env.globals["app_version"] = APP_VERSION
templates.env.filters["display_date"] = display_date
templates.env.filters["form_date"] = form_date_value
templates.env.filters["form_datetime"] = form_datetime_value
templates.env.filters["highlight"] = highlight_text
templates.env.filters["relative_time"] = humanize_time


def get_stores() -> Stores:
    return stores


def is_authenticated(request: Request) -> bool:
    return request.session.get("is_authenticated") is True


def require_admin(request: Request) -> None:
    if not is_authenticated(request):
        raise LoginRequired


def _wants_json(request: Request) -> bool:
    path = request.url.path
    if path.endswith("-data") or path == "/active-announcements":
        return True
    if path.startswith(("/unfeature/", "/unfeature-event/")):
        return True
    accept = (request.headers.get("accept") or "").lower()
    return "application/json" in accept and "text/html" not in accept


def _render_error(request: Request, status_code: int, message: str | None):
    context = {
        "request": request,
        "status_code": status_code,
        "error_message": message or "Something went wrong.",
        "is_authenticated": is_authenticated(request),
    }
    return templates.TemplateResponse(
        request, "error.html", context, status_code=status_code
    )


def _status_for(exc: ChurchSiteError) -> int:
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS:
            return ERROR_STATUS[klass]
    return 500


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(url="/admin-login", status_code=303)


@app.exception_handler(ChurchSiteError)
async def church_site_error_handler(request: Request, exc: ChurchSiteError):
    """Surface validation, not-found and upload errors with their own status."""
    status = _status_for(exc)
    if status >= 500:
        logger.error("Unexpected store error on %s %s: %s", request.method, request.url.path, exc)
    if _wants_json(request):
        return JSONResponse({"error": exc.message}, status_code=status)
    return _render_error(request, status, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as friendly pages unless JSON was requested."""
    if _wants_json(request):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)
    detail = exc.detail if isinstance(exc.detail, str) else "Something went wrong."
    if exc.status_code == 404 and detail == "Not Found":
        detail = "Page not found"
    return _render_error(request, exc.status_code, detail)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    if _wants_json(request):
        return JSONResponse({"error": exc.errors()}, status_code=422)
    return _render_error(
        request,
        422,
        "Some of the fields were invalid. Please double-check and try again.",
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Gracefully handle unexpected errors."""
    logger.exception(
        "Unhandled error while processing %s %s", request.method, request.url.path
    )
    if _wants_json(request):
        return JSONResponse({"error": "Something went wrong!"}, status_code=500)
    return _render_error(request, 500, "Something went wrong!")


def _page(request: Request, template: str, db: Stores, **context):
    payload = {
        "request": request,
        "using_durable_store": db.availability().is_available,
        "is_authenticated": is_authenticated(request),
    }
    payload.update(context)
    return templates.TemplateResponse(request, template, payload)


def _redirect(path: str, success: str | None = None) -> RedirectResponse:
    url = f"{path}?{urlencode({'success': success})}" if success else path
    return RedirectResponse(url=url, status_code=303)


def _checked(value: str | None) -> bool:
    return (value or "").strip().lower() in {"on", "true", "1", "yes"}


def _parse_priority(raw: str | None) -> int:
    try:
        value = int(raw or "")
    except ValueError:
        return DEFAULT_PRIORITY
    return value if PRIORITY_MIN <= value <= PRIORITY_MAX else DEFAULT_PRIORITY


def _attachment_response(data: bytes, content_type: str, filename: str) -> Response:
    safe_name = filename.replace('"', "")
    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": f'inline; filename="{safe_name}"'},
    )


# -- public pages ----------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
def homepage(request: Request, db: Stores = Depends(get_stores)):
    now = localnow()
    all_messages = db.messages.find_all("newest")
    events = db.events.find_active(limit=settings.homepage_event_limit)
    announcements = db.announcements.find_visible(
        now, limit=settings.public_announcement_limit
    )
    return _page(
        request,
        "index.html",
        db,
        messages=homepage_messages(all_messages, settings.homepage_message_limit),
        total_messages=len(all_messages),
        featured_events=[(event, event_status(event, now)) for event in events],
        announcements=announcements,
    )


@app.get("/messages", response_class=HTMLResponse)
def messages_page(request: Request, db: Stores = Depends(get_stores)):
    return _page(request, "messages.html", db, messages=db.messages.find_all("featured"))


@app.get("/search")
def search_page(
    request: Request,
    q: str | None = Query(default=None),
    db: Stores = Depends(get_stores),
):
    term = normalize_search_query(q)
    if term is None:
        return RedirectResponse(url="/messages", status_code=302)
    results = db.messages.search(term)
    logger.info("Search for %r returned %s messages", term, len(results))
    return _page(
        request,
        "search.html",
        db,
        messages=results,
        search_query=term,
        results_count=len(results),
    )


@app.get("/events", response_class=HTMLResponse)
def events_page(request: Request, db: Stores = Depends(get_stores)):
    now = localnow()
    events = db.events.find_active()
    return _page(
        request,
        "events.html",
        db,
        events=[(event, event_status(event, now)) for event in events],
    )


@app.get("/active-announcements")
def active_announcements(db: Stores = Depends(get_stores)):
    announcements = db.announcements.find_visible(
        localnow(), limit=settings.public_announcement_limit
    )
    return JSONResponse([a.to_dict() for a in announcements])


@app.get("/pdf/{message_id}")
def message_pdf(message_id: str, db: Stores = Depends(get_stores)):
    try:
        attachment = db.messages.get_attachment(message_id)
    except NoAttachment as exc:
        raise NoAttachment("No PDF available for this message") from exc
    return _attachment_response(
        attachment.data, attachment.content_type, attachment.filename
    )


@app.get("/preview/{message_id}", response_class=HTMLResponse)
def message_preview(message_id: str, request: Request, db: Stores = Depends(get_stores)):
    message = db.messages.find_by_id(message_id)
    filename = message.pdf_file.filename if message.pdf_file else "document.pdf"
    return _page(
        request,
        "pdf_preview.html",
        db,
        message=message,
        filename=filename,
        file_path=f"/pdf/{message_id}",
    )


@app.get("/event-image/{event_id}")
def event_image(event_id: str, db: Stores = Depends(get_stores)):
    try:
        attachment = db.events.get_attachment(event_id)
    except (NotFound, NoAttachment) as exc:
        raise NotFound("Event image") from exc
    return Response(content=attachment.data, media_type=attachment.content_type)


@app.get("/announcement-image/{announcement_id}")
def announcement_image(announcement_id: str, db: Stores = Depends(get_stores)):
    try:
        attachment = db.announcements.get_attachment(announcement_id)
    except (NotFound, NoAttachment):
        return Response(content=PLACEHOLDER_SVG, media_type="image/svg+xml")
    return Response(
        content=attachment.data, media_type=attachment.content_type or "image/jpeg"
    )


# -- session ---------------------------------------------------------------


@app.get("/admin-login", response_class=HTMLResponse)
def admin_login_page(request: Request):
    if is_authenticated(request):
        return RedirectResponse(url="/admin", status_code=303)
    return templates.TemplateResponse(
        request, "admin_login.html", {"request": request, "error": None}
    )


@app.post("/admin-login")
def admin_login(
    request: Request,
    user_id: str = Form("", alias="userId"),
    password: str = Form(""),
):
    user_ok = secrets.compare_digest(user_id.encode(), settings.admin_user.encode())
    password_ok = secrets.compare_digest(
        password.encode(), settings.admin_password.encode()
    )
    if user_ok and password_ok:
        request.session["is_authenticated"] = True
        logger.info("Admin logged in")
        return RedirectResponse(url="/admin", status_code=303)
    logger.warning("Failed admin login attempt")
    return templates.TemplateResponse(
        request,
        "admin_login.html",
        {"request": request, "error": "Invalid password"},
        status_code=401,
    )


@app.get("/admin-logout")
def admin_logout(request: Request):
    request.session.clear()
    logger.info("Admin logged out")
    return RedirectResponse(url="/", status_code=303)


# -- admin: messages -------------------------------------------------------


@app.get("/admin", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
def admin_dashboard(
    request: Request,
    success: str | None = Query(default=None),
    db: Stores = Depends(get_stores),
):
    return _page(
        request,
        "admin.html",
        db,
        messages=db.messages.find_all("newest"),
        success=success,
        search_query=None,
    )


@app.get("/admin-search", dependencies=[Depends(require_admin)])
def admin_search(
    request: Request,
    q: str | None = Query(default=None),
    db: Stores = Depends(get_stores),
):
    term = normalize_search_query(q)
    if term is None:
        return RedirectResponse(url="/admin", status_code=302)
    results = db.messages.search(term)
    return _page(
        request,
        "admin.html",
        db,
        messages=results,
        success=None,
        search_query=term,
        results_count=len(results),
    )


@app.post("/upload", dependencies=[Depends(require_admin)])
def upload_message(
    title: str | None = Form(None),
    code: str | None = Form(None),
    date: str | None = Form(None),
    author: str | None = Form(None),
    description: str | None = Form(None),
    message_file: UploadFile | None = File(None, alias="messageFile"),
    db: Stores = Depends(get_stores),
):
    record = MessageRecord(
        title=title or "",
        code=code or "",
        date=parse_form_datetime(date, field="date"),
        author=author or "",
        description=description or "",
    )
    attachment = read_pdf_upload(message_file, limit_bytes=settings.max_pdf_bytes)
    created = db.messages.create(replace(record, pdf_file=attachment))
    logger.info("Admin uploaded message %s: %s", created.id, created.title)
    return _redirect("/admin", "Message uploaded successfully")


@app.get("/edit/{message_id}", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
def edit_message_page(message_id: str, request: Request, db: Stores = Depends(get_stores)):
    message = db.messages.find_by_id(message_id)
    return _page(request, "edit_message.html", db, message=message)


@app.post("/update/{message_id}", dependencies=[Depends(require_admin)])
def update_message(
    message_id: str,
    title: str | None = Form(None),
    code: str | None = Form(None),
    date: str | None = Form(None),
    author: str | None = Form(None),
    description: str | None = Form(None),
    remove_file: str | None = Form(None, alias="removeFile"),
    message_file: UploadFile | None = File(None, alias="messageFile"),
    db: Stores = Depends(get_stores),
):
    patch = {
        "title": title or "",
        "code": code or "",
        "date": parse_form_datetime(date, field="date"),
        "author": author or "",
        "description": description or "",
    }
    remove = _checked(remove_file)
    attachment = None if remove else read_pdf_upload(
        message_file, limit_bytes=settings.max_pdf_bytes
    )
    db.messages.update(
        message_id, patch, new_attachment=attachment, remove_attachment=remove
    )
    return _redirect("/admin", "Message updated successfully")


@app.post("/featured/{message_id}", dependencies=[Depends(require_admin)])
def feature_message(message_id: str, db: Stores = Depends(get_stores)):
    db.messages.set_featured(message_id)
    return _redirect("/admin", "Message set as featured successfully")


@app.post("/unfeature/{message_id}", dependencies=[Depends(require_admin)])
def unfeature_message(message_id: str, db: Stores = Depends(get_stores)):
    try:
        db.messages.unfeature(message_id)
    except NotFound:
        return JSONResponse({"error": "Message not found"}, status_code=404)
    return JSONResponse({"success": True})


@app.post("/delete/{message_id}", dependencies=[Depends(require_admin)])
def delete_message(message_id: str, db: Stores = Depends(get_stores)):
    db.messages.delete(message_id)
    return _redirect("/admin", "Message deleted successfully")


@app.get("/messages-data", dependencies=[Depends(require_admin)])
def messages_data(db: Stores = Depends(get_stores)):
    return JSONResponse([m.to_dict() for m in db.messages.find_all("newest")])


# -- admin: events ---------------------------------------------------------


@app.get("/admin-events", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
def admin_events(
    request: Request,
    success: str | None = Query(default=None),
    db: Stores = Depends(get_stores),
):
    now = localnow()
    events = db.events.find_all("newest")
    return _page(
        request,
        "admin_events.html",
        db,
        events=[(event, event_status(event, now)) for event in events],
        success=success,
    )


@app.post("/upload-event", dependencies=[Depends(require_admin)])
def upload_event(
    title: str | None = Form(None),
    date: str | None = Form(None),
    end_date: str | None = Form(None, alias="endDate"),
    venue: str | None = Form(None),
    description: str | None = Form(None),
    link: str | None = Form(None),
    category: str | None = Form(None),
    featured: str | None = Form(None),
    event_image: UploadFile | None = File(None, alias="eventImage"),
    db: Stores = Depends(get_stores),
):
    record = EventRecord(
        title=title or "",
        date=parse_form_datetime(date, field="date"),
        end_date=parse_form_datetime(end_date, field="end date"),
        venue=venue or "",
        description=description or "",
        link=link or "",
        category=(category or "").strip() or DEFAULT_EVENT_CATEGORY,
        featured=_checked(featured),
    )
    image = read_image_upload(event_image, limit_bytes=settings.max_image_bytes)
    created = db.events.create(replace(record, image_file=image))
    logger.info("Admin uploaded event %s: %s", created.id, created.title)
    return _redirect("/admin-events", "Event uploaded successfully")


@app.get("/edit-event/{event_id}", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
def edit_event_page(event_id: str, request: Request, db: Stores = Depends(get_stores)):
    event = db.events.find_by_id(event_id)
    return _page(
        request,
        "edit_event.html",
        db,
        event=event,
        status=event_status(event, localnow()),
    )


@app.post("/update-event/{event_id}", dependencies=[Depends(require_admin)])
def update_event(
    event_id: str,
    title: str | None = Form(None),
    date: str | None = Form(None),
    end_date: str | None = Form(None, alias="endDate"),
    venue: str | None = Form(None),
    description: str | None = Form(None),
    link: str | None = Form(None),
    category: str | None = Form(None),
    featured: str | None = Form(None),
    remove_featured: str | None = Form(None, alias="removeFeatured"),
    remove_image: str | None = Form(None, alias="removeImage"),
    event_image: UploadFile | None = File(None, alias="eventImage"),
    db: Stores = Depends(get_stores),
):
    patch = {
        "title": title or "",
        "date": parse_form_datetime(date, field="date"),
        "end_date": parse_form_datetime(end_date, field="end date"),
        "venue": venue or "",
        "description": description or "",
        "link": link or "",
        "featured": _checked(featured) and not _checked(remove_featured),
    }
    if category is not None:
        patch["category"] = category.strip() or DEFAULT_EVENT_CATEGORY
    remove = _checked(remove_image)
    image = None if remove else read_image_upload(
        event_image, limit_bytes=settings.max_image_bytes
    )
    db.events.update(event_id, patch, new_attachment=image, remove_attachment=remove)
    return _redirect("/admin-events", "Event updated successfully")


@app.post("/unfeature-event/{event_id}", dependencies=[Depends(require_admin)])
def unfeature_event(event_id: str, db: Stores = Depends(get_stores)):
    try:
        db.events.unfeature(event_id)
    except NotFound:
        return JSONResponse({"error": "Event not found"}, status_code=404)
    return JSONResponse({"success": True})


@app.post("/delete-event/{event_id}", dependencies=[Depends(require_admin)])
def delete_event(event_id: str, db: Stores = Depends(get_stores)):
    db.events.delete(event_id)
    return _redirect("/admin-events", "Event deleted successfully")


@app.get("/events-data", dependencies=[Depends(require_admin)])
def events_data(db: Stores = Depends(get_stores)):
    now = localnow()
    return JSONResponse(
        [event_with_status(event, now) for event in db.events.find_all("soonest")]
    )


# -- admin: announcements --------------------------------------------------


@app.get(
    "/admin-announcements",
    response_class=HTMLResponse,
    dependencies=[Depends(require_admin)],
)
def admin_announcements(
    request: Request,
    success: str | None = Query(default=None),
    db: Stores = Depends(get_stores),
):
    return _page(
        request,
        "admin_announcements.html",
        db,
        announcements=db.announcements.find_all(),
        now=localnow(),
        success=success,
    )


@app.get(
    "/create-announcement",
    response_class=HTMLResponse,
    dependencies=[Depends(require_admin)],
)
def create_announcement_page(request: Request, db: Stores = Depends(get_stores)):
    return _page(request, "create_announcement.html", db)


def _announcement_fields(
    *,
    title: str | None,
    content: str | None,
    priority: str | None,
    announcement_type: str | None,
    background_color: str | None,
    text_color: str | None,
    featured: str | None,
    expires_at: str | None,
) -> dict:
    return {
        "title": title or "",
        "content": content or "",
        "priority": _parse_priority(priority),
        "type": (announcement_type or "").strip() or "announcement",
        "background_color": (background_color or "").strip() or DEFAULT_BACKGROUND_COLOR,
        "text_color": (text_color or "").strip() or DEFAULT_TEXT_COLOR,
        "featured": _checked(featured),
        "expires_at": parse_form_datetime(expires_at, field="expiry date"),
    }


@app.post("/create-announcement", dependencies=[Depends(require_admin)])
def create_announcement(
    title: str | None = Form(None),
    content: str | None = Form(None),
    priority: str | None = Form(None),
    announcement_type: str | None = Form(None, alias="type"),
    background_color: str | None = Form(None, alias="backgroundColor"),
    text_color: str | None = Form(None, alias="textColor"),
    featured: str | None = Form(None),
    expires_at: str | None = Form(None, alias="expiresAt"),
    announcement_image: UploadFile | None = File(None, alias="announcementImage"),
    db: Stores = Depends(get_stores),
):
    record = AnnouncementRecord(
        **_announcement_fields(
            title=title,
            content=content,
            priority=priority,
            announcement_type=announcement_type,
            background_color=background_color,
            text_color=text_color,
            featured=featured,
            expires_at=expires_at,
        )
    )
    image = read_image_upload(announcement_image, limit_bytes=settings.max_image_bytes)
    created = db.announcements.create(replace(record, image_file=image))
    logger.info("Admin created announcement %s: %s", created.id, created.title)
    return _redirect("/admin-announcements", "Announcement created successfully")


@app.get(
    "/edit-announcement/{announcement_id}",
    response_class=HTMLResponse,
    dependencies=[Depends(require_admin)],
)
def edit_announcement_page(
    announcement_id: str, request: Request, db: Stores = Depends(get_stores)
):
    announcement = db.announcements.find_by_id(announcement_id)
    return _page(
        request,
        "edit_announcement.html",
        db,
        announcement=announcement,
        announcement_data=json.dumps(announcement.to_dict()),
    )


@app.post("/update-announcement/{announcement_id}", dependencies=[Depends(require_admin)])
def update_announcement(
    announcement_id: str,
    title: str | None = Form(None),
    content: str | None = Form(None),
    priority: str | None = Form(None),
    announcement_type: str | None = Form(None, alias="type"),
    background_color: str | None = Form(None, alias="backgroundColor"),
    text_color: str | None = Form(None, alias="textColor"),
    featured: str | None = Form(None),
    active: str | None = Form(None),
    expires_at: str | None = Form(None, alias="expiresAt"),
    remove_image: str | None = Form(None, alias="removeImage"),
    announcement_image: UploadFile | None = File(None, alias="announcementImage"),
    db: Stores = Depends(get_stores),
):
    patch = _announcement_fields(
        title=title,
        content=content,
        priority=priority,
        announcement_type=announcement_type,
        background_color=background_color,
        text_color=text_color,
        featured=featured,
        expires_at=expires_at,
    )
    patch["active"] = _checked(active)
    remove = _checked(remove_image)
    image = None if remove else read_image_upload(
        announcement_image, limit_bytes=settings.max_image_bytes
    )
    db.announcements.update(
        announcement_id, patch, new_attachment=image, remove_attachment=remove
    )
    return _redirect("/admin-announcements", "Announcement updated successfully")


@app.post("/delete-announcement/{announcement_id}", dependencies=[Depends(require_admin)])
def delete_announcement(announcement_id: str, db: Stores = Depends(get_stores)):
    db.announcements.delete(announcement_id)
    return _redirect("/admin-announcements", "Announcement deleted successfully")


@app.post("/toggle-announcement/{announcement_id}", dependencies=[Depends(require_admin)])
def toggle_announcement(announcement_id: str, db: Stores = Depends(get_stores)):
    db.announcements.toggle_active(announcement_id)
    return _redirect("/admin-announcements", "Announcement status updated")


@app.get("/announcements-data", dependencies=[Depends(require_admin)])
def announcements_data(db: Stores = Depends(get_stores)):
    return JSONResponse([a.to_dict() for a in db.announcements.find_all()])
