"""
HTTP-интерфейс: публичная регистрация и админка.
"""
import logging
import re
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .admin import AdminControls
from .auth import AdminGuard
from .config import get_config
from .constants import CSV_FILENAME, GAME_NUMBERS, MSG_INVALID_PIN, TRUST_COOKIE
from .errors import CorruptStoreError, RegistrationError, UnauthorizedError
from .registration import find_registrant, register, resolve_phone_field
from .store import JsonFileStore, Store

config = get_config()

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


class StripApiPrefixMiddleware:
    """Запросы вида /api/... обслуживаются как /... (serverless-вход)."""

    def __init__(self, app, prefix: str = "/api"):
        self.app = app
        self.prefix = prefix

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            path = scope["path"]
            if path == self.prefix or path.startswith(self.prefix + "/"):
                scope = dict(scope)
                scope["path"] = path[len(self.prefix):] or "/"
                scope["raw_path"] = scope["path"].encode()
                scope["url_prefix"] = self.prefix
        await self.app(scope, receive, send)


def _render(request: Request, name: str, context: dict, status_code: int = 200):
    """Шаблон со ссылками от корня приложения (с учётом /api)."""
    context = {"prefix": request.scope.get("url_prefix", ""), **context}
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def _parse_game(raw) -> int:
    """Целое в начале строки, как parseInt: "3abc" -> 3, "2.5" -> 2, "abc" -> 0."""
    m = _LEADING_INT.match(str(raw or ""))
    return int(m.group(1)) if m else 0


def create_app(store: Store | None = None, guard: AdminGuard | None = None) -> FastAPI:
    store = store or JsonFileStore(config.data_file)
    guard = guard or AdminGuard(config.admin_pin, config.trust_secret, config.trust_max_age)
    controls = AdminControls(store, guard)
    # Ключи формы первой регистрации пишем в лог один раз
    first_request_logged = False

    app = FastAPI(title="Turnlist")
    app.state.store = store
    app.state.guard = guard
    app.add_middleware(StripApiPrefixMiddleware)

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        logger.warning("Unauthorized %s %s", request.method, request.url.path)
        return PlainTextResponse("Unauthorized", status_code=401)

    @app.exception_handler(CorruptStoreError)
    @app.exception_handler(OSError)
    async def store_failure_handler(request: Request, exc: Exception):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc,
                     exc_info=exc)
        return PlainTextResponse("Internal Server Error", status_code=500)

    def trust_token(request: Request) -> str | None:
        return request.cookies.get(TRUST_COOKIE)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request, success: str | None = None, error: str | None = None):
        doc = store.read_document()
        return _render(request, "index.html", {
            "closed": doc.settings.registrations_closed,
            "active_game": doc.settings.active_game,
            "success": success or None,
            "error": error or None,
        })

    @app.post("/register")
    async def register_route(request: Request):
        nonlocal first_request_logged
        form = await request.form()
        raw_phone = resolve_phone_field(form)
        if not first_request_logged:
            logger.debug("Register: body keys %s", list(form.keys()))
            logger.debug("Register: raw phone value %r", raw_phone)
            first_request_logged = True
        try:
            student = register(store, form.get("name"), raw_phone)
        except RegistrationError as e:
            return _redirect("/?error=" + quote(str(e)))
        return _redirect("/registered?id=" + quote(student.id))

    @app.get("/registered", response_class=HTMLResponse)
    def registered(request: Request, id: str = ""):
        student = find_registrant(store, id)
        if student is None:
            return _redirect("/")
        return _render(request, "registered.html", {
            "student": student,
            "active_game": student.game,
        })

    @app.get("/admin", response_class=HTMLResponse)
    def admin_page(request: Request):
        token = trust_token(request)
        if not guard.is_trusted(token):
            return _render(request, "admin_login.html", {"error": None})
        settings, students = controls.overview(token)
        return _render(request, "admin.html", {
            "students": students,
            "closed": settings.registrations_closed,
            "active_game": settings.active_game,
            "games": GAME_NUMBERS,
        })

    @app.post("/admin/login")
    async def admin_login(request: Request):
        form = await request.form()
        if not guard.check_pin(form.get("pin")):
            return _render(
                request, "admin_login.html", {"error": MSG_INVALID_PIN}, status_code=401
            )
        logger.info("Admin: login from %s", request.client.host if request.client else "?")
        response = _redirect("/admin")
        response.set_cookie(
            TRUST_COOKIE,
            guard.issue_trust(),
            path="/",
            httponly=True,
            samesite="lax",
            secure=config.cookie_secure,
        )
        return response

    @app.post("/admin/toggle")
    def admin_toggle(request: Request):
        controls.toggle_registrations(trust_token(request))
        return _redirect("/admin")

    @app.post("/admin/set-game")
    async def admin_set_game(request: Request):
        token = trust_token(request)
        guard.require(token)
        form = await request.form()
        controls.set_active_game(token, _parse_game(form.get("game")))
        return _redirect("/admin")

    @app.get("/admin/export")
    def admin_export(request: Request):
        body = controls.export_csv(trust_token(request))
        return Response(
            content=body,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
        )

    @app.post("/admin/logout")
    def admin_logout(request: Request):
        token = trust_token(request)
        if guard.is_trusted(token):
            controls.logout(token)
        response = _redirect("/admin")
        response.delete_cookie(TRUST_COOKIE, path="/")
        return response

    # Статика (если есть)
    static_path = BASE_DIR / "static"
    if static_path.is_dir():
        app.mount("/static", StaticFiles(directory=str(static_path)), name="static")

    return app


app = create_app()
