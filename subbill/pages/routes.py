"""
Server-rendered pages. Each handler reads the cookie session, calls the same
module services as the JSON API and renders a Jinja2 template. Form posts
redirect back with ?error= / ?notice= for the inline banners.
"""

from fastapi import APIRouter, Depends, Form, HTTPException, Request, UploadFile, File
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from typing import Optional, List
from urllib.parse import urlencode
import logging

from subbill.config import settings
from subbill.config.categories import list_categories, get_category, get_subcategory_options, get_subcategory_label
from subbill.core.dependencies import get_session
from subbill.modules.auth.routes import get_auth_service
from subbill.modules.auth.schemas import LoginRequest, RegisterRequest, AdminRegisterRequest, Session
from subbill.modules.auth.service import AuthService
from subbill.modules.comments.routes import get_comment_service
from subbill.modules.comments.service import CommentService
from subbill.modules.services.features import normalize_features, features_to_text, parse_features
from subbill.modules.services.reactions import ReactionState
from subbill.modules.services.routes import get_catalog_service
from subbill.modules.services.schemas import ServiceUpdate, ServiceCreate
from subbill.modules.services.service import CatalogService

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals["subcategory_label"] = get_subcategory_label

router = APIRouter(include_in_schema=False)

GENERIC_ERROR = "Something went wrong. Please try again."
SESSION_MAX_AGE_SEC = 3600


def render(request: Request, name: str, session: Session, status_code: int = 200, **context) -> HTMLResponse:
    context.setdefault("error", request.query_params.get("error"))
    context.setdefault("notice", request.query_params.get("notice"))
    return templates.TemplateResponse(
        request,
        name,
        {"session": session, "app_name": settings.app_name, "categories": list_categories(), **context},
        status_code=status_code,
    )


def redirect(url: str, **params) -> RedirectResponse:
    params = {k: v for k, v in params.items() if v}
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=303)


def _safe_next(next_url: Optional[str]) -> str:
    """Local path to return to after a form post; anything pointing off-site becomes /"""
    if not next_url or not next_url.startswith("/") or next_url.startswith(("//", "/\\")):
        return "/"
    return next_url


def login_redirect(next_url: str) -> RedirectResponse:
    return redirect("/login", next=next_url, error="Please log in to continue.")


def not_found(request: Request, session: Session, title: str = "Page not found", message: Optional[str] = None) -> HTMLResponse:
    return render(
        request, "not_found.html", session, status_code=404,
        title=title,
        message=message or "The page you requested does not exist or has moved.",
    )


def _set_session_cookie(response: RedirectResponse, access_token: str):
    response.set_cookie(
        settings.session_cookie_name,
        access_token,
        max_age=SESSION_MAX_AGE_SEC,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


async def _read_image(upload: Optional[UploadFile]):
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    if not content:
        return None
    return content, upload.filename, upload.content_type


# Catalog pages

@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    q: Optional[str] = None,
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    if q is not None and q.strip():
        search = catalog.search_services(q)
        services, from_cache = search.results, search.from_cache
    else:
        search = None
        popular = catalog.get_popular_services()
        services, from_cache = popular.services, popular.from_cache
    return render(
        request, "home.html", session,
        query=q or "",
        search=search,
        services=services,
        from_cache=from_cache,
        debounce_ms=settings.search_debounce_ms,
    )


@router.get("/category/{slug}", response_class=HTMLResponse)
async def category_page(
    request: Request,
    slug: str,
    sub: Optional[str] = None,
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    category = get_category(slug)
    if not category:
        return not_found(request, session, title="Category not found",
                         message=f'There is no category called "{slug}".')
    error = None
    try:
        services = catalog.list_services_by_category(category["slug"], sub)
    except HTTPException:
        services, error = [], "Could not load services for this category."
    return render(
        request, "category.html", session,
        category=category,
        selected_subcategory=sub,
        services=services,
        error=error or request.query_params.get("error"),
    )


@router.get("/service/{slug}", response_class=HTMLResponse)
async def service_page(
    request: Request,
    slug: str,
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service),
    comments: CommentService = Depends(get_comment_service)
):
    service = catalog.get_service_by_slug(slug)
    if not service or (service.is_active is False and not session.is_admin):
        return not_found(request, session, title="Service not found",
                         message="The service you requested does not exist or was removed.")

    if catalog.increment_service_views(service.id):
        service.views = (service.views or 0) + 1

    user_rating = catalog.get_user_rating(service.id) if session.is_authenticated else None
    try:
        comment_list = comments.list_comments(service.id, include_inactive=session.is_admin)
    except HTTPException:
        comment_list = []

    return render(
        request, "service.html", session,
        service=service,
        features=normalize_features(service.features),
        features_text=features_to_text(service.features),
        reactions=ReactionState.from_service(service, user_rating),
        comments=comment_list,
        related=catalog.get_related_services(service),
        subcategory_options=get_subcategory_options(service.category),
    )


@router.post("/service/{slug}/comments")
async def post_comment(
    slug: str,
    content: str = Form(""),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service),
    comments: CommentService = Depends(get_comment_service)
):
    if not session.is_authenticated:
        return login_redirect(f"/service/{slug}")
    if not content.strip():
        return redirect(f"/service/{slug}")
    service = catalog.get_service_by_slug(slug)
    if not service:
        return redirect("/", error="Service not found")
    try:
        comments.create_comment(service.id, session.user.id, content)
    except HTTPException as e:
        return redirect(f"/service/{slug}", error=e.detail)
    return redirect(f"/service/{slug}")


def _react(slug: str, reaction: str, rating: Optional[float], session: Session, catalog: CatalogService) -> RedirectResponse:
    """Shared handler for the like / dislike / rate buttons on the detail page"""
    if not session.is_authenticated:
        return login_redirect(f"/service/{slug}")
    service = catalog.get_service_by_slug(slug)
    if not service:
        return redirect("/", error="Service not found")

    state = ReactionState.from_service(service, catalog.get_user_rating(service.id))
    if reaction == "like":
        ok = catalog.like_service(service.id, not state.liked)
    elif reaction == "dislike":
        ok = catalog.dislike_service(service.id, not state.disliked)
    else:
        ok = rating is not None and catalog.rate_service(service.id, rating)
    return redirect(f"/service/{slug}", error=None if ok else GENERIC_ERROR)


@router.post("/service/{slug}/like")
async def like_service(
    slug: str,
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    return _react(slug, "like", None, session, catalog)


@router.post("/service/{slug}/dislike")
async def dislike_service(
    slug: str,
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    return _react(slug, "dislike", None, session, catalog)


@router.post("/service/{slug}/rate")
async def rate_service(
    slug: str,
    rating: Optional[float] = Form(None),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    return _react(slug, "rate", rating, session, catalog)


@router.post("/service/{slug}/edit")
async def edit_service(
    slug: str,
    service_id: str = Form(...),
    title: str = Form(...),
    category: str = Form(...),
    subcategory: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    website: str = Form(""),
    features: str = Form("[]"),
    is_active: bool = Form(False),
    thumbnail: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Admin editor form"""
    if not session.is_admin:
        return redirect(f"/service/{slug}", error="Only admins can edit services.")
    try:
        parsed_features = parse_features(features)
    except ValueError as e:
        return redirect(f"/service/{slug}", error=str(e), edit="1")
    update = ServiceUpdate(
        title=title,
        category=category,
        subcategory=subcategory,
        description=description,
        price=price,
        website=website,
        features=parsed_features,
        is_active=is_active,
    )
    try:
        updated = catalog.edit_service(
            service_id, update,
            thumbnail=await _read_image(thumbnail),
            image=await _read_image(image),
        )
    except HTTPException as e:
        return redirect(f"/service/{slug}", error=e.detail, edit="1")
    return redirect(f"/service/{updated.slug}", notice="Service updated.")


@router.post("/service/{slug}/toggle-active")
async def toggle_service_active(
    slug: str,
    service_id: str = Form(...),
    is_active: bool = Form(...),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    if not session.is_admin:
        return redirect(f"/service/{slug}", error="Only admins can change service status.")
    try:
        catalog.toggle_service_active(service_id, not is_active)
    except HTTPException as e:
        return redirect(f"/service/{slug}", error=e.detail)
    return redirect(f"/service/{slug}", notice="Service activated." if not is_active else "Service deactivated.")


@router.post("/comments/{comment_id}/like")
async def like_comment(
    comment_id: str,
    next: str = Form("/"),
    session: Session = Depends(get_session),
    comments: CommentService = Depends(get_comment_service)
):
    if not session.is_authenticated:
        return login_redirect(_safe_next(next))
    try:
        comments.like_comment(comment_id)
    except HTTPException as e:
        return redirect(_safe_next(next), error=e.detail)
    return redirect(_safe_next(next))


@router.post("/comments/{comment_id}/toggle-active")
async def toggle_comment_active(
    comment_id: str,
    next: str = Form("/"),
    session: Session = Depends(get_session),
    comments: CommentService = Depends(get_comment_service)
):
    if not session.is_admin:
        return redirect(_safe_next(next), error="Only admins can hide or restore comments.")
    try:
        comments.toggle_comment_active(comment_id)
    except HTTPException as e:
        return redirect(_safe_next(next), error=e.detail)
    return redirect(_safe_next(next))


# Auth pages

@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, next: str = "/", session: Session = Depends(get_session)):
    return render(request, "login.html", session, next=_safe_next(next), action="/login", heading="Log in")


@router.post("/login")
async def login(
    email: str = Form(...),
    password: str = Form(...),
    next: str = Form("/"),
    auth: AuthService = Depends(get_auth_service)
):
    try:
        token = auth.login(LoginRequest(email=email, password=password))
    except HTTPException as e:
        return redirect("/login", error=e.detail, next=_safe_next(next))
    except ValueError:
        return redirect("/login", error="Enter a valid email address.", next=_safe_next(next))
    response = redirect(_safe_next(next))
    _set_session_cookie(response, token.access_token)
    return response


@router.get("/signup", response_class=HTMLResponse)
async def signup_page(request: Request, session: Session = Depends(get_session)):
    return render(request, "signup.html", session, action="/signup", heading="Sign up", admin=False)


@router.post("/signup")
async def signup(
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(...),
    auth: AuthService = Depends(get_auth_service)
):
    try:
        result = auth.register(RegisterRequest(email=email, password=password, full_name=full_name))
    except HTTPException as e:
        return redirect("/signup", error=e.detail)
    except ValueError:
        return redirect("/signup", error="Enter a valid email and a password of at least 6 characters.")
    return redirect("/login", notice=result.message)


@router.post("/logout")
async def logout(
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service)
):
    if session.access_token:
        auth.logout(session.access_token)
    response = redirect("/")
    response.delete_cookie(settings.session_cookie_name)
    return response


# Admin pages

@router.get("/admin/login", response_class=HTMLResponse)
async def admin_login_page(request: Request, session: Session = Depends(get_session)):
    return render(request, "login.html", session, next="/admin", action="/admin/login", heading="Admin log in")


@router.post("/admin/login")
async def admin_login(
    email: str = Form(...),
    password: str = Form(...),
    auth: AuthService = Depends(get_auth_service)
):
    try:
        token = auth.admin_login(LoginRequest(email=email, password=password))
    except HTTPException as e:
        return redirect("/admin/login", error=e.detail)
    except ValueError:
        return redirect("/admin/login", error="Enter a valid email address.")
    response = redirect("/admin")
    _set_session_cookie(response, token.access_token)
    return response


@router.get("/admin/signup", response_class=HTMLResponse)
async def admin_signup_page(request: Request, session: Session = Depends(get_session)):
    return render(request, "signup.html", session, action="/admin/signup", heading="Admin sign up", admin=True)


@router.post("/admin/signup")
def admin_signup(
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(...),
    admin_code: str = Form(...),
    auth: AuthService = Depends(get_auth_service)
):
    try:
        result = auth.admin_register(AdminRegisterRequest(
            email=email, password=password, full_name=full_name, admin_code=admin_code
        ))
    except HTTPException as e:
        return redirect("/admin/signup", error=e.detail)
    except ValueError:
        return redirect("/admin/signup", error="Enter a valid email and a password of at least 6 characters.")
    return redirect("/admin/login", notice=result.message)


@router.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(
    request: Request,
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    if not session.is_authenticated:
        return redirect("/admin/login")
    if not session.is_admin:
        return render(request, "admin/denied.html", session, status_code=403)
    return render(request, "admin/dashboard.html", session, popular=catalog.get_popular_services())


@router.get("/admin/content/new", response_class=HTMLResponse)
async def new_content_page(request: Request, session: Session = Depends(get_session)):
    if not session.is_authenticated:
        return redirect("/admin/login")
    if not session.is_admin:
        return render(request, "admin/denied.html", session, status_code=403)
    return render(request, "admin/new_content.html", session)


@router.post("/admin/content/new")
async def create_content(
    title: str = Form(...),
    category: str = Form(...),
    subcategory: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    website: str = Form(""),
    features: List[str] = Form([]),
    thumbnail: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service)
):
    if not session.is_admin:
        return redirect("/admin/login")
    if not get_category(category):
        return redirect("/admin/content/new", error="Choose a category.")
    try:
        created = catalog.create_service(
            ServiceCreate(
                title=title,
                category=category,
                subcategory=subcategory or None,
                description=description,
                price=price,
                website=website,
                features=features,
            ),
            thumbnail=await _read_image(thumbnail),
            image=await _read_image(image),
        )
    except HTTPException as e:
        return redirect("/admin/content/new", error=e.detail)
    except ValueError:
        return redirect("/admin/content/new", error="Title is required.")
    logger.info(f"Admin {session.user.id} created service {created.slug}")
    return redirect(f"/service/{created.slug}", notice="Content added.")
