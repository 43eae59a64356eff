from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import ConflictError, UnauthorizedError, ValidationError
from app.core.security import get_optional_user, login_session, logout_session
from app.core.templates import templates
from app.core.utils import redirect_with_error
from app.users.services.user_service import UserService

router = APIRouter()


@router.get("/")
def home(request: Request, user=Depends(get_optional_user)):
    """Landing page."""
    return templates.TemplateResponse(request, "index.html", {"user": user})


@router.get("/register")
def register_form(request: Request, error: str = None):
    return templates.TemplateResponse(request, "register.html", {"error": error})


@router.post("/register")
def register(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    """Create an account and log straight in."""
    try:
        user = UserService(db).register(username, email, password)
    except (ConflictError, ValidationError) as e:
        return RedirectResponse(redirect_with_error("/register", e.message), status_code=303)

    login_session(request, user.user_id)
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/login")
def login_form(request: Request, error: str = None):
    return templates.TemplateResponse(request, "login.html", {"error": error})


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = UserService(db).authenticate(username, password)
    except UnauthorizedError as e:
        return RedirectResponse(redirect_with_error("/login", e.message), status_code=303)

    login_session(request, user.user_id)
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/logout")
def logout(request: Request):
    logout_session(request)
    return RedirectResponse("/", status_code=303)
