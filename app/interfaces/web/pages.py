"""Server-rendered pages."""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.application.services.user_service import list_users
from app.domain.repositories.user_repository import UserRepository
from app.interfaces.deps import get_user_repository

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["Pages"])


@router.get("/", response_class=HTMLResponse)
def home(request: Request, repo: UserRepository = Depends(get_user_repository)):
    users = list_users(repo)
    return templates.TemplateResponse(request, "users.html", {"users": users})
