"""
Household Chores — HTTP API.

REST endpoints over the same services the app state uses. Every endpoint
except /health needs a bearer token issued by the auth backend. Bodies and
responses use the camelCase field names of the JSON wire format; success
responses wrap the entity (``{"task": {...}}``), failures are
``{"error": "..."}``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from household.data.models import Category, Task, UserProfile
from household.ports.auth_port import AuthError
from household.ports.store_port import NotFoundError, StoreError
from household.services.app_services import AppServices, create_app_services

logger = logging.getLogger(__name__)


# -----------------------------
# Request bodies
# -----------------------------
class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterRequest(_CamelModel):
    email: str
    password: str
    name: str
    avatar: str = ""
    color: str = "#4A90E2"


class CategoryCreate(_CamelModel):
    name: str
    icon: str = ""
    color: str = ""


class CategoryUpdate(_CamelModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class TaskCreate(_CamelModel):
    title: str
    category_id: str = Field(alias="categoryId")
    frequency: Literal["daily", "weekly"]
    rating: int = Field(default=1, ge=1)


class TaskUpdate(_CamelModel):
    title: Optional[str] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    frequency: Optional[Literal["daily", "weekly"]] = None
    rating: Optional[int] = Field(default=None, ge=1)
    completed_by: Optional[list[str]] = Field(default=None, alias="completedBy")


class ToggleRequest(_CamelModel):
    user_id: Optional[str] = Field(default=None, alias="userId")


# -----------------------------
# Serialization
# -----------------------------
def _profile_json(profile: UserProfile) -> dict[str, Any]:
    return asdict(profile)


def _category_json(category: Category) -> dict[str, Any]:
    return asdict(category)


def _task_json(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "categoryId": task.category_id,
        "frequency": task.frequency,
        "rating": task.rating,
        "completedBy": list(task.completed_by),
        "createdAt": task.created_at,
    }


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(services: AppServices | None = None, prefix: str | None = None) -> FastAPI:
    """Build the API app around one service context."""
    if prefix is None:
        from household.config import settings
        prefix = settings.API_PREFIX
    if services is None:
        services = create_app_services()

    app = FastAPI(title="Household Chores API")
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=600,
    )

    # -----------------------------
    # Error envelopes
    # -----------------------------
    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(400, message)

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return _error(401, str(exc) or "Unauthorized")

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(ValueError)
    async def _bad_value(request: Request, exc: ValueError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(500, "Request failed")

    # -----------------------------
    # Auth utilities
    # -----------------------------
    async def get_current_user(
        authorization: Optional[str] = Header(default=None),
    ) -> UserProfile:
        if not authorization or not authorization.lower().startswith("bearer "):
            raise HTTPException(status_code=401, detail="Unauthorized")
        token = authorization.split(" ", 1)[1].strip()
        session = await services.auth_service.check_session(token)
        if session is None:
            raise HTTPException(status_code=401, detail="Unauthorized")
        return session.user

    router = APIRouter(prefix=prefix)

    @router.get("/health")
    async def health():
        return {"status": "ok"}

    @router.post("/register")
    async def register(body: RegisterRequest):
        session = await services.auth_service.register(
            body.email, body.password, body.name, body.avatar, body.color,
        )
        return {"user": _profile_json(session.user), "accessToken": session.access_token}

    @router.get("/profile")
    async def profile(user: UserProfile = Depends(get_current_user)):
        return {"user": _profile_json(user)}

    @router.get("/household")
    async def household(user: UserProfile = Depends(get_current_user)):
        users = await services.profiles_repository.list_by_household()
        return {"users": [_profile_json(u) for u in users]}

    # -----------------------------
    # Categories
    # -----------------------------
    @router.get("/categories")
    async def list_categories(user: UserProfile = Depends(get_current_user)):
        categories = await services.categories_repository.list()
        return {"categories": [_category_json(c) for c in categories]}

    @router.post("/categories")
    async def create_category(body: CategoryCreate, user: UserProfile = Depends(get_current_user)):
        category = await services.categories_service.add_category(body.name, body.icon, body.color)
        return {"category": _category_json(category)}

    @router.put("/categories/{category_id}")
    async def update_category(
        category_id: str, body: CategoryUpdate, user: UserProfile = Depends(get_current_user),
    ):
        updates = body.model_dump(exclude_none=True)
        try:
            category = await services.categories_service.update_category(category_id, **updates)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Category not found")
        return {"category": _category_json(category)}

    @router.delete("/categories/{category_id}")
    async def delete_category(category_id: str, user: UserProfile = Depends(get_current_user)):
        await services.categories_service.delete_category(category_id)
        return {"success": True}

    # -----------------------------
    # Tasks
    # -----------------------------
    @router.get("/tasks")
    async def list_tasks(user: UserProfile = Depends(get_current_user)):
        tasks = await services.tasks_repository.list()
        return {"tasks": [_task_json(t) for t in tasks]}

    @router.post("/tasks")
    async def create_task(body: TaskCreate, user: UserProfile = Depends(get_current_user)):
        task = await services.tasks_service.add_task(
            body.title, body.category_id, body.frequency, body.rating,
        )
        return {"task": _task_json(task)}

    @router.put("/tasks/{task_id}")
    async def update_task(
        task_id: str, body: TaskUpdate, user: UserProfile = Depends(get_current_user),
    ):
        updates = body.model_dump(exclude_none=True)
        task = await services.tasks_service.update_task(task_id, **updates)
        return {"task": _task_json(task)}

    @router.delete("/tasks/{task_id}")
    async def delete_task(task_id: str, user: UserProfile = Depends(get_current_user)):
        await services.tasks_service.delete_task(task_id)
        return {"success": True}

    @router.post("/tasks/{task_id}/toggle")
    async def toggle_task(
        task_id: str,
        body: Optional[ToggleRequest] = None,
        user: UserProfile = Depends(get_current_user),
    ):
        target = body.user_id if body is not None and body.user_id else user.id
        result = await services.tasks_service.toggle_task_completion(task_id, target)
        return {"task": _task_json(result.task)}

    app.include_router(router)
    return app
