"""Pydantic request/response schemas."""

from app.schemas.auth import CurrentUser, LoginRequest, LoginResponse, SessionUser
from app.schemas.common import DataResponse, ErrorResponse, SuccessResponse
from app.schemas.health import HealthResponse
from app.schemas.menu import MenuCreate, MenuDetail, MenuRead, MenuUpdate
from app.schemas.package import PackageCreate, PackageRead, PackageUpdate, Uploader
from app.schemas.role import RoleMenusUpdate, RoleWithMenus
from app.schemas.upload import UploadResponse
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.schemas.workflow import (
    PublicWorkflowRead,
    WorkflowCreate,
    WorkflowRead,
    WorkflowUpdate,
)

__all__ = [
    "CurrentUser",
    "DataResponse",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MenuCreate",
    "MenuDetail",
    "MenuRead",
    "MenuUpdate",
    "PackageCreate",
    "PackageRead",
    "PackageUpdate",
    "PublicWorkflowRead",
    "RoleMenusUpdate",
    "RoleWithMenus",
    "SessionUser",
    "SuccessResponse",
    "UploadResponse",
    "Uploader",
    "UserCreate",
    "UserRead",
    "UserUpdate",
    "WorkflowCreate",
    "WorkflowRead",
    "WorkflowUpdate",
]
