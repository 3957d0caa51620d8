"""Role overview and role-to-menu grant replacement (admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.common import DataResponse, SuccessResponse
from app.schemas.menu import MenuRead
from app.schemas.role import RoleMenusUpdate, RoleWithMenus
from app.services.roles import parse_role, replace_role_menus, roles_overview

router = APIRouter()


@router.get("", response_model=DataResponse[list[RoleWithMenus]])
def list_roles(
    _admin: Annotated[CurrentUser, Depends(require("roles.list"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[list[RoleWithMenus]]:
    """Every role with the menus granted to it."""
    return DataResponse(
        data=[
            RoleWithMenus(role=role.value, menus=[MenuRead.model_validate(m) for m in menus])
            for role, menus in roles_overview(db)
        ]
    )


@router.put("/{role}/menus", response_model=SuccessResponse)
def update_role_menus(
    role: str,
    body: RoleMenusUpdate,
    _admin: Annotated[CurrentUser, Depends(require("roles.update_menus"))],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Replace the role's whole grant set with ``menu_ids``."""
    replace_role_menus(db, parse_role(role), body.menu_ids)
    return SuccessResponse()
