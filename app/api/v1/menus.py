"""Menu entry CRUD (admin only)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require
from app.core.database import get_db
from app.core.errors import NotFoundError, ValidationError
from app.models import Menu
from app.schemas.auth import CurrentUser
from app.schemas.common import DataResponse, SuccessResponse
from app.schemas.menu import MenuCreate, MenuDetail, MenuUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

# Fields an update may clear by sending null.
_NULLABLE_FIELDS = frozenset({"path", "icon", "parent_id"})


def _get_menu(db: Session, menu_id: str) -> Menu:
    menu = db.query(Menu).filter(Menu.id == menu_id).first()
    if menu is None:
        raise NotFoundError("Menu not found")
    return menu


def _check_parent(db: Session, menu_id: str | None, parent_id: str | None) -> None:
    if parent_id is None:
        return
    if parent_id == menu_id:
        raise ValidationError("A menu cannot be its own parent")
    _get_menu(db, parent_id)


@router.get("", response_model=DataResponse[list[MenuDetail]])
def list_menus(
    _admin: Annotated[CurrentUser, Depends(require("menus.list"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[list[MenuDetail]]:
    menus = db.query(Menu).order_by(Menu.sort_order, Menu.name).all()
    return DataResponse(data=[MenuDetail.model_validate(m) for m in menus])


@router.post("", response_model=DataResponse[MenuDetail], status_code=201)
def create_menu(
    body: MenuCreate,
    _admin: Annotated[CurrentUser, Depends(require("menus.create"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[MenuDetail]:
    _check_parent(db, None, body.parent_id)
    menu = Menu(**body.model_dump())
    db.add(menu)
    db.commit()
    db.refresh(menu)
    logger.info("Menu created: menu_id=%s name=%s", menu.id, menu.name)
    return DataResponse(data=MenuDetail.model_validate(menu))


@router.put("/{menu_id}", response_model=DataResponse[MenuDetail])
def update_menu(
    menu_id: str,
    body: MenuUpdate,
    _admin: Annotated[CurrentUser, Depends(require("menus.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> DataResponse[MenuDetail]:
    menu = _get_menu(db, menu_id)
    changes = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    if "parent_id" in changes:
        _check_parent(db, menu_id, changes["parent_id"])
    for field, value in changes.items():
        setattr(menu, field, value)
    db.commit()
    db.refresh(menu)
    return DataResponse(data=MenuDetail.model_validate(menu))


@router.delete("/{menu_id}", response_model=SuccessResponse)
def delete_menu(
    menu_id: str,
    _admin: Annotated[CurrentUser, Depends(require("menus.delete"))],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Delete a menu; its role grants go with it and child menus become top-level."""
    menu = _get_menu(db, menu_id)
    db.delete(menu)
    db.commit()
    logger.info("Menu deleted: menu_id=%s", menu_id)
    return SuccessResponse()
