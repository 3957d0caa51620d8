"""Request/response schemas for role menu grants."""

from pydantic import BaseModel, Field

from app.schemas.menu import MenuRead


class RoleMenusUpdate(BaseModel):
    """Complete replacement grant set for one role."""

    menu_ids: list[str] = Field(default_factory=list)


class RoleWithMenus(BaseModel):
    role: str
    menus: list[MenuRead] = Field(default_factory=list)
