"""Filtering of the navigation tree to what a permission snapshot may see."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from tenantgate.shared.permissions.models import PermissionSnapshot
from tenantgate.shared.permissions.services import has_module


class NavItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    href: Optional[str] = None
    required_module: Optional[str] = None
    platform_admin_only: bool = False
    organization_admin_only: bool = False
    children: tuple["NavItem", ...] = ()


class NavSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    required_module: Optional[str] = None
    items: tuple[NavItem, ...] = ()


def _visible(item: NavItem, snapshot: Optional[PermissionSnapshot]) -> bool:
    is_platform_admin = snapshot.is_platform_admin if snapshot else False
    is_org_admin = snapshot.is_organization_admin if snapshot else False

    if item.platform_admin_only and not is_platform_admin:
        return False
    if item.organization_admin_only and not (is_org_admin or is_platform_admin):
        return False
    if item.required_module and not has_module(snapshot, item.required_module):
        return False
    return True


def filter_items(
    items: tuple[NavItem, ...], snapshot: Optional[PermissionSnapshot]
) -> tuple[NavItem, ...]:
    """Drop hidden items; a parent whose children are all hidden is hidden too."""
    visible = []
    for item in items:
        if not _visible(item, snapshot):
            continue
        if item.children:
            children = filter_items(item.children, snapshot)
            if not children:
                continue
            item = item.model_copy(update={"children": children})
        visible.append(item)
    return tuple(visible)


def filter_navigation(
    sections: List[NavSection], snapshot: Optional[PermissionSnapshot]
) -> List[NavSection]:
    """
    Filter navigation sections for a snapshot.

    Platform admins see the full tree. Everyone else loses sections whose
    module is not subscribed and sections left without items.
    """
    if snapshot is not None and snapshot.is_platform_admin:
        return list(sections)

    result = []
    for section in sections:
        if section.required_module and not has_module(
            snapshot, section.required_module
        ):
            continue
        items = filter_items(section.items, snapshot)
        if not items:
            continue
        result.append(section.model_copy(update={"items": items}))
    return result
