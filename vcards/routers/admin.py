from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from vcards.services.admin_auth_service import AdminView
from vcards.services.auth_service import AuthService
from vcards.services.card_service import CardService
from vcards.services.session_service import get_auth_service, get_card_service, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _user_json(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


@router.get("/dashboard")
def dashboard(
    type: Optional[str] = None,
    userEmail: Optional[str] = None,
    admin: AdminView = Depends(require_admin),
    cards: CardService = Depends(get_card_service),
    accounts: AuthService = Depends(get_auth_service),
):
    owner = (userEmail or "").strip().lower()
    if owner:
        return {"cards": [card.to_json() for card in cards.list_for_owner(owner)]}
    if type == "users":
        return {"users": [_user_json(user) for user in accounts.list_users()]}
    if type == "cards":
        return {"cards": [card.to_json() for card in cards.list_all()]}
    raise HTTPException(400, "Invalid request")


@router.delete("/dashboard")
def dashboard_delete(
    userEmail: Optional[str] = None,
    slug: Optional[str] = None,
    admin: AdminView = Depends(require_admin),
    cards: CardService = Depends(get_card_service),
):
    owner = (userEmail or "").strip().lower()
    if owner:
        removed_cards, removed_users = cards.admin_delete_user(owner)
        if not removed_users and not removed_cards:
            raise HTTPException(404, "User not found")
        logger.info("Admin %s deleted user %s", admin.email, owner)
        return {"success": True, "message": "User and all cards deleted"}
    if slug and slug.strip():
        if not cards.admin_delete(slug):
            raise HTTPException(404, "Card not found")
        logger.info("Admin %s deleted card %s", admin.email, slug)
        return {"success": True, "message": "Card deleted"}
    raise HTTPException(400, "Missing delete parameter")
