from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response

from vcards.services import export_service
from vcards.services.auth_service import UserView
from vcards.services.card_render import render
from vcards.services.card_service import CardError, CardNotFoundError, CardService, NotCardOwnerError
from vcards.services.session_service import get_card_service, require_user
from vcards.services.slug_service import InvalidSlugError, SlugError, SlugUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["cards"])


def _raise_for(exc: Exception) -> None:
    if isinstance(exc, CardNotFoundError):
        raise HTTPException(404, "Card not found")
    if isinstance(exc, NotCardOwnerError):
        raise HTTPException(403, "Forbidden")
    if isinstance(exc, SlugUnavailableError):
        raise HTTPException(409, str(exc))
    if isinstance(exc, InvalidSlugError):
        raise HTTPException(400, str(exc))
    logger.error("Slug allocation failed: %s", exc)
    raise HTTPException(500, "Failed to create card")


@router.get("")
def list_cards(user: UserView = Depends(require_user), cards: CardService = Depends(get_card_service)):
    return [card.to_json() for card in cards.list_for_owner(user.email)]


@router.post("", status_code=201)
def create_card(
    payload: Any = Body(None),
    user: UserView = Depends(require_user),
    cards: CardService = Depends(get_card_service),
):
    try:
        card = cards.create(user.email, payload)
    except SlugError as exc:
        _raise_for(exc)
    return card.to_json()


@router.get("/{slug}")
def get_card(slug: str, cards: CardService = Depends(get_card_service)):
    try:
        return cards.get(slug).to_json()
    except CardError as exc:
        _raise_for(exc)


@router.put("/{slug}")
def update_card(
    slug: str,
    payload: Any = Body(None),
    user: UserView = Depends(require_user),
    cards: CardService = Depends(get_card_service),
):
    try:
        return cards.update(slug, user.email, payload).to_json()
    except CardError as exc:
        _raise_for(exc)


@router.delete("/{slug}")
def delete_card(slug: str, user: UserView = Depends(require_user), cards: CardService = Depends(get_card_service)):
    try:
        cards.delete(slug, user.email)
    except CardError as exc:
        _raise_for(exc)
    return {"success": True}


@router.get("/{slug}/preview", response_class=HTMLResponse)
def preview_card(slug: str, template: Optional[str] = None, cards: CardService = Depends(get_card_service)):
    try:
        card = cards.get(slug)
    except CardError as exc:
        _raise_for(exc)
    return HTMLResponse(render(card, template))


@router.get("/{slug}/vcard")
def download_vcard(slug: str, cards: CardService = Depends(get_card_service)):
    try:
        card = cards.get(slug)
    except CardError as exc:
        _raise_for(exc)
    return Response(
        export_service.build_vcard(card),
        media_type="text/vcard; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename=\"{card.slug}.vcf\""},
    )


@router.get("/{slug}/qr.png")
def qr_code(slug: str, cards: CardService = Depends(get_card_service)):
    try:
        card = cards.get(slug)
    except CardError as exc:
        _raise_for(exc)
    return Response(export_service.qr_png(export_service.share_url(card.slug)), media_type="image/png")
