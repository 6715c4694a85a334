from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from vcards.services.card_render import render
from vcards.services.card_service import CardNotFoundError, CardService
from vcards.services.export_service import share_url
from vcards.services.session_service import get_card_service

router = APIRouter(tags=["share"])


def _templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates are not configured")


@router.get("/share/{slug}", response_class=HTMLResponse)
def share_card(slug: str, request: Request, cards: CardService = Depends(get_card_service)):
    templates = _templates(request)
    try:
        card = cards.get(slug)
    except CardNotFoundError:
        return templates.TemplateResponse(request, "not_found.html", {"slug": slug}, status_code=404)
    context = {
        "display_name": card.display_name,
        "card_html": render(card),
        "share_url": share_url(card.slug),
        "vcard_url": f"/cards/{card.slug}/vcard",
        "qr_url": f"/cards/{card.slug}/qr.png",
    }
    return templates.TemplateResponse(request, "share.html", context)
