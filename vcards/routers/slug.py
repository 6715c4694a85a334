from __future__ import annotations

from fastapi import APIRouter, Depends

from vcards.domain.slugs import is_valid_slug
from vcards.services.session_service import get_slug_service
from vcards.services.slug_service import SlugService

router = APIRouter(prefix="/slug", tags=["slug"])


@router.get("/check")
def slug_check(value: str = "", svc: SlugService = Depends(get_slug_service)):
    candidate = svc.normalize(value)
    return {
        "value": candidate,
        "valid": is_valid_slug(candidate),
        "available": svc.is_available(candidate),
    }
