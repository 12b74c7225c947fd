"""Language option routes."""

from fastapi import APIRouter

from transtrack.schemas import LanguageOptions
from transtrack.services.languages import get_language_options

router = APIRouter(prefix="/languages", tags=["languages"])


@router.get("", response_model=LanguageOptions)
async def list_languages():
    """Source and target languages offered on upload."""
    return get_language_options()
