"""Theme, language and translation endpoints."""

from fastapi import APIRouter, HTTPException

from todo_list.api.models import LanguageRequest, ThemeRequest
from todo_list.factory import get_localizer, get_preferences

router = APIRouter()


@router.get("/preferences/theme")
async def get_theme() -> dict[str, str]:
    return {"theme": get_preferences().theme}


@router.put("/preferences/theme")
async def set_theme(request: ThemeRequest) -> dict[str, str]:
    get_preferences().set_theme(request.theme)
    return {"theme": request.theme}


@router.post("/preferences/theme/toggle")
async def toggle_theme() -> dict[str, str]:
    return {"theme": get_preferences().toggle_theme()}


@router.get("/preferences/language")
async def get_language() -> dict[str, str]:
    return {"language": get_localizer().current_language}


@router.put("/preferences/language")
async def set_language(request: LanguageRequest) -> dict[str, str]:
    """Switch language; connected clients receive a languageChanged event.

    Raises:
        HTTPException: 400 if the language is not supported
    """
    localizer = get_localizer()
    if not localizer.set_language(request.language):
        raise HTTPException(status_code=400, detail=f"Unsupported language: {request.language}")
    return {"language": localizer.current_language}


@router.get("/i18n/{key}")
async def translate(key: str) -> dict[str, str]:
    """Translate a dotted key in the current language (the key itself when missing)."""
    return {"key": key, "text": get_localizer().translate(key)}
