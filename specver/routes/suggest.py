# specver/routes/suggest.py
from fastapi import APIRouter, Depends

from specver.agents.version_suggest import suggest_next_version
from specver.core.config import Settings
from specver.models.history import SuggestionRequest
from specver.routes.deps import get_settings

router = APIRouter(tags=["suggest"])


@router.post("/suggest")
def suggest(req: SuggestionRequest, settings: Settings = Depends(get_settings)):
    """Best effort: {"suggestion": null} whenever the model can't help."""
    s = suggest_next_version(settings, req.current_version, req.change_description)
    return {"suggestion": s.to_wire() if s else None}
