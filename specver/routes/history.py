# specver/routes/history.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from specver.models.history import NewEntry, StatusPatch
from specver.routes.deps import get_registry
from specver.services.registry import RegistryService, backup_filename

router = APIRouter(tags=["history"])


@router.get("/history")
def list_history(
    object_id: Optional[str] = Query(None, alias="objectId"),
    registry: RegistryService = Depends(get_registry),
):
    # newest first, like the audit log view
    return [e.to_wire() for e in registry.history(object_id)]


@router.post("/history", status_code=201)
def add_entry(payload: NewEntry, registry: RegistryService = Depends(get_registry)):
    entry = registry.add_entry(payload)
    return {"message": "Entry saved successfully", "id": entry.id, "RICEFWID": entry.object_id}


@router.patch("/history")
def patch_status(data: StatusPatch, registry: RegistryService = Depends(get_registry)):
    if not data.id:
        raise HTTPException(400, "id required")
    registry.set_uploaded(data.id, data.status)
    return {"message": "Status updated successfully"}


@router.patch("/history/{entry_id}/status")
def patch_entry_status(entry_id: str, data: StatusPatch, registry: RegistryService = Depends(get_registry)):
    registry.set_uploaded(entry_id, data.status)
    return {"message": "Status updated successfully"}


@router.get("/summaries")
def list_summaries(
    q: Optional[str] = Query(None),
    registry: RegistryService = Depends(get_registry),
):
    return [s.to_wire() for s in registry.summaries(q)]


@router.get("/summaries/{object_id}")
def get_summary(object_id: str, registry: RegistryService = Depends(get_registry)):
    s = registry.summary_for(object_id)
    if s is None:
        raise HTTPException(404, f"Object {object_id} not found")
    return s.to_wire()


@router.get("/export")
def export_registry(registry: RegistryService = Depends(get_registry)):
    return JSONResponse(
        registry.export(),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.get("/reports")
def reports(registry: RegistryService = Depends(get_registry)):
    # release analytics are not built yet; only the registry totals
    return {**registry.stats(), "analytics": "coming soon"}
