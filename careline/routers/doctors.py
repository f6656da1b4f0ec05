from contextlib import aclosing

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from careline.dependencies import get_registry
from careline.models.api import DoctorView
from careline.models.people import Doctor
from careline.services.notifications import stream_events
from careline.services.registry import Registry

router = APIRouter(prefix="/api", tags=["doctor"])


@router.get("/doctors", response_model=list[Doctor])
async def list_doctors(registry: Registry = Depends(get_registry)):
    return registry.directory.list_doctors()


@router.get("/doctor", response_model=DoctorView)
async def get_doctor_view(id: int = Query(...), registry: Registry = Depends(get_registry)):
    """The doctor's profile and every patient who has selected them."""
    doctor = registry.directory.lookup_doctor(id)
    if doctor is None:
        raise HTTPException(status_code=404, detail="not found")
    return DoctorView(doctor=doctor, patients=registry.relations.patients_of(id))


@router.get("/doctor/stream")
async def watch_doctor(
    request: Request,
    id: int = Query(...),
    registry: Registry = Depends(get_registry),
):
    """Server-Sent Events stream for a doctor's dashboard.

    Events:
    - ping: keep-alive, sent on connect and after each idle interval
    - update: the roster changed; re-fetch /api/doctor
    """
    if registry.directory.lookup_doctor(id) is None:
        raise HTTPException(status_code=404, detail="not found")

    async def event_generator():
        async with aclosing(
            stream_events(registry.hub, id, request.is_disconnected, registry.heartbeat)
        ) as events:
            async for event in events:
                yield event.encode()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
