from fastapi import APIRouter, Depends, HTTPException, Query

from careline.dependencies import get_registry
from careline.errors import NotFoundError
from careline.models.api import PatientView, SelectDoctorRequest, StatusResponse
from careline.services.registry import Registry

router = APIRouter(prefix="/api/patient", tags=["patient"])


@router.get("/me", response_model=PatientView)
async def get_patient_view(id: int = Query(...), registry: Registry = Depends(get_registry)):
    """The patient's profile and the doctor they have selected, if any."""
    patient = registry.directory.lookup_patient(id)
    if patient is None:
        raise HTTPException(status_code=404, detail="not found")
    doctor_id = registry.relations.doctor_for(id)
    doctor = registry.directory.lookup_doctor(doctor_id) if doctor_id is not None else None
    return PatientView(patient=patient, selected_doctor=doctor)


@router.post("/select-doctor", response_model=StatusResponse)
async def select_doctor(body: SelectDoctorRequest, registry: Registry = Depends(get_registry)):
    """Assign a doctor to a patient and notify that doctor's open streams."""
    try:
        registry.relations.select(body.patient_id, body.doctor_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    return StatusResponse()
