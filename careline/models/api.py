from typing import Literal

from pydantic import BaseModel

from careline.models.people import Doctor, Patient

Role = Literal["patient", "doctor"]


class LoginRequest(BaseModel):
    role: str
    login: str
    password: str


class LoginResponse(BaseModel):
    token: str
    role: Role
    id: int
    name: str


class SelectDoctorRequest(BaseModel):
    patient_id: int
    doctor_id: int


class StatusResponse(BaseModel):
    status: str = "ok"


class PatientView(BaseModel):
    patient: Patient
    selected_doctor: Doctor | None = None


class DoctorView(BaseModel):
    doctor: Doctor
    patients: list[Patient]
