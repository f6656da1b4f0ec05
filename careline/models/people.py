"""Seed entities: patients, doctors, and the persisted selection pairs."""

from pydantic import BaseModel, Field, computed_field


class Patient(BaseModel):
    id: int
    login: str
    password: str = Field(default="", exclude=True, repr=False)
    name: str


class Doctor(BaseModel):
    id: int
    login: str
    password: str = Field(default="", exclude=True, repr=False)
    first_name: str = ""
    last_name: str = ""
    middle_name: str = ""
    speciality: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def name(self) -> str:
        """Display name, surname first."""
        return " ".join(
            part for part in (self.last_name, self.first_name, self.middle_name) if part
        )


class Seed(BaseModel):
    patients: list[Patient] = Field(default_factory=list)
    doctors: list[Doctor] = Field(default_factory=list)


class Selection(BaseModel):
    """One persisted patient -> doctor pair."""

    patient_id: int
    doctor_id: int
