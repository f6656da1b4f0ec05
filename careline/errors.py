class CarelineError(Exception):
    """Base class for registry errors."""


class NotFoundError(CarelineError):
    pass


class PatientNotFound(NotFoundError):
    def __init__(self, patient_id: int) -> None:
        super().__init__("patient not found")
        self.patient_id = patient_id


class DoctorNotFound(NotFoundError):
    def __init__(self, doctor_id: int) -> None:
        super().__init__("doctor not found")
        self.doctor_id = doctor_id


class AuthFailure(CarelineError):
    """Raised for any rejected login; never says which field was wrong."""

    def __init__(self) -> None:
        super().__init__("invalid credentials")


class SeedError(CarelineError):
    """The seed dataset could not be loaded. Fatal at startup."""


class PersistenceFailure(CarelineError):
    """A selection snapshot could not be written. Logged, never surfaced."""
