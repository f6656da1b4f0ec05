"""Load-once registry of patients and doctors plus the login lookup index.

Everything here is built at startup and never mutated afterwards, so reads
need no locking.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from careline.errors import AuthFailure, SeedError
from careline.models.people import Doctor, Patient, Seed

logger = logging.getLogger(__name__)

ROLES = ("patient", "doctor")
TOKEN_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 24


@dataclass(frozen=True)
class Identity:
    role: str
    id: int
    name: str


@dataclass(frozen=True)
class _Credential:
    role: str
    id: int
    password: str


def load_seed(path: str | Path) -> Seed:
    """Read and validate the seed JSON file."""
    seed_path = Path(path)
    try:
        raw = seed_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SeedError(f"cannot read seed {seed_path}: {e}") from e
    try:
        return Seed.model_validate_json(raw)
    except ValidationError as e:
        raise SeedError(f"invalid seed {seed_path}: {e}") from e


def issue_token() -> str:
    """Opaque bearer token handed out on login. Not stored anywhere."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


class Directory:
    def __init__(self, patients: list[Patient], doctors: list[Doctor]) -> None:
        self._patients: dict[int, Patient] = {}
        self._doctors: dict[int, Doctor] = {}
        self._by_login: dict[str, _Credential] = {}

        for p in patients:
            if p.id in self._patients:
                raise SeedError(f"duplicate patient id {p.id}")
            self._patients[p.id] = p
            self._index("patient", p.login, p.id, p.password)
        for d in doctors:
            if d.id in self._doctors:
                raise SeedError(f"duplicate doctor id {d.id}")
            self._doctors[d.id] = d
            self._index("doctor", d.login, d.id, d.password)

    @classmethod
    def from_seed(cls, seed: Seed) -> "Directory":
        directory = cls(seed.patients, seed.doctors)
        logger.info(
            "Directory loaded: %d patients, %d doctors",
            len(directory._patients), len(directory._doctors),
        )
        return directory

    def _index(self, role: str, login: str, entity_id: int, password: str) -> None:
        key = f"{role}:{login}"
        if key in self._by_login:
            raise SeedError(f"duplicate {role} login {login!r}")
        self._by_login[key] = _Credential(role=role, id=entity_id, password=password)

    def lookup_patient(self, patient_id: int) -> Patient | None:
        return self._patients.get(patient_id)

    def lookup_doctor(self, doctor_id: int) -> Doctor | None:
        return self._doctors.get(doctor_id)

    def list_doctors(self) -> list[Doctor]:
        return sorted(self._doctors.values(), key=lambda d: d.id)

    def verify_credential(self, role: str, login: str, password: str) -> Identity:
        """Check a role-scoped login/password pair.

        Unknown role, unknown login and wrong password all raise the same
        ``AuthFailure``.
        """
        if role not in ROLES:
            raise AuthFailure()
        entry = self._by_login.get(f"{role}:{login}")
        # surrogatepass: lone surrogates are valid JSON strings and must not raise
        if entry is None or not secrets.compare_digest(
            entry.password.encode("utf-8", "surrogatepass"),
            password.encode("utf-8", "surrogatepass"),
        ):
            raise AuthFailure()

        if entry.role == "patient":
            name = self._patients[entry.id].name
        else:
            name = self._doctors[entry.id].name
        return Identity(role=entry.role, id=entry.id, name=name)
