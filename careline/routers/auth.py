import logging

from fastapi import APIRouter, Depends, HTTPException

from careline.dependencies import get_registry
from careline.errors import AuthFailure
from careline.models.api import LoginRequest, LoginResponse
from careline.services.directory import issue_token
from careline.services.registry import Registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/ping")
async def ping():
    return {"ok": "true"}


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, registry: Registry = Depends(get_registry)):
    """Exchange a role-scoped login and password for a session token.

    The token is not stored; later requests carry the caller's id directly.
    """
    try:
        identity = registry.directory.verify_credential(body.role, body.login, body.password)
    except AuthFailure as e:
        logger.info("Rejected %s login %r", body.role, body.login)
        raise HTTPException(status_code=401, detail=str(e)) from None
    return LoginResponse(
        token=issue_token(),
        role=identity.role,
        id=identity.id,
        name=identity.name,
    )
