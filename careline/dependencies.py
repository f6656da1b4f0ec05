from fastapi import Request

from careline.services.registry import Registry


def get_registry(request: Request) -> Registry:
    """The registry built by the app lifespan."""
    return request.app.state.registry
