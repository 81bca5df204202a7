from fastapi import Request

from app.services.rescue_core import RescueCore


def get_core(request: Request) -> RescueCore:
    """
    Dependency for the process-wide rescue core built in the app lifespan.
    """
    return request.app.state.core
