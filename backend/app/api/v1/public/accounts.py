from typing import Union

from fastapi import APIRouter, Depends, status

from app.api.deps import get_core
from app.schemas.actor import ActorRole, LoginRequest, RegisterRequest, Reporter, NGO
from app.services.rescue_core import RescueCore

router = APIRouter()


@router.post("/register", response_model=Union[Reporter, NGO], status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, core: RescueCore = Depends(get_core)):
    """
    Create a reporter or NGO account.
    """
    extra = {"location": request.location} if request.location else None
    return await core.identities.register(request.role, request.name, request.email, extra)


@router.post("/login", response_model=Union[Reporter, NGO])
async def login(request: LoginRequest, core: RescueCore = Depends(get_core)):
    """
    Resolve an account by role and email.
    """
    return await core.identities.authenticate(request.role, request.email, request.password)


@router.get("/{role}/{actor_id}", response_model=Union[Reporter, NGO])
async def read_actor(role: ActorRole, actor_id: str, core: RescueCore = Depends(get_core)):
    return core.identities.get_by_id(actor_id, role)
