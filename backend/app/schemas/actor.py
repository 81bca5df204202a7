from pydantic import BaseModel, Field, EmailStr
from typing import Literal, Optional, Union, Annotated
import enum


class ActorRole(str, enum.Enum):
    # Value kept as USER to stay compatible with stored records
    REPORTER = 'USER'
    NGO = 'NGO'


class Reporter(BaseModel):
    id: str
    name: str
    email: str
    role: Literal["USER"] = "USER"
    points: int = Field(0, ge=0, description="Guardian points")


class NGO(BaseModel):
    id: str
    name: str
    email: str
    role: Literal["NGO"] = "NGO"
    location: str = Field("N/A", description="e.g. City, State")


Actor = Annotated[Union[Reporter, NGO], Field(discriminator="role")]


# API payloads

class RegisterRequest(BaseModel):
    role: ActorRole
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = ""
    location: Optional[str] = None


class LoginRequest(BaseModel):
    role: ActorRole
    email: str
    password: str = ""
