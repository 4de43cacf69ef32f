from pydantic import BaseModel, Field
from factory_inventory.domain import UserRole


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=72)


class UserOut(BaseModel):
    id: str
    username: str
    role: UserRole
    name: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class MeOut(UserOut):
    can_view_pricing: bool
