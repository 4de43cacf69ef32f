from fastapi import APIRouter, Depends
from typing import Optional
from factory_inventory.deps import RequestContext, get_bearer_token, get_request_context, get_session_gate
from factory_inventory.errors import AuthFailure
from factory_inventory.schemas.auth import LoginRequest, TokenOut, UserOut, MeOut
from factory_inventory.services.session_gate import SessionGate

router = APIRouter()


def _user_out(identity) -> UserOut:
    return UserOut(id=identity.id, username=identity.username, role=identity.role, name=identity.name)


@router.post("/login", response_model=TokenOut)
def login(credentials: LoginRequest, gate: SessionGate = Depends(get_session_gate)):
    """Login - Get access token"""
    result = gate.authenticate(credentials.username, credentials.password)
    if not result.success:
        raise AuthFailure()

    return TokenOut(access_token=result.access_token, user=_user_out(result.identity))


@router.post("/logout")
def logout(
    token: Optional[str] = Depends(get_bearer_token),
    gate: SessionGate = Depends(get_session_gate),
):
    """Revoke the current session; safe to call repeatedly"""
    if gate.restore(token):
        gate.logout()

    return {"success": True}


@router.get("/me", response_model=MeOut)
def me(ctx: RequestContext = Depends(get_request_context)):
    """Current user and what they may see"""
    return MeOut(**_user_out(ctx.identity).model_dump(), can_view_pricing=ctx.can_view_pricing)
