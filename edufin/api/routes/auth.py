from fastapi import APIRouter, Depends, status

from edufin.api.dependencies import current_user_id, get_accounts
from edufin.models import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from edufin.orchestrator import AccountFlow


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, accounts: AccountFlow = Depends(get_accounts)):
    return await accounts.register(body)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, accounts: AccountFlow = Depends(get_accounts)):
    return await accounts.login(body)


@router.get("/me", response_model=MeResponse)
async def me(
    user_id: str = Depends(current_user_id),
    accounts: AccountFlow = Depends(get_accounts),
):
    return MeResponse(user=await accounts.me(user_id))
