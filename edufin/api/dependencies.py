"""
Request Dependencies

Components are built once per app and stored on app.state; routes pull
them in with Depends. Protected routes depend on current_user_id, which
turns the bearer token into the caller's user id.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from edufin.auth import AuthenticationError
from edufin.orchestrator import (
    AccountFlow,
    AppComponents,
    ContentFlow,
    ExpenseFlow,
    GoalFlow,
)


# auto_error=False so a missing header gets our own 401 message
bearer = HTTPBearer(auto_error=False)


def get_components(request: Request) -> AppComponents:
    return request.app.state.components


def get_accounts(components: AppComponents = Depends(get_components)) -> AccountFlow:
    return components.accounts


def get_expenses(components: AppComponents = Depends(get_components)) -> ExpenseFlow:
    return components.expenses


def get_goals(components: AppComponents = Depends(get_components)) -> GoalFlow:
    return components.goals


def get_content(components: AppComponents = Depends(get_components)) -> ContentFlow:
    return components.content


def current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    accounts: AccountFlow = Depends(get_accounts),
) -> str:
    """Id of the signed-in user. 401 when the token is missing or bad."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
        )
    try:
        payload = accounts.authenticate(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    return payload.sub
