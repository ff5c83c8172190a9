from fastapi import APIRouter, Depends, status

from edufin.api.dependencies import current_user_id, get_goals
from edufin.models import Goal, GoalCreate, GoalPatch, PurchaseRequest
from edufin.orchestrator import GoalFlow


router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=list[Goal])
async def list_goals(
    user_id: str = Depends(current_user_id),
    goals: GoalFlow = Depends(get_goals),
):
    return await goals.list_goals(user_id)


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    body: GoalCreate,
    user_id: str = Depends(current_user_id),
    goals: GoalFlow = Depends(get_goals),
):
    return await goals.create(user_id, body)


@router.patch("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    body: GoalPatch,
    user_id: str = Depends(current_user_id),
    goals: GoalFlow = Depends(get_goals),
):
    return await goals.update(user_id, goal_id, body)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    user_id: str = Depends(current_user_id),
    goals: GoalFlow = Depends(get_goals),
):
    await goals.delete(user_id, goal_id)
    return {"ok": True}


@router.post("/{goal_id}/purchase", response_model=Goal)
async def purchase_goal(
    goal_id: str,
    body: PurchaseRequest,
    user_id: str = Depends(current_user_id),
    goals: GoalFlow = Depends(get_goals),
):
    """Mark a goal purchased at the price actually paid."""
    return await goals.purchase(user_id, goal_id, body)
