"""Public learning content. No sign-in needed."""

from fastapi import APIRouter, Depends

from edufin.api.dependencies import get_content
from edufin.models import QuizItem, Resource, ResourceQuery, Tip
from edufin.orchestrator import ContentFlow


router = APIRouter(tags=["content"])


@router.get("/tips", response_model=list[Tip])
async def list_tips(content: ContentFlow = Depends(get_content)):
    return await content.tips()


@router.get("/quiz", response_model=list[QuizItem])
async def list_quiz(content: ContentFlow = Depends(get_content)):
    return await content.quiz()


@router.get("/resources", response_model=list[Resource])
def list_resources(
    q: str = "",
    category: str = "",
    tag: str = "",
    language: str = "",
    limit: int = 50,
    content: ContentFlow = Depends(get_content),
):
    query = ResourceQuery(q=q, category=category, tag=tag, language=language, limit=limit)
    return content.resources(query)
