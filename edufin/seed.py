"""
Seed Data

Loads the starter tips, quiz items and a demo account into MongoDB:

    python -m edufin.seed

Re-running is safe: tips and quiz items are replaced, and the demo user
is recreated from scratch along with its goals.
"""

import asyncio
from decimal import Decimal

import structlog

from edufin.auth import hash_password
from edufin.config import get_settings
from edufin.services.storage import (
    ContentStorageInterface,
    GoalStorageInterface,
    MongoConnection,
    MongoContentStorage,
    MongoGoalStorage,
    MongoUserStorage,
    UserStorageInterface,
)


logger = structlog.get_logger("edufin.seed")


DEMO_EMAIL = "demo@edufin.test"
DEMO_PASSWORD = "password123"
DEMO_NAME = "Demo Student"

SEED_TIPS = [
    {
        "text": "Wait 48 hours before buying anything over $50. If you still want it, plan for it.",
        "category": "impulse",
    },
    {
        "text": "Divide a price by your hourly wage to see how many hours of work it really costs.",
        "category": "perspective",
    },
    {
        "text": "Set up an automatic transfer to savings on payday so you never see the money.",
        "category": "habits",
    },
    {
        "text": "Compare the total cost of ownership: accessories, repairs and subscriptions add up.",
        "category": "planning",
    },
]

SEED_QUIZ = [
    {
        "prompt": "A winter coat when your old one no longer fits",
        "answer": "need",
        "explanation": "Staying warm is a basic need.",
    },
    {
        "prompt": "The newest phone when yours still works fine",
        "answer": "want",
        "explanation": "Your current phone still meets the need.",
    },
    {
        "prompt": "Bus pass to get to school",
        "answer": "need",
        "explanation": "Getting to school is essential.",
    },
    {
        "prompt": "A third streaming subscription",
        "answer": "want",
        "explanation": "Entertainment is nice, but optional.",
    },
]

DEMO_GOALS = [
    {
        "item_name": "Gaming Laptop",
        "target_price": Decimal("1000"),
        "saved_amount": Decimal("300"),
    },
    {
        "item_name": "Noise-canceling Headphones",
        "target_price": Decimal("150"),
        "saved_amount": Decimal("45"),
    },
]


async def seed(
    users: UserStorageInterface,
    goals: GoalStorageInterface,
    content: ContentStorageInterface,
    bcrypt_rounds: int = 10,
) -> dict[str, int]:
    """
    Write the seed data through the given storage backends.

    Returns counts of what was written.
    """
    tip_count = await content.replace_tips(SEED_TIPS)
    quiz_count = await content.replace_quiz_items(SEED_QUIZ)

    existing = await users.get_user_by_email(DEMO_EMAIL)
    if existing:
        await goals.delete_goals_for_owner(existing.id)
        await users.delete_user_by_email(DEMO_EMAIL)

    demo = await users.create_user(
        email=DEMO_EMAIL,
        name=DEMO_NAME,
        password_hash=hash_password(DEMO_PASSWORD, rounds=bcrypt_rounds),
    )
    for goal in DEMO_GOALS:
        await goals.create_goal(owner_id=demo.id, **goal)

    counts = {"tips": tip_count, "quiz_items": quiz_count, "goals": len(DEMO_GOALS)}
    logger.info("seed_complete", demo_user=demo.id, **counts)
    return counts


def main() -> None:
    settings = get_settings()
    connection = MongoConnection(settings.mongo)
    try:
        asyncio.run(seed(
            users=MongoUserStorage(connection),
            goals=MongoGoalStorage(connection),
            content=MongoContentStorage(connection),
            bcrypt_rounds=settings.auth.bcrypt_rounds,
        ))
    finally:
        connection.close()


if __name__ == "__main__":
    main()
