"""
Main Orchestrator for EduFin

This module ties the storage, auth, summary and audit pieces together
and defines the flows behind each API route:
1. Accounts (register → hash → store → token; login → verify → token)
2. Expenses (CRUD plus the summary over a date window)
3. Goals (CRUD plus marking a goal purchased)
4. Content (tips, quiz items, resources)

DESIGN DECISION: The routes stay thin. Every rule about owner scoping,
defaults, validation of query strings and auditing lives here, so the
same behaviour holds no matter what calls it.
"""

import datetime as dt
from typing import NamedTuple, Optional

import structlog
from pydantic import ValidationError

from edufin.audit import AuditLogger
from edufin.auth import (
    AuthenticationError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from edufin.config import AppSettings, AuthSettings, get_settings
from edufin.models import (
    AuthResponse,
    DateWindow,
    Expense,
    ExpenseCreate,
    ExpensePatch,
    ExpenseSummary,
    Goal,
    GoalCreate,
    GoalPatch,
    GoalStatus,
    LoginRequest,
    PublicUser,
    PurchaseRequest,
    QuizItem,
    RegisterRequest,
    Resource,
    ResourceQuery,
    Tip,
    TokenPayload,
)
from edufin.queries import summarize
from edufin.seed import SEED_QUIZ, SEED_TIPS
from edufin.services.resources import ResourceCatalog
from edufin.services.storage import (
    ContentStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    GoalStorageInterface,
    InMemoryAuditStorage,
    InMemoryContentStorage,
    InMemoryExpenseStorage,
    InMemoryGoalStorage,
    InMemoryUserStorage,
    MongoAuditStorage,
    MongoConnection,
    MongoContentStorage,
    MongoExpenseStorage,
    MongoGoalStorage,
    MongoUserStorage,
    NotFoundError,
    StorageError,
    UserStorageInterface,
)


logger = structlog.get_logger("edufin.orchestrator")


class InvalidQueryError(ValueError):
    """A query-string parameter could not be understood."""
    pass


def parse_window(date_from: Optional[str], date_to: Optional[str]) -> DateWindow:
    """
    Parse optional ISO date strings into a DateWindow.

    Empty strings count as missing. Anything else that is not a calendar
    date, or a window ending before it starts, raises InvalidQueryError.
    """
    try:
        return DateWindow(date_from=date_from or None, date_to=date_to or None)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise InvalidQueryError(f"Invalid date range: {messages}") from e


def _iso(day: Optional[dt.date]) -> Optional[str]:
    return day.isoformat() if day else None


class AccountFlow:
    """
    Registration, login and token checks.

    Login failures all look the same from outside: an unknown email and
    a wrong password both raise "Invalid credentials".
    """

    def __init__(
        self,
        user_storage: UserStorageInterface,
        auth_settings: AuthSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = user_storage
        self._auth = auth_settings
        self._audit_logger = audit_logger

    def _issue(self, user: PublicUser) -> AuthResponse:
        return AuthResponse(token=create_access_token(user, self._auth), user=user)

    async def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Create an account and sign the user in.

        Raises:
            DuplicateError: If the email is already registered
        """
        if await self._users.get_user_by_email(request.email):
            raise DuplicateError("Email in use")

        try:
            record = await self._users.create_user(
                email=request.email,
                name=request.name,
                password_hash=hash_password(request.password, rounds=self._auth.bcrypt_rounds),
            )
        except DuplicateError as e:
            # Lost a race with another registration
            raise DuplicateError("Email in use") from e

        if self._audit_logger:
            await self._audit_logger.log_user_registered(record.id, record.email)

        return self._issue(record.to_public())

    async def login(self, request: LoginRequest) -> AuthResponse:
        """
        Raises:
            AuthenticationError: On unknown email or wrong password
        """
        record = await self._users.get_user_by_email(request.email)
        if record is None or not verify_password(request.password, record.password_hash):
            if self._audit_logger:
                reason = "unknown_email" if record is None else "wrong_password"
                await self._audit_logger.log_login_failed(request.email, reason)
            raise AuthenticationError("Invalid credentials")

        if self._audit_logger:
            await self._audit_logger.log_user_logged_in(record.id)

        return self._issue(record.to_public())

    def authenticate(self, token: str) -> TokenPayload:
        return decode_access_token(token, self._auth)

    async def me(self, user_id: str) -> PublicUser:
        """
        Raises:
            NotFoundError: If the account was deleted after the token was issued
        """
        record = await self._users.get_user_by_id(user_id)
        if record is None:
            raise NotFoundError("User not found")
        return record.to_public()


class ExpenseFlow:
    """
    Expense tracking for one user at a time.

    Every call takes the owner's id; storage scopes by it.
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        app_settings: AppSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._expenses = expense_storage
        self._settings = app_settings
        self._audit_logger = audit_logger

    def page_bounds(self, page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
        """
        Clamp page and page size into range.

        Returns:
            (offset, limit)
        """
        page = max(1, page or 1)
        if limit is None:
            limit = self._settings.default_page_size
        limit = max(1, min(self._settings.max_page_size, limit))
        return (page - 1) * limit, limit

    async def list_expenses(
        self,
        owner_id: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Expense]:
        """A page of expenses in [date_from, date_to), newest first."""
        window = parse_window(date_from, date_to)
        offset, limit = self.page_bounds(page, limit)
        return await self._expenses.list_expenses(
            owner_id,
            date_from=window.date_from,
            date_to=window.date_to,
            limit=limit,
            offset=offset,
        )

    async def create(self, owner_id: str, request: ExpenseCreate) -> Expense:
        expense = await self._expenses.create_expense(
            owner_id=owner_id,
            amount=request.amount,
            category=request.category,
            expense_date=request.date or dt.date.today(),
            note=request.note,
        )

        if self._audit_logger:
            await self._audit_logger.log_expense_created(
                expense_id=expense.id,
                user_id=owner_id,
                amount=expense.amount,
                category=expense.category.value,
            )

        return expense

    async def update(self, owner_id: str, expense_id: str, patch: ExpensePatch) -> Expense:
        changes = patch.changes()
        expense = await self._expenses.update_expense(owner_id, expense_id, changes)

        if self._audit_logger:
            await self._audit_logger.log_expense_updated(expense_id, owner_id, sorted(changes))

        return expense

    async def delete(self, owner_id: str, expense_id: str) -> None:
        await self._expenses.delete_expense(owner_id, expense_id)

        if self._audit_logger:
            await self._audit_logger.log_expense_deleted(expense_id, owner_id)

    async def summary(
        self,
        owner_id: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> ExpenseSummary:
        """
        Summarize every expense in the window.

        Bounds are validated before anything is fetched. Storage narrows
        the fetch by date; summarize() applies the same window again so
        the result does not depend on how a backend filters.
        """
        window = parse_window(date_from, date_to)
        expenses = await self._expenses.list_expenses(
            owner_id,
            date_from=window.date_from,
            date_to=window.date_to,
            limit=None,
        )
        result = summarize(expenses, window.date_from, window.date_to)

        if self._audit_logger:
            await self._audit_logger.log_summary_computed(
                user_id=owner_id,
                date_from=_iso(window.date_from),
                date_to=_iso(window.date_to),
                expense_count=len(expenses),
            )

        return result


class GoalFlow:
    """Savings goals for one user at a time."""

    def __init__(
        self,
        goal_storage: GoalStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._goals = goal_storage
        self._audit_logger = audit_logger

    async def list_goals(self, owner_id: str) -> list[Goal]:
        return await self._goals.list_goals(owner_id)

    async def create(self, owner_id: str, request: GoalCreate) -> Goal:
        goal = await self._goals.create_goal(
            owner_id=owner_id,
            item_name=request.item_name,
            target_price=request.target_price,
            saved_amount=request.saved_amount,
        )

        if self._audit_logger:
            await self._audit_logger.log_goal_created(goal.id, owner_id, goal.item_name)

        return goal

    async def update(self, owner_id: str, goal_id: str, patch: GoalPatch) -> Goal:
        changes = patch.changes()
        goal = await self._goals.update_goal(owner_id, goal_id, changes)

        if self._audit_logger:
            await self._audit_logger.log_goal_updated(goal_id, owner_id, sorted(changes))

        return goal

    async def delete(self, owner_id: str, goal_id: str) -> None:
        await self._goals.delete_goal(owner_id, goal_id)

        if self._audit_logger:
            await self._audit_logger.log_goal_deleted(goal_id, owner_id)

    async def purchase(self, owner_id: str, goal_id: str, request: PurchaseRequest) -> Goal:
        """Record that the item was bought and what it actually cost."""
        changes = {
            "status": GoalStatus.PURCHASED,
            "purchase_price": request.purchase_price,
            "purchased_at": request.purchased_at or dt.date.today(),
        }
        goal = await self._goals.update_goal(owner_id, goal_id, changes)

        if self._audit_logger:
            await self._audit_logger.log_goal_purchased(goal_id, owner_id, request.purchase_price)

        return goal


class ContentFlow:
    """Shared learning content. Nothing here is per user."""

    def __init__(
        self,
        content_storage: ContentStorageInterface,
        catalog: ResourceCatalog,
    ):
        self._content = content_storage
        self._catalog = catalog

    async def tips(self) -> list[Tip]:
        return await self._content.list_tips()

    async def quiz(self) -> list[QuizItem]:
        return await self._content.list_quiz_items()

    def resources(self, query: ResourceQuery) -> list[Resource]:
        return self._catalog.search(query)


class AppComponents(NamedTuple):
    accounts: AccountFlow
    expenses: ExpenseFlow
    goals: GoalFlow
    content: ContentFlow
    app_settings: AppSettings
    connection: Optional[MongoConnection] = None
    audit: Optional[AuditLogger] = None


def create_app_components(
    use_storage: bool = True,
    auth_settings: Optional[AuthSettings] = None,
    app_settings: Optional[AppSettings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to MongoDB.
                    Set to False for tests and offline demos. Also falls
                    back to in-memory storage when MongoDB is not
                    configured or not reachable.
        auth_settings: Token settings; read from the environment if None
        app_settings: Application settings; read from the environment if None
    """
    settings = get_settings()
    auth_settings = auth_settings or settings.auth
    app_settings = app_settings or settings.app

    connection = None
    stores = None

    if use_storage:
        try:
            connection = MongoConnection(settings.mongo)
            connection.connect()
            stores = (
                MongoUserStorage(connection),
                MongoExpenseStorage(connection),
                MongoGoalStorage(connection),
                MongoContentStorage(connection),
                MongoAuditStorage(connection),
            )
        except (ValidationError, StorageError) as e:
            # Storage not configured - continue without it
            logger.warning("storage_unavailable", error=str(e), fallback="memory")
            connection = None

    if stores is None:
        stores = (
            InMemoryUserStorage(),
            InMemoryExpenseStorage(),
            InMemoryGoalStorage(),
            InMemoryContentStorage(tips=SEED_TIPS, quiz_items=SEED_QUIZ),
            InMemoryAuditStorage(),
        )

    users, expenses, goals, content, audit = stores
    audit_logger = AuditLogger(audit)
    catalog = ResourceCatalog(
        app_settings.resources_file,
        ttl_seconds=app_settings.resources_cache_ttl_seconds,
    )

    return AppComponents(
        accounts=AccountFlow(users, auth_settings, audit_logger),
        expenses=ExpenseFlow(expenses, app_settings, audit_logger),
        goals=GoalFlow(goals, audit_logger),
        content=ContentFlow(content, catalog),
        app_settings=app_settings,
        connection=connection,
        audit=audit_logger,
    )
