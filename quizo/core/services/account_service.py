"""Username login and the quiz creation quota attached to each account."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from quizo.constants.quiz_constants import DAILY_LIMIT_REASON, FREE_DAILY_QUIZ_LIMIT, SUBSCRIPTION_DAYS
from quizo.constants.storage_constants import USER_KEY_PREFIX
from quizo.core.models import SubscriptionType, UserAccount
from quizo.core.serialization import account_from_dict, account_to_dict
from quizo.core.storage import JsonFileStore


@dataclass(frozen=True, slots=True)
class QuotaDecision:
    allowed: bool
    reason: str | None = None


class AccountService:
    """Reads and updates ``quizo_user_<name>`` records."""

    def __init__(self, store: JsonFileStore) -> None:
        self._store = store

    def login(self, username: str) -> UserAccount:
        cleaned = username.strip()
        if not cleaned:
            raise ValueError("Username must not be empty.")
        account = self.get_account(cleaned)
        if account is None:
            account = UserAccount(username=cleaned, email=f"{cleaned}@quizo.app")
            self._save(account)
        return account

    def get_account(self, username: str) -> UserAccount | None:
        payload = self._store.get(USER_KEY_PREFIX + username)
        if payload is None:
            return None
        return account_from_dict(payload)

    def check_quota(self, username: str, now: datetime | None = None) -> QuotaDecision:
        now = now or datetime.now(timezone.utc)
        account = self.get_account(username)
        if account is None:
            return QuotaDecision(False, "User not logged in")

        if account.last_quiz_date != now.date():
            account.quizzes_today = 0
            account.last_quiz_date = now.date()
            self._save(account)

        if self._has_active_subscription(account, now):
            return QuotaDecision(True)

        if account.quizzes_today >= FREE_DAILY_QUIZ_LIMIT:
            return QuotaDecision(False, DAILY_LIMIT_REASON)
        return QuotaDecision(True)

    def record_quiz_created(self, username: str, now: datetime | None = None) -> None:
        now = now or datetime.now(timezone.utc)
        account = self.login(username)
        if account.last_quiz_date != now.date():
            account.quizzes_today = 1
        else:
            account.quizzes_today += 1
        account.last_quiz_date = now.date()
        self._save(account)

    def apply_subscription(self, username: str, plan: SubscriptionType, now: datetime | None = None) -> UserAccount:
        now = now or datetime.now(timezone.utc)
        plan = SubscriptionType(plan)
        account = self.login(username)
        if plan is SubscriptionType.FREE:
            account.subscription_type = plan
            account.subscription_end = None
        else:
            account.subscription_type = plan
            account.subscription_end = now + timedelta(days=SUBSCRIPTION_DAYS[plan.value])
        self._save(account)
        return account

    def usernames(self) -> list[str]:
        return [key[len(USER_KEY_PREFIX):] for key in self._store.keys() if key.startswith(USER_KEY_PREFIX)]

    def clear_all(self) -> None:
        for username in self.usernames():
            self._store.remove(USER_KEY_PREFIX + username)

    def _save(self, account: UserAccount) -> None:
        self._store.set(USER_KEY_PREFIX + account.username, account_to_dict(account))

    @staticmethod
    def _has_active_subscription(account: UserAccount, now: datetime) -> bool:
        if account.subscription_type is SubscriptionType.FREE or account.subscription_end is None:
            return False
        return account.subscription_end > now
