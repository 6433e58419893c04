from datetime import datetime, timedelta, timezone

import pytest

from quizo.core.models import SubscriptionType
from quizo.core.services.account_service import AccountService
from quizo.core.storage import JsonFileStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def accounts():
    return AccountService(JsonFileStore())


def test_login_creates_account_once(accounts):
    account = accounts.login("  carol ")

    assert account.username == "carol"
    assert account.email == "carol@quizo.app"
    assert account.subscription_type is SubscriptionType.FREE

    accounts.record_quiz_created("carol", NOW)
    assert accounts.login("carol").quizzes_today == 1


def test_login_requires_a_username(accounts):
    with pytest.raises(ValueError):
        accounts.login("   ")


def test_unknown_user_cannot_create(accounts):
    decision = accounts.check_quota("ghost", NOW)

    assert not decision.allowed
    assert decision.reason == "User not logged in"


def test_free_users_get_three_quizzes_per_day(accounts):
    accounts.login("carol")
    for _ in range(3):
        assert accounts.check_quota("carol", NOW).allowed
        accounts.record_quiz_created("carol", NOW)

    decision = accounts.check_quota("carol", NOW)
    assert not decision.allowed
    assert decision.reason == "Daily limit reached. Upgrade to create more quizzes!"


def test_daily_counter_resets_on_a_new_day(accounts):
    accounts.login("carol")
    for _ in range(3):
        accounts.record_quiz_created("carol", NOW)

    tomorrow = NOW + timedelta(days=1)
    assert accounts.check_quota("carol", tomorrow).allowed
    assert accounts.get_account("carol").quizzes_today == 0


@pytest.mark.parametrize(("plan", "days"), [(SubscriptionType.WEEKLY, 7), (SubscriptionType.MONTHLY, 30)])
def test_subscription_lifts_the_limit_until_it_ends(accounts, plan, days):
    accounts.login("carol")
    account = accounts.apply_subscription("carol", plan, NOW)
    assert account.subscription_end == NOW + timedelta(days=days)
    for _ in range(5):
        accounts.record_quiz_created("carol", NOW)

    assert accounts.check_quota("carol", NOW).allowed

    after_end = NOW + timedelta(days=days, minutes=1)
    for _ in range(3):
        accounts.record_quiz_created("carol", after_end)
    assert not accounts.check_quota("carol", after_end).allowed


def test_clear_all_removes_accounts(accounts):
    accounts.login("carol")
    accounts.login("dave")
    assert sorted(accounts.usernames()) == ["carol", "dave"]

    accounts.clear_all()

    assert accounts.usernames() == []
