import pytest
from sqlalchemy import update

from akashic.exceptions import InsufficientBalance, NotFound, ValidationError
from akashic.models.definitions import User
from akashic.models.ledger import TransactionType
from akashic.repositories import LedgerRepository


async def _sum_matches_balance(services, session, user_id: int) -> bool:
    return await services.ledger.get_balance(user_id) == await LedgerRepository(session).sum_for_user(user_id)


class TestRecordTransaction:
    """Every balance change goes through an appended transaction."""

    async def test_credit_returns_new_balance(self, services, user_id):
        new_balance = await services.ledger.record_transaction(user_id, 100, TransactionType.EARN, "Quest reward")

        assert new_balance == 150
        assert await services.ledger.get_balance(user_id) == 150

    async def test_accepts_type_by_value(self, services, user_id):
        assert await services.ledger.record_transaction(user_id, 5, "earn", "Daily visit") == 55

    async def test_transaction_stores_balance_after(self, services, user_id):
        await services.ledger.record_transaction(user_id, -20, TransactionType.SPEND, "Scroll access", "3")

        latest = (await services.ledger.list_transactions(user_id, limit=1))[0]
        assert latest.amount == -20
        assert latest.balance_after == 30
        assert latest.reference_id == "3"
        assert latest.transaction_type == "spend"

    @pytest.mark.parametrize("amount", [0, 1.5, True])
    async def test_rejects_non_integer_or_zero_amount(self, services, user_id, amount):
        with pytest.raises(ValidationError):
            await services.ledger.record_transaction(user_id, amount, TransactionType.EARN, "bad")

    async def test_rejects_unknown_type(self, services, user_id):
        with pytest.raises(ValidationError):
            await services.ledger.record_transaction(user_id, 10, "gift", "bad")

    async def test_unknown_user(self, services):
        with pytest.raises(NotFound):
            await services.ledger.record_transaction(9999, 10, TransactionType.EARN, "ghost")

    async def test_overdraft_is_rejected_and_not_persisted(self, services, session, user_id):
        count_before = await LedgerRepository(session).count_for_user(user_id)

        with pytest.raises(InsufficientBalance) as excinfo:
            await services.ledger.spend(user_id, 51, "Too much")

        assert excinfo.value.required == 51
        assert excinfo.value.balance == 50
        assert await services.ledger.get_balance(user_id) == 50
        assert await LedgerRepository(session).count_for_user(user_id) == count_before

    async def test_spend_of_entire_balance_reaches_zero(self, services, user_id):
        transaction = await services.ledger.spend(user_id, 50, "Everything")

        assert transaction.balance_after == 0
        assert await services.ledger.get_balance(user_id) == 0

    async def test_spend_requires_positive_amount(self, services, user_id):
        with pytest.raises(ValidationError):
            await services.ledger.spend(user_id, -5, "Negative")

    async def test_balance_always_equals_sum_of_transactions(self, services, session, user_id):
        await services.ledger.record_transaction(user_id, 300, TransactionType.PURCHASE, "Adept Pack")
        await services.ledger.spend(user_id, 120, "Scroll")
        with pytest.raises(InsufficientBalance):
            await services.ledger.spend(user_id, 1000, "Too much")
        await services.ledger.record_transaction(user_id, 7, TransactionType.EARN, "Riddle")

        assert await services.ledger.get_balance(user_id) == 237
        assert await _sum_matches_balance(services, session, user_id)


class TestTransactionHistory:
    """Listing is newest first."""

    async def test_newest_first(self, services, user_id):
        await services.ledger.record_transaction(user_id, 10, TransactionType.EARN, "first")
        await services.ledger.record_transaction(user_id, 20, TransactionType.EARN, "second")

        descriptions = [t.description for t in await services.ledger.list_transactions(user_id)]
        assert descriptions == ["second", "first", "Welcome bonus for new registration"]

    async def test_limit(self, services, user_id):
        await services.ledger.record_transaction(user_id, 10, TransactionType.EARN, "first")

        assert len(await services.ledger.list_transactions(user_id, limit=1)) == 1


class TestReconciliation:
    """The cached counter is checked against the log."""

    async def test_no_drift_after_normal_activity(self, services, user_id):
        await services.ledger.spend(user_id, 10, "Scroll")

        report = await services.ledger.reconcile(user_id)
        assert report.cached_balance == report.ledger_sum == 40
        assert report.drift == 0

    async def test_detects_counter_tampering(self, services, session, user_id):
        await session.execute(update(User).where(User.id == user_id).values(mana_balance=999))
        await session.commit()

        report = await services.ledger.reconcile(user_id)
        assert report.drift == 949
        # Reporting only: nothing is corrected.
        assert await services.ledger.get_balance(user_id) == 999

    async def test_reconcile_all_covers_every_user(self, services, user_id):
        await services.users.register("scribe", "scribe@example.com", "another secret")

        reports = await services.ledger.reconcile_all()
        assert len(reports) == 2
        assert all(report.drift == 0 for report in reports)


class TestManaPackages:
    """Seeded packages and the direct purchase path."""

    async def test_active_packages_ordered_by_amount(self, services):
        packages = await services.ledger.list_packages()

        assert [p.amount for p in packages] == [100, 300, 1000, 2500]
        assert [p.price for p in packages] == [499, 999, 2499, 4999]

    async def test_missing_package(self, services):
        with pytest.raises(NotFound):
            await services.ledger.get_package(404)

    async def test_direct_purchase_credits_package_amount(self, services, user_id):
        package = (await services.ledger.list_packages())[1]

        result = await services.ledger.purchase_package(user_id, package.id)

        assert result.amount == 300
        assert result.new_balance == 350
        latest = (await services.ledger.list_transactions(user_id, limit=1))[0]
        assert latest.id == result.transaction_id
        assert latest.transaction_type == "purchase"
        assert latest.reference_id == str(package.id)
        assert latest.stripe_payment_intent_id.startswith("direct_")
