from decimal import Decimal

import pytest

from settleup.core.errors import NotAGroupMember, NotFound, NothingToSettle, SettlementRejected
from settleup.schemas.activity import ActivityType
from settleup.schemas.expense import ExpenseCreate
from settleup.schemas.settlements import SettlementCreate, SettlementOut
from settleup.services.activity_service import list_activities
from settleup.services.expense_services import build_splits, create_expense
from settleup.services.settlement_service import (
    accept_recommendation,
    get_group_balances,
    get_settlement_history,
    record_settlement,
    undo_settlement,
)


def as_map(result):
    return {b.user_id: b.amount for b in result.balances}


@pytest.fixture
async def dinner(db, trip, alice):
    """Alice paid 90, split equally three ways."""
    return await create_expense(
        db, alice, trip.id,
        ExpenseCreate(
            description="Dinner",
            amount=Decimal("90"),
            paid_by="alice",
            splits=build_splits(90, ["alice", "bob", "carol"]),
        ),
    )


class TestRecordSettlement:
    async def test_returns_recomputed_balances(self, db, trip, dinner, bob):
        result = await record_settlement(
            db, bob, trip.id,
            SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("30")),
        )

        assert as_map(result) == {"alice": Decimal("30"), "carol": Decimal("-30")}
        assert result.recommendation.from_user.user_id == "carol"
        assert result.recommendation.amount == Decimal("30")

    async def test_partial_payment(self, db, trip, dinner, carol):
        result = await record_settlement(
            db, carol, trip.id,
            SettlementCreate(from_user="carol", to_user="alice", amount=Decimal("12.50")),
        )

        assert as_map(result) == {
            "alice": Decimal("47.50"), "bob": Decimal("-30"), "carol": Decimal("-17.50"),
        }

    async def test_any_member_can_record_for_others(self, db, trip, dinner, alice):
        result = await record_settlement(
            db, alice, trip.id,
            SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("30")),
        )

        assert "bob" not in as_map(result)

    async def test_logs_activity(self, db, trip, dinner, bob):
        await record_settlement(
            db, bob, trip.id,
            SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("30")),
        )

        feed = await list_activities(db, trip.id, ActivityType.SETTLEMENT_ADDED)
        assert [a.description for a in feed] == ["Bob paid Alice $30.00"]

    @pytest.mark.parametrize("data", [
        SettlementCreate(from_user="bob", to_user="bob", amount=Decimal("5")),
        SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("0")),
        SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("-5")),
        SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("10.005")),
        SettlementCreate(from_user="bob", to_user="mallory", amount=Decimal("5")),
        SettlementCreate(from_user="mallory", to_user="alice", amount=Decimal("5")),
    ])
    async def test_rejected_and_nothing_written(self, db, trip, dinner, bob, data):
        with pytest.raises(SettlementRejected) as exc:
            await record_settlement(db, bob, trip.id, data)

        assert exc.value.status_code == 400
        assert await get_settlement_history(db, bob, trip.id) == []

    async def test_outsider_cannot_record(self, db, trip, dinner, outsider):
        with pytest.raises(NotAGroupMember):
            await record_settlement(
                db, outsider, trip.id,
                SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("5")),
            )

    async def test_unknown_group(self, db, bob):
        with pytest.raises(NotFound):
            await record_settlement(
                db, bob, "grp_missing",
                SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("5")),
            )


class TestAcceptRecommendation:
    async def test_settles_group_one_suggestion_at_a_time(self, db, trip, dinner, alice):
        first = await accept_recommendation(db, alice, trip.id, payment_method="cash")
        assert as_map(first) == {"alice": Decimal("30"), "carol": Decimal("-30")}

        second = await accept_recommendation(db, alice, trip.id)
        assert second.balances == []
        assert second.recommendation is None

        history = await get_settlement_history(db, alice, trip.id)
        assert [(s.from_user, s.to_user, s.amount) for s in history] == [
            ("carol", "alice", Decimal("30")),
            ("bob", "alice", Decimal("30")),
        ]
        assert history[1].payment_method == "cash"

        with pytest.raises(NothingToSettle):
            await accept_recommendation(db, alice, trip.id)

    async def test_nothing_to_settle_in_empty_group(self, db, trip, alice):
        with pytest.raises(NothingToSettle):
            await accept_recommendation(db, alice, trip.id)

    async def test_uneven_split_settles_within_tolerance(self, db, trip, alice):
        await create_expense(
            db, alice, trip.id,
            ExpenseCreate(
                description="Museum",
                amount=Decimal("100"),
                paid_by="alice",
                splits=build_splits(100, ["alice", "bob", "carol"]),
            ),
        )

        await accept_recommendation(db, alice, trip.id)
        result = await accept_recommendation(db, alice, trip.id)

        assert result.balances == []


class TestHistoryAndUndo:
    async def test_history_serialises(self, db, trip, dinner, bob):
        await record_settlement(
            db, bob, trip.id,
            SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("30"), notes="thanks"),
        )

        [row] = await get_settlement_history(db, bob, trip.id)
        out = SettlementOut.model_validate(row)

        assert out.id.startswith("set_")
        assert out.group_id == trip.id
        assert out.notes == "thanks"

    async def test_history_requires_membership(self, db, trip, outsider):
        with pytest.raises(NotAGroupMember):
            await get_settlement_history(db, outsider, trip.id)

    async def test_payer_can_undo(self, db, trip, dinner, bob, alice):
        await record_settlement(
            db, bob, trip.id,
            SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("30")),
        )
        [row] = await get_settlement_history(db, bob, trip.id)

        assert await undo_settlement(db, bob, row.id) == {"status": "undo successful"}

        result = await get_group_balances(db, alice, trip.id)
        assert as_map(result)["bob"] == Decimal("-30")

    async def test_only_payer_can_undo(self, db, trip, dinner, bob, alice):
        await record_settlement(
            db, bob, trip.id,
            SettlementCreate(from_user="bob", to_user="alice", amount=Decimal("30")),
        )
        [row] = await get_settlement_history(db, bob, trip.id)

        with pytest.raises(SettlementRejected) as exc:
            await undo_settlement(db, alice, row.id)

        assert exc.value.status_code == 403

    async def test_undo_missing(self, db, trip, bob):
        with pytest.raises(NotFound):
            await undo_settlement(db, bob, "set_missing")
