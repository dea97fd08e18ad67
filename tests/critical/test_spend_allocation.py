"""
Critical Path Tests: Spend Allocation

Tests the oldest-first spend allocation that decides how many points are
taken from each payer. This is CRITICAL for payer balance accuracy.

Priority: 🔴 CRITICAL (payer balances must never be overdrawn)
"""

import pytest

from points_engine import InsufficientBalanceError, SpendAllocator, SpendReportEntry
from points_engine.models import Grant


def as_pairs(report):
    return [(entry.payer, entry.delta) for entry in report]


class TestOldestFirstOrdering:
    """Test grants are consumed in timestamp order"""

    @pytest.mark.critical
    def test_oldest_grant_spent_first(self, ledger, timestamps):
        """
        Test: Oldest grant is consumed before newer ones

        Given: A has 100 points at t1, B has 200 points at t2
        When: 100 points are spent
        Then: Only A is debited and B is untouched
        """
        # Arrange
        ledger.add_grant("A", 100, timestamps[0])
        grant_b = ledger.add_grant("B", 200, timestamps[1])

        # Act
        report = ledger.spend(100)

        # Assert
        assert as_pairs(report) == [("A", -100)]
        assert grant_b.points == 200

    @pytest.mark.critical
    def test_insertion_order_does_not_matter(self, ledger, timestamps):
        """
        Test: Grants added out of order are still spent oldest-first

        Given: B (t2) is added before A (t1)
        When: 100 points are spent
        Then: A is debited
        """
        ledger.add_grant("B", 200, timestamps[1])
        ledger.add_grant("A", 100, timestamps[0])

        report = ledger.spend(100)

        assert as_pairs(report) == [("A", -100)]
        assert ledger.payer_balances() == {"B": 200, "A": 0}

    @pytest.mark.critical
    def test_equal_timestamps_keep_insertion_order(self, ledger, base_time):
        """
        Test: Ties on timestamp are broken by insertion order

        Given: B then A, both at the same instant, 100 points each
        When: 100 points are spent
        Then: B (inserted first) is debited
        """
        ledger.add_grant("B", 100, base_time)
        ledger.add_grant("A", 100, base_time)

        report = ledger.spend(100)

        assert as_pairs(report) == [("B", -100)]

    @pytest.mark.critical
    def test_report_ordered_by_first_touched_payer(self, ledger, timestamps):
        """
        Test: Report entries follow the order payers were first debited

        Given: B at t1, C at t2, A at t3, 100 points each
        When: 250 points are spent
        Then: Report is B, C, A with A partially debited
        """
        ledger.add_grant("A", 100, timestamps[2])
        ledger.add_grant("B", 100, timestamps[0])
        ledger.add_grant("C", 100, timestamps[1])

        report = ledger.spend(250)

        assert as_pairs(report) == [("B", -100), ("C", -100), ("A", -50)]

    @pytest.mark.critical
    def test_spend_does_not_reorder_stored_grants(self, ledger, timestamps):
        """
        Test: Spending works on an ordered view, not by sorting storage

        Given: Grants added newest-first
        When: Points are spent
        Then: ledger.grants still lists them in insertion order
        """
        ledger.add_grant("C", 100, timestamps[2])
        ledger.add_grant("B", 100, timestamps[1])
        ledger.add_grant("A", 100, timestamps[0])

        ledger.spend(150)

        assert [g.payer for g in ledger.grants] == ["C", "B", "A"]
        assert list(ledger.payer_balances()) == ["C", "B", "A"]


class TestPartialConsumption:
    """Test a grant larger than the request is partially consumed"""

    @pytest.mark.critical
    def test_partial_then_remaining(self, ledger, timestamps):
        """
        Test: One grant spent across two calls

        Given: A single grant of 300 for A
        When: 100 then 200 points are spent
        Then: Reports are -100 then -200 and A ends at zero
        """
        ledger.add_grant("A", 300, timestamps[0])

        first = ledger.spend(100)
        assert as_pairs(first) == [("A", -100)]
        assert ledger.payer_balance("A") == 200

        second = ledger.spend(200)
        assert as_pairs(second) == [("A", -200)]
        assert ledger.payer_balance("A") == 0

    @pytest.mark.critical
    def test_partial_consumption_stops_allocation(self, ledger, timestamps):
        """
        Test: Allocation stops at the partially consumed grant

        Given: A 300 at t1, B 100 at t2
        When: 50 points are spent
        Then: A keeps 250 and B is untouched
        """
        grant_a = ledger.add_grant("A", 300, timestamps[0])
        grant_b = ledger.add_grant("B", 100, timestamps[1])

        ledger.spend(50)

        assert grant_a.points == 250
        assert grant_b.points == 100

    @pytest.mark.critical
    def test_exact_total_consumes_everything(self, ledger, timestamps):
        """
        Test: Spending the whole balance zeroes every grant
        """
        ledger.add_grant("A", 100, timestamps[0])
        ledger.add_grant("B", 250, timestamps[1])

        report = ledger.spend(350)

        assert as_pairs(report) == [("A", -100), ("B", -250)]
        assert ledger.total_balance() == 0
        assert all(g.is_consumed for g in ledger.grants)


class TestPayerAggregation:
    """Test one report entry per payer per spend"""

    @pytest.mark.critical
    def test_same_payer_grants_merge_into_one_entry(self, ledger, timestamps):
        """
        Test: Full and partial consumption of one payer's grants merge

        Given: A 100 at t1 and A 100 at t2
        When: 150 points are spent
        Then: A single entry of -150
        """
        ledger.add_grant("A", 100, timestamps[0])
        ledger.add_grant("A", 100, timestamps[1])

        report = ledger.spend(150)

        assert report == [SpendReportEntry("A", -150)]

    @pytest.mark.critical
    def test_interleaved_payers_merge(self, ledger, timestamps):
        """
        Test: A payer debited twice around another payer keeps one entry
        """
        ledger.add_grant("A", 100, timestamps[0])
        ledger.add_grant("B", 100, timestamps[1])
        ledger.add_grant("A", 100, timestamps[2])

        report = ledger.spend(300)

        assert as_pairs(report) == [("A", -200), ("B", -100)]

    @pytest.mark.critical
    def test_consumed_grants_are_skipped(self, ledger, timestamps):
        """
        Test: A fully consumed grant adds no zero entry to later reports
        """
        ledger.add_grant("A", 100, timestamps[0])
        ledger.add_grant("B", 100, timestamps[1])

        ledger.spend(100)
        report = ledger.spend(50)

        assert as_pairs(report) == [("B", -50)]


class TestCanonicalExample:
    """Test the canonical five-grant, three-payer ledger"""

    @pytest.mark.critical
    def test_spend_5000(self, sample_ledger):
        """
        Test: Spend 5000 across DANNON, UNILEVER and MILLER COORS

        Given: DANNON 300, UNILEVER 200, DANNON -200, MILLER COORS 10000,
               DANNON 1000 in chronological order
        When: 5000 points are spent
        Then: DANNON -100, UNILEVER -200, MILLER COORS -4700
        """
        report = sample_ledger.spend(5000)

        assert [entry.to_dict() for entry in report] == [
            {"payer": "DANNON", "points": -100},
            {"payer": "UNILEVER", "points": -200},
            {"payer": "MILLER COORS", "points": -4700},
        ]

    @pytest.mark.critical
    def test_balances_after_spend_5000(self, sample_ledger):
        """
        Test: Balances after the canonical spend
        """
        sample_ledger.spend(5000)

        assert sample_ledger.payer_balances() == {
            "DANNON": 1000,
            "UNILEVER": 0,
            "MILLER COORS": 5300,
        }
        assert list(sample_ledger.payer_balances()) == ["DANNON", "UNILEVER", "MILLER COORS"]
        assert sample_ledger.total_balance() == 6300


class TestConservation:
    """Test spent points are exactly accounted for"""

    @pytest.mark.critical
    @pytest.mark.parametrize("amount", [1, 99, 100, 450, 899, 900])
    def test_report_matches_request(self, ledger, generate_grants, amount):
        """
        Test: With non-negative grants, deltas sum to the request and the
        total balance drops by exactly that much
        """
        ledger.add_grants(generate_grants())
        before = ledger.total_balance()

        report = ledger.spend(amount)

        assert sum(entry.delta for entry in report) == -amount
        assert ledger.total_balance() == before - amount
        assert all(entry.delta < 0 for entry in report)

    @pytest.mark.critical
    def test_non_negative_balances_across_spends(self, ledger, generate_grants):
        """
        Test: Repeated spends never drive a payer below zero
        """
        ledger.add_grants(generate_grants(payers=("A", "B"), per_payer=4, points=75))

        for amount in (40, 110, 75, 200, 175):
            ledger.spend(amount)
            assert all(balance >= 0 for balance in ledger.payer_balances().values())
            assert all(g.points >= 0 for g in ledger.grants)

        assert ledger.total_balance() == 0


class TestInsufficientBalance:
    """Test the up-front sufficiency check"""

    @pytest.mark.critical
    def test_overspend_raises_and_changes_nothing(self, ledger, timestamps):
        """
        Test: Spending more than the total fails cleanly

        Given: Total balance of 50
        When: 51 points are spent
        Then: InsufficientBalanceError with requested/available, ledger unchanged
        """
        ledger.add_grant("A", 30, timestamps[0])
        ledger.add_grant("B", 20, timestamps[1])
        before = ledger.payer_balances()

        with pytest.raises(InsufficientBalanceError) as exc_info:
            ledger.spend(51)

        assert exc_info.value.requested == 51
        assert exc_info.value.available == 50
        assert "51" in str(exc_info.value)
        assert ledger.payer_balances() == before
        assert [g.points for g in ledger.grants] == [30, 20]

    @pytest.mark.critical
    def test_empty_ledger_rejects_spend(self, ledger):
        with pytest.raises(InsufficientBalanceError):
            ledger.spend(1)

    @pytest.mark.critical
    @pytest.mark.parametrize("amount", [0, -1, -500])
    def test_non_positive_spend_is_noop(self, ledger, timestamps, amount):
        """
        Test: Zero or negative spend returns an empty report
        """
        ledger.add_grant("A", 100, timestamps[0])

        assert ledger.spend(amount) == []
        assert ledger.payer_balance("A") == 100


class TestPayerGuard:
    """Test grants that would overdraw a payer are skipped"""

    @pytest.mark.critical
    def test_guard_skips_grant_that_would_overdraw_payer(self, ledger, timestamps):
        """
        Test: A payer with a pending adjustment is passed over

        Given: X 100 at t1, Y 100 at t2, X -60 at t3 (X nets 40)
        When: 50 points are spent
        Then: X's grant is skipped (taking it would leave X at -60)
        And: Y is debited instead
        """
        grant_x = ledger.add_grant("X", 100, timestamps[0])
        ledger.add_grant("Y", 100, timestamps[1])
        ledger.add_grant("X", -60, timestamps[2])

        report = ledger.spend(50)

        assert as_pairs(report) == [("Y", -50)]
        assert grant_x.points == 100
        assert ledger.payer_balances() == {"X": 40, "Y": 50}

    @pytest.mark.critical
    def test_guard_can_leave_spend_under_satisfied(self, quiet_ledger, mock_logger, timestamps):
        """
        Test: Guard skips are silent and may leave the request unmet

        Given: X 100 at t1 and X -60 at t2 (total 40)
        When: 40 points are spent
        Then: The 100 grant is skipped, the adjustment is absorbed
        And: No error is raised; a warning is logged
        """
        grant_x = quiet_ledger.add_grant("X", 100, timestamps[0])
        adjustment = quiet_ledger.add_grant("X", -60, timestamps[1])

        report = quiet_ledger.spend(40)

        assert as_pairs(report) == [("X", 60)]
        assert grant_x.points == 100
        assert adjustment.points == 0
        mock_logger.warning.assert_called_once()


class TestAllocatorDirect:
    """Test SpendAllocator without a ledger"""

    @pytest.mark.critical
    def test_allocate_mutates_grants_in_place(self, mock_logger, timestamps):
        grants = [
            Grant("B", 100, timestamps[1]),
            Grant("A", 100, timestamps[0]),
        ]

        report = SpendAllocator(logger=mock_logger).allocate(grants, 150)

        assert as_pairs(report) == [("A", -100), ("B", -50)]
        assert [(g.payer, g.points) for g in grants] == [("B", 50), ("A", 0)]
        mock_logger.warning.assert_not_called()
