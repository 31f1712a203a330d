"""Tests for provador.core.tiers — tier selection and candidate ordering."""

from __future__ import annotations

import pytest

from provador.core.tiers import EscalationTier, candidate_tiers, tier_for_retry_count

FAST = EscalationTier.FAST
BALANCED = EscalationTier.BALANCED
PREMIUM = EscalationTier.PREMIUM


class TestTierForRetryCount:
    """Test retry count → starting tier mapping."""

    @pytest.mark.parametrize(
        "retry_count, expected",
        [(0, FAST), (1, BALANCED), (2, PREMIUM), (3, PREMIUM), (50, PREMIUM)],
    )
    def test_mapping(self, retry_count, expected):
        assert tier_for_retry_count(retry_count) is expected

    def test_negative_rejected(self):
        """Negative retry counts are invalid."""
        with pytest.raises(ValueError, match="non-negative"):
            tier_for_retry_count(-1)


class TestCandidateTiers:
    """Test escalation order from each starting tier."""

    def test_from_fast(self):
        assert candidate_tiers(FAST) == [FAST, BALANCED, PREMIUM]

    def test_from_balanced(self):
        assert candidate_tiers(BALANCED) == [BALANCED, PREMIUM]

    def test_from_premium(self):
        assert candidate_tiers(PREMIUM) == [PREMIUM]

    def test_never_includes_lower_tiers(self):
        """No candidate list contains a tier ranked below its start."""
        for start in EscalationTier:
            assert all(tier.rank >= start.rank for tier in candidate_tiers(start))

    def test_retry_counts_compose(self):
        """Retry 0, 1, 2 should start from successively higher tiers."""
        plans = [candidate_tiers(tier_for_retry_count(n)) for n in range(3)]
        assert [len(plan) for plan in plans] == [3, 2, 1]


class TestEscalationTier:
    """Test tier values and ranks."""

    def test_string_values(self):
        assert [tier.value for tier in EscalationTier] == ["fast", "balanced", "premium"]

    def test_ranks_increase(self):
        assert FAST.rank < BALANCED.rank < PREMIUM.rank
