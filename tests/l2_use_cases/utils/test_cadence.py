"""Tests for cadence policy — pure function tests."""

from __future__ import annotations

import pytest

from live_scribe.l2_use_cases.utils.cadence import (
    backoff_delays,
    refine_threshold,
    remaining_spacing,
    translate_interval,
)


class TestRefineThreshold:
    @pytest.mark.parametrize(('velocity', 'expected'), [(0, 5), (20, 5), (30, 5), (31, 10), (35, 10)])
    def test_threshold_rises_with_velocity(self, velocity, expected):
        assert refine_threshold(velocity) == expected


class TestTranslateInterval:
    @pytest.mark.parametrize(('velocity', 'expected'), [(0, 0.1), (40, 0.1), (41, 0.05)])
    def test_interval_shrinks_with_velocity(self, velocity, expected):
        assert translate_interval(velocity) == expected


class TestBackoff:
    def test_default_delays(self):
        assert backoff_delays() == [1.0, 2.0, 4.0]

    def test_custom_base(self):
        assert backoff_delays(2, 0.5) == [0.5, 1.0]

    def test_zero_retries(self):
        assert backoff_delays(0) == []


class TestRemainingSpacing:
    def test_first_call_is_free(self):
        assert remaining_spacing(10.0, None, 0.15) == 0.0

    def test_waits_out_the_rest_of_the_gap(self):
        assert remaining_spacing(10.05, 10.0, 0.15) == pytest.approx(0.10)

    def test_gap_elapsed(self):
        assert remaining_spacing(10.2, 10.0, 0.15) == 0.0
