"""Tests for supply accounting and token id allocation from the ledger."""

from django.test import TestCase

from core.errors import CapacityExceeded
from core.models import MintStatus
from core.supply import (
	check_capacity, max_token_id, next_token_id, phase_capacity, phase_for_token_id,
	phase_minted_count, previous_phase_max_token_id, total_minted_count, wallet_minted_count,
)
from core.tests.helpers import WALLET_A, fixed_phase, ledger_row, make_config, rollover_phase


class PhaseCapacityTests(TestCase):
	def test_fixed_range_capacity(self):
		config = make_config(fixed_phase(start_token_id=6, end_token_id=10))
		self.assertEqual(phase_capacity(config, 0), 5)

	def test_rollover_capacity_from_max_token_supply(self):
		config = make_config(fixed_phase(), rollover_phase(max_token_supply=7, end_token_id=None))
		self.assertEqual(phase_capacity(config, 1), 7)

	def test_rollover_capacity_from_end_token_id_and_previous_max(self):
		config = make_config(fixed_phase(start_token_id=1, end_token_id=10), rollover_phase(end_token_id=20))
		ledger_row(9)
		ledger_row(10, status=MintStatus.FAILED)
		self.assertEqual(previous_phase_max_token_id(config, 1), 10)
		self.assertEqual(phase_capacity(config, 1), 10)
		self.assertEqual(next_token_id(config, 1), 11)

	def test_rollover_without_previous_mints_starts_at_previous_range_start(self):
		config = make_config(fixed_phase(start_token_id=6, end_token_id=10), rollover_phase(end_token_id=20))
		self.assertEqual(previous_phase_max_token_id(config, 1), 5)
		self.assertEqual(next_token_id(config, 1), 6)

	def test_chained_rollover_walks_back_to_last_minted_phase(self):
		config = make_config(
			fixed_phase(start_token_id=1, end_token_id=10),
			rollover_phase(max_token_supply=5, end_token_id=None),
			rollover_phase(name="Late", start_time=3001, end_time=4000, max_token_supply=5, end_token_id=None),
		)
		ledger_row(4)
		self.assertEqual(next_token_id(config, 2), 5)


class MintedCountTests(TestCase):
	def setUp(self):
		self.config = make_config(fixed_phase(), rollover_phase())

	def test_pending_and_succeeded_count_failed_does_not(self):
		ledger_row(6, status=MintStatus.SUCCEEDED)
		ledger_row(7, status=MintStatus.PENDING)
		ledger_row(8, status=MintStatus.FAILED)
		self.assertEqual(phase_minted_count(self.config, 0), 2)
		self.assertEqual(total_minted_count(self.config), 2)

	def test_counts_are_scoped_to_phase_and_wallet(self):
		ledger_row(6, wallet=WALLET_A)
		ledger_row(11, phase=1, wallet=WALLET_A)
		ledger_row(12, phase=1)
		self.assertEqual(phase_minted_count(self.config, 1), 2)
		self.assertEqual(wallet_minted_count(self.config, WALLET_A, 1), 1)
		self.assertEqual(total_minted_count(self.config), 3)


class CheckCapacityTests(TestCase):
	def test_full_phase_raises(self):
		config = make_config(fixed_phase(start_token_id=6, end_token_id=7))
		ledger_row(6)
		check_capacity(config, 0)
		ledger_row(7, status=MintStatus.PENDING)
		with self.assertRaises(CapacityExceeded) as ctx:
			check_capacity(config, 0)
		self.assertIn("Presale", ctx.exception.message)

	def test_global_cap_raises_across_phases(self):
		config = make_config(fixed_phase(), rollover_phase(), global_cap=2)
		ledger_row(6)
		ledger_row(11, phase=1)
		with self.assertRaises(CapacityExceeded) as ctx:
			check_capacity(config, 1)
		self.assertIn("all phases", ctx.exception.message)


class NextTokenIdTests(TestCase):
	def setUp(self):
		self.config = make_config(fixed_phase(start_token_id=6, end_token_id=10))

	def test_first_id_is_range_start(self):
		self.assertIsNone(max_token_id(self.config, 0))
		self.assertEqual(next_token_id(self.config, 0), 6)

	def test_failed_ids_are_never_reissued(self):
		ledger_row(6, status=MintStatus.FAILED)
		self.assertEqual(next_token_id(self.config, 0), 7)

	def test_exhausted_range_raises_even_with_capacity_left(self):
		ledger_row(9, status=MintStatus.FAILED)
		ledger_row(10, status=MintStatus.FAILED)
		check_capacity(self.config, 0)
		with self.assertRaises(CapacityExceeded):
			next_token_id(self.config, 0)


class PhaseForTokenIdTests(TestCase):
	def test_ledger_then_fixed_ranges(self):
		config = make_config(fixed_phase(start_token_id=6, end_token_id=10), rollover_phase())
		ledger_row(11, phase=1)
		self.assertEqual(phase_for_token_id(config, 11), 1)
		self.assertEqual(phase_for_token_id(config, 8), 0)
		self.assertIsNone(phase_for_token_id(config, 99))
