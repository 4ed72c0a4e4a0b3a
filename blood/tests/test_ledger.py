import threading

from django.db import connection
from django.test import TestCase, TransactionTestCase, override_settings

from blood.models import ActionAuditLog, BloodInventory, StockStatus, derive_stock_status, parse_blood_group
from blood.results import ErrorKind
from blood.services import ledger


class DeriveStockStatusTests(TestCase):
	def test_priority_order(self):
		self.assertEqual(derive_stock_status(0, 5), StockStatus.OUT_OF_STOCK)
		self.assertEqual(derive_stock_status(4, 5), StockStatus.CRITICAL)
		self.assertEqual(derive_stock_status(5, 5), StockStatus.LOW)
		self.assertEqual(derive_stock_status(9, 5), StockStatus.LOW)
		self.assertEqual(derive_stock_status(10, 5), StockStatus.ADEQUATE)

	def test_zero_units_is_out_of_stock_even_with_zero_minimum(self):
		self.assertEqual(derive_stock_status(0, 0), StockStatus.OUT_OF_STOCK)
		self.assertEqual(derive_stock_status(1, 0), StockStatus.ADEQUATE)

	@override_settings(STOCK_LOW_MULTIPLIER=3)
	def test_low_multiplier_comes_from_settings(self):
		self.assertEqual(derive_stock_status(12, 5), StockStatus.LOW)
		self.assertEqual(derive_stock_status(15, 5), StockStatus.ADEQUATE)

	def test_explicit_multiplier_overrides_settings(self):
		self.assertEqual(derive_stock_status(12, 5, low_multiplier=3), StockStatus.LOW)


class ParseBloodGroupTests(TestCase):
	def test_canonical_and_case_insensitive(self):
		self.assertEqual(parse_blood_group("AB-"), "AB-")
		self.assertEqual(parse_blood_group("o+"), "O+")

	def test_plus_decoded_to_space_is_restored(self):
		self.assertEqual(parse_blood_group("A "), "A+")
		self.assertEqual(parse_blood_group("AB "), "AB+")

	def test_unknown_literals(self):
		for raw in (None, "", "C+", "A", "O--"):
			self.assertIsNone(parse_blood_group(raw), raw)


class CreateGroupTests(TestCase):
	def test_create_derives_status_and_audits(self):
		result = ledger.create_group("O-", 10, 5, 50, notes="Opening stock", actor="admin")

		self.assertTrue(result.ok)
		inventory = result.value
		self.assertEqual(inventory.units_available, 10)
		self.assertEqual(inventory.stock_status, StockStatus.ADEQUATE)
		entry = ActionAuditLog.objects.get(entity_type=ActionAuditLog.EntityType.INVENTORY, entity_id=inventory.pk)
		self.assertEqual(entry.action, ActionAuditLog.Action.CREATE_GROUP)
		self.assertEqual(entry.units_after, 10)
		self.assertEqual(entry.actor_username, "admin")

	def test_defaults_for_bounds(self):
		inventory = ledger.create_group("A+", 0).value
		self.assertEqual(inventory.minimum_stock, 5)
		self.assertEqual(inventory.maximum_capacity, 100)
		self.assertEqual(inventory.stock_status, StockStatus.OUT_OF_STOCK)

	def test_duplicate_group_rejected(self):
		ledger.create_group("B+", 5)
		result = ledger.create_group("B+", 1)

		self.assertFalse(result.ok)
		self.assertEqual(result.error.kind, ErrorKind.DUPLICATE_GROUP)
		self.assertEqual(BloodInventory.objects.filter(blood_group="B+").count(), 1)

	def test_invalid_bounds_rejected(self):
		cases = [
			(5, 20, 10),
			(11, 5, 10),
			(-1, 5, 10),
			(1, -5, 10),
		]
		for units, minimum, maximum in cases:
			result = ledger.create_group("AB-", units, minimum, maximum)
			self.assertEqual(result.error.kind, ErrorKind.INVALID_BOUNDS, (units, minimum, maximum))
		self.assertFalse(BloodInventory.objects.exists())

	def test_unknown_group_is_validation_error(self):
		result = ledger.create_group("Z+", 1)
		self.assertEqual(result.error.kind, ErrorKind.VALIDATION_ERROR)
		self.assertIn("blood_group", result.error.fields)


class AdjustUnitsTests(TestCase):
	def setUp(self):
		self.inventory = ledger.create_group("O-", 10, 5, 50).value

	def test_remove_units_updates_status(self):
		result = ledger.remove_units("O-", 6, notes="Issued")

		self.assertTrue(result.ok)
		self.inventory.refresh_from_db()
		self.assertEqual(self.inventory.units_available, 4)
		self.assertEqual(self.inventory.stock_status, StockStatus.CRITICAL)
		self.assertEqual(self.inventory.notes, "Issued")

	def test_remove_more_than_available_changes_nothing(self):
		result = ledger.remove_units("O-", 11)

		self.assertEqual(result.error.kind, ErrorKind.INSUFFICIENT_STOCK)
		self.inventory.refresh_from_db()
		self.assertEqual(self.inventory.units_available, 10)
		self.assertFalse(ActionAuditLog.objects.filter(action=ActionAuditLog.Action.REMOVE_UNITS).exists())

	def test_add_past_capacity_is_rejected_without_clamping(self):
		result = ledger.add_units("O-", 41)

		self.assertEqual(result.error.kind, ErrorKind.CAPACITY_EXCEEDED)
		self.inventory.refresh_from_db()
		self.assertEqual(self.inventory.units_available, 10)

	def test_add_up_to_capacity(self):
		result = ledger.add_units("O-", 40, actor="nurse")

		self.assertTrue(result.ok)
		self.assertEqual(result.value.units_available, 50)
		self.assertTrue(result.value.is_at_max_capacity)
		entry = ActionAuditLog.objects.filter(action=ActionAuditLog.Action.ADD_UNITS).get()
		self.assertEqual((entry.units_before, entry.units_after, entry.units), (10, 50, 40))
		self.assertEqual(entry.status_before, StockStatus.ADEQUATE)

	def test_amount_must_be_positive_integer(self):
		for amount in (0, -3, 2.5, "4", True):
			result = ledger.add_units("O-", amount)
			self.assertEqual(result.error.kind, ErrorKind.VALIDATION_ERROR, amount)
		self.inventory.refresh_from_db()
		self.assertEqual(self.inventory.units_available, 10)

	def test_missing_group_is_not_found(self):
		self.assertEqual(ledger.add_units("A+", 1).error.kind, ErrorKind.NOT_FOUND)
		self.assertEqual(ledger.remove_units("Q+", 1).error.kind, ErrorKind.NOT_FOUND)

	def test_sequence_stays_within_bounds(self):
		for amount, removing in [(30, False), (45, True), (20, False), (20, False), (5, True), (60, True)]:
			if removing:
				ledger.remove_units("O-", amount)
			else:
				ledger.add_units("O-", amount)
			self.inventory.refresh_from_db()
			self.assertGreaterEqual(self.inventory.units_available, 0)
			self.assertLessEqual(self.inventory.units_available, self.inventory.maximum_capacity)


class UpdateBoundsTests(TestCase):
	def setUp(self):
		ledger.create_group("A-", 20, 5, 50)

	def test_update_changes_thresholds_only(self):
		result = ledger.update_bounds("A-", minimum_stock=15, maximum_capacity=60, notes="Winter levels")

		self.assertTrue(result.ok)
		inventory = result.value
		self.assertEqual((inventory.units_available, inventory.minimum_stock, inventory.maximum_capacity), (20, 15, 60))
		self.assertEqual(inventory.stock_status, StockStatus.LOW)
		self.assertTrue(ActionAuditLog.objects.filter(action=ActionAuditLog.Action.UPDATE_BOUNDS).exists())

	def test_capacity_below_stock_rejected(self):
		result = ledger.update_bounds("A-", maximum_capacity=10)

		self.assertEqual(result.error.kind, ErrorKind.INVALID_BOUNDS)
		self.assertEqual(BloodInventory.objects.get(blood_group="A-").maximum_capacity, 50)

	def test_minimum_above_capacity_rejected(self):
		self.assertEqual(ledger.update_bounds("A-", minimum_stock=51).error.kind, ErrorKind.INVALID_BOUNDS)


class QueryTests(TestCase):
	def setUp(self):
		ledger.create_group("A+", 0, 5, 100)
		ledger.create_group("B+", 3, 5, 100)
		ledger.create_group("O+", 7, 5, 100)
		ledger.create_group("O-", 40, 5, 100)

	def test_status_filters(self):
		self.assertEqual([i.blood_group for i in ledger.critical()], ["A+", "B+"])
		self.assertEqual([i.blood_group for i in ledger.out_of_stock()], ["A+"])
		self.assertEqual([i.blood_group for i in ledger.low_stock()], ["O+"])

	def test_availability_and_sufficiency(self):
		availability = {row["blood_group"]: row for row in ledger.availability()}
		self.assertFalse(availability["A+"]["available"])
		self.assertEqual(availability["O-"]["status"], StockStatus.ADEQUATE)
		self.assertTrue(ledger.has_sufficient_units("O-", 40))
		self.assertFalse(ledger.has_sufficient_units("O-", 41))
		self.assertFalse(ledger.has_sufficient_units("AB+", 1))

	def test_statistics(self):
		stats = ledger.statistics()
		self.assertEqual(stats["total_blood_groups"], 4)
		self.assertEqual(stats["total_units_available"], 50)
		self.assertEqual(stats["critical_shortage_count"], 2)
		self.assertEqual(stats["out_of_stock_count"], 1)
		self.assertEqual(stats["low_stock_count"], 1)
		self.assertEqual(stats["adequate_stock_count"], 1)
		self.assertEqual(ledger.total_units(), 50)

	def test_lookups(self):
		inventory = ledger.get_by_group("o-").value
		self.assertEqual(ledger.get_by_id(inventory.pk).value, inventory)
		self.assertEqual(ledger.get_by_id(999).error.kind, ErrorKind.NOT_FOUND)
		self.assertEqual(ledger.get_by_group("AB-").error.kind, ErrorKind.NOT_FOUND)

	def test_initialize_is_idempotent(self):
		created = ledger.initialize_blood_groups()

		self.assertEqual(sorted(created), sorted(["A-", "B-", "AB+", "AB-"]))
		self.assertEqual(ledger.initialize_blood_groups(), [])
		self.assertEqual(BloodInventory.objects.count(), 8)
		self.assertEqual(BloodInventory.objects.get(blood_group="AB-").units_available, 0)


class ConcurrentAdjustmentTests(TransactionTestCase):
	workers = 4

	def setUp(self):
		ledger.create_group("O-", 10, 5, 50)

	def run_in_parallel(self, adjust):
		start = threading.Barrier(self.workers)
		outcomes = []

		def worker():
			try:
				start.wait(timeout=10)
				outcomes.append(("ok", adjust().ok))
			except Exception as exc:
				outcomes.append(("raised", repr(exc)))
			finally:
				connection.close()

		threads = [threading.Thread(target=worker) for _ in range(self.workers)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()
		return outcomes

	def test_parallel_additions_to_one_group_all_apply(self):
		outcomes = self.run_in_parallel(lambda: ledger.add_units("O-", 5))

		self.assertEqual(outcomes, [("ok", True)] * self.workers)
		self.assertEqual(BloodInventory.objects.get(blood_group="O-").units_available, 30)
		self.assertEqual(ActionAuditLog.objects.filter(action=ActionAuditLog.Action.ADD_UNITS).count(), self.workers)

	def test_parallel_removals_never_overdraw(self):
		outcomes = self.run_in_parallel(lambda: ledger.remove_units("O-", 4))

		self.assertEqual(sorted(outcomes), [("ok", False), ("ok", False), ("ok", True), ("ok", True)])
		self.assertEqual(BloodInventory.objects.get(blood_group="O-").units_available, 2)
