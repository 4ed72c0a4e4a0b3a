import json

from django.test import Client, TestCase

from blood.models import BloodInventory, BloodRequest
from blood.services import ledger


class ApiTestCase(TestCase):
	def setUp(self):
		self.client = Client()

	def send(self, method, path, body=None):
		kwargs = {}
		if body is not None:
			kwargs = {"data": json.dumps(body), "content_type": "application/json"}
		return getattr(self.client, method)(path, **kwargs)

	def assertEnvelope(self, response, status, success=True):
		self.assertEqual(response.status_code, status, response.content)
		body = response.json()
		self.assertEqual(body["success"], success)
		self.assertIn("message", body)
		self.assertIn("timestamp", body)
		return body


class InventoryApiTests(ApiTestCase):
	def test_create_and_list(self):
		response = self.send("post", "/api/inventory", {"bloodGroup": "O-", "unitsAvailable": 10, "minimumStock": 5, "maximumCapacity": 50})

		body = self.assertEnvelope(response, 201)
		self.assertEqual(body["data"]["bloodGroup"], "O-")
		self.assertEqual(body["data"]["stockStatus"], "ADEQUATE")
		self.assertEqual(body["data"]["stockStatusDisplay"], "Adequate")

		listing = self.assertEnvelope(self.send("get", "/api/inventory"), 200)
		self.assertEqual([row["bloodGroup"] for row in listing["data"]], ["O-"])

	def test_duplicate_group_conflict(self):
		ledger.create_group("A+", 5)
		body = self.assertEnvelope(self.send("post", "/api/inventory", {"bloodGroup": "A+", "unitsAvailable": 1}), 409, success=False)
		self.assertEqual(body["error"], "DUPLICATE_GROUP")

	def test_invalid_bounds_is_bad_request(self):
		response = self.send("post", "/api/inventory", {"bloodGroup": "A+", "unitsAvailable": 1, "minimumStock": 20, "maximumCapacity": 10})
		body = self.assertEnvelope(response, 400, success=False)
		self.assertEqual(body["error"], "INVALID_BOUNDS")

	def test_missing_fields_return_camel_case_errors(self):
		body = self.assertEnvelope(self.send("post", "/api/inventory", {"bloodGroup": "A+"}), 400, success=False)
		self.assertEqual(body["error"], "VALIDATION_ERROR")
		self.assertIn("unitsAvailable", body["errors"])

	def test_add_and_remove_units(self):
		inventory = ledger.create_group("O-", 10, 5, 50).value

		added = self.assertEnvelope(self.send("put", f"/api/inventory/{inventory.pk}/add-units", {"units": 5, "notes": "Drive"}), 200)
		self.assertEqual(added["data"]["unitsAvailable"], 15)

		removed = self.assertEnvelope(self.send("put", f"/api/inventory/{inventory.pk}/remove-units", {"units": 11}), 200)
		self.assertEqual(removed["data"]["unitsAvailable"], 4)
		self.assertEqual(removed["data"]["stockStatus"], "CRITICAL")

	def test_adjustment_errors(self):
		inventory = ledger.create_group("O-", 10, 5, 50).value

		too_many = self.assertEnvelope(self.send("put", f"/api/inventory/{inventory.pk}/add-units", {"units": 51}), 400, success=False)
		self.assertIn("units", too_many["errors"])
		short = self.assertEnvelope(self.send("put", f"/api/inventory/{inventory.pk}/remove-units", {"units": 11}), 409, success=False)
		self.assertEqual(short["error"], "INSUFFICIENT_STOCK")
		full = self.assertEnvelope(self.send("put", f"/api/inventory/{inventory.pk}/add-units", {"units": 41}), 409, success=False)
		self.assertEqual(full["error"], "CAPACITY_EXCEEDED")
		missing = self.assertEnvelope(self.send("put", "/api/inventory/9999/add-units", {"units": 1}), 404, success=False)
		self.assertEqual(missing["error"], "NOT_FOUND")

		self.assertEqual(BloodInventory.objects.get(pk=inventory.pk).units_available, 10)

	def test_update_bounds(self):
		inventory = ledger.create_group("B+", 20, 5, 50).value

		body = self.assertEnvelope(self.send("put", f"/api/inventory/{inventory.pk}", {"minimumStock": 12, "notes": "Raised"}), 200)

		self.assertEqual(body["data"]["minimumStock"], 12)
		self.assertEqual(body["data"]["maximumCapacity"], 50)
		self.assertEqual(body["data"]["notes"], "Raised")

	def test_lookup_by_group_accepts_encoded_plus(self):
		ledger.create_group("AB+", 7)

		for path in ("/api/inventory/blood-group/AB+", "/api/inventory/blood-group/AB%2B"):
			body = self.assertEnvelope(self.send("get", path), 200)
			self.assertEqual(body["data"]["bloodGroup"], "AB+")
		self.assertEnvelope(self.send("get", "/api/inventory/blood-group/O-"), 404, success=False)

	def test_status_listings_and_statistics(self):
		ledger.create_group("A+", 0)
		ledger.create_group("B+", 7)
		ledger.create_group("O+", 60)

		critical = self.assertEnvelope(self.send("get", "/api/inventory/critical"), 200)
		self.assertEqual([row["bloodGroup"] for row in critical["data"]], ["A+"])
		low = self.assertEnvelope(self.send("get", "/api/inventory/low-stock"), 200)
		self.assertEqual([row["bloodGroup"] for row in low["data"]], ["B+"])
		out = self.assertEnvelope(self.send("get", "/api/inventory/out-of-stock"), 200)
		self.assertEqual(len(out["data"]), 1)
		stats = self.assertEnvelope(self.send("get", "/api/inventory/statistics"), 200)
		self.assertEqual(stats["data"]["totalUnitsAvailable"], 67)
		availability = self.assertEnvelope(self.send("get", "/api/inventory/availability"), 200)
		self.assertEqual(availability["data"][0], {"bloodGroup": "A+", "unitsAvailable": 0, "status": "OUT_OF_STOCK", "available": False})

	def test_availability_check(self):
		ledger.create_group("O+", 8)

		body = self.assertEnvelope(self.send("get", "/api/inventory/availability/O%2B/8"), 200)
		self.assertTrue(body["data"]["available"])
		body = self.assertEnvelope(self.send("get", "/api/inventory/availability/O%2B/9"), 200)
		self.assertFalse(body["data"]["available"])
		self.assertEnvelope(self.send("get", "/api/inventory/availability/XY/1"), 400, success=False)

	def test_initialize(self):
		body = self.assertEnvelope(self.send("post", "/api/inventory/initialize"), 200)
		self.assertEqual(len(body["data"]["created"]), 8)
		self.assertEqual(BloodInventory.objects.count(), 8)

	def test_method_not_allowed(self):
		response = self.send("delete", "/api/inventory")
		body = self.assertEnvelope(response, 405, success=False)
		self.assertIn("GET", response["Allow"])
		self.assertEqual(body["error"], "METHOD_NOT_ALLOWED")

	def test_malformed_json(self):
		response = self.client.post("/api/inventory", data="{not json", content_type="application/json")
		body = self.assertEnvelope(response, 400, success=False)
		self.assertEqual(body["error"], "VALIDATION_ERROR")


class RequestApiTests(ApiTestCase):
	payload = {
		"requesterName": "Dr. Lena Ortiz",
		"contactEmail": "lena.ortiz@example.org",
		"contactPhone": "+1 555 111 2222",
		"hospitalName": "Mercy Hospital",
		"patientName": "Tom Baker",
		"medicalReason": "Trauma",
		"bloodGroup": "O-",
		"unitsRequested": 3,
		"urgencyLevel": "EMERGENCY",
	}

	def create_request(self, **overrides):
		body = self.assertEnvelope(self.send("post", "/api/requests", dict(self.payload, **overrides)), 201)
		return body["data"]

	def test_submit(self):
		data = self.create_request()

		self.assertEqual(data["status"], "PENDING")
		self.assertEqual(data["statusDisplay"], "Pending Review")
		self.assertEqual(data["urgencyLevelDisplay"], "Emergency")
		self.assertEqual(data["contactPhone"], "+15551112222")
		self.assertIsNone(data["processedAt"])

	def test_submit_validation(self):
		body = self.assertEnvelope(self.send("post", "/api/requests", dict(self.payload, unitsRequested=11)), 400, success=False)
		self.assertEqual(body["errors"]["unitsRequested"], "Maximum 10 units can be requested at once")

	def test_status_update_and_fulfilment(self):
		ledger.create_group("O-", 10, 5, 50)
		data = self.create_request()

		approved = self.assertEnvelope(
			self.send("put", f"/api/requests/{data['id']}/status", {"status": "approved", "adminNotes": "OK", "processedBy": "admin"}),
			200,
		)
		self.assertEqual(approved["data"]["status"], "APPROVED")
		self.assertEqual(approved["data"]["processedBy"], "admin")

		fulfilled = self.assertEnvelope(
			self.send("put", f"/api/requests/{data['id']}/status", {"status": "FULFILLED", "processedBy": "admin"}),
			200,
		)
		self.assertEqual(fulfilled["data"]["status"], "FULFILLED")
		self.assertEqual(BloodInventory.objects.get(blood_group="O-").units_available, 7)

		illegal = self.assertEnvelope(self.send("put", f"/api/requests/{data['id']}/cancel", {"reason": "late"}), 409, success=False)
		self.assertEqual(illegal["error"], "ILLEGAL_TRANSITION")

	def test_status_update_requires_known_status_and_processor(self):
		data = self.create_request()

		body = self.assertEnvelope(self.send("put", f"/api/requests/{data['id']}/status", {"status": "LOST"}), 400, success=False)
		self.assertIn("status", body["errors"])
		self.assertIn("processedBy", body["errors"])

	def test_approve_fulfill_conflict_leaves_request_pending(self):
		ledger.create_group("O-", 2, 1, 50)
		data = self.create_request()

		body = self.assertEnvelope(self.send("put", f"/api/requests/{data['id']}/approve-fulfill", {"processedBy": "admin"}), 409, success=False)

		self.assertEqual(body["error"], "INSUFFICIENT_STOCK")
		self.assertEqual(BloodRequest.objects.get(pk=data["id"]).status, BloodRequest.Status.PENDING)

	def test_cancel_and_audit(self):
		data = self.create_request()

		cancelled = self.assertEnvelope(self.send("put", f"/api/requests/{data['id']}/cancel", {"reason": "Duplicate"}), 200)
		self.assertEqual(cancelled["data"]["processedBy"], "System")

		audit = self.assertEnvelope(self.send("get", f"/api/requests/{data['id']}/audit"), 200)
		self.assertEqual([entry["action"] for entry in audit["data"]], ["SUBMIT_REQUEST", "CANCEL_REQUEST"])
		self.assertEqual(audit["data"][1]["statusAfter"], "CANCELLED")

	def test_queries(self):
		first = self.create_request()
		self.create_request(urgencyLevel="NORMAL", bloodGroup="A+", hospitalName="Lakeside Clinic", patientName="Ann Lee")

		pending = self.assertEnvelope(self.send("get", "/api/requests/pending"), 200)
		self.assertEqual(len(pending["data"]), 2)
		emergency = self.assertEnvelope(self.send("get", "/api/requests/emergency"), 200)
		self.assertEqual([row["id"] for row in emergency["data"]], [first["id"]])
		by_group = self.assertEnvelope(self.send("get", "/api/requests/blood-group/A%2B"), 200)
		self.assertEqual(len(by_group["data"]), 1)
		by_status = self.assertEnvelope(self.send("get", "/api/requests/status/PENDING"), 200)
		self.assertEqual(len(by_status["data"]), 2)
		self.assertEnvelope(self.send("get", "/api/requests/status/NOPE"), 400, success=False)
		by_email = self.assertEnvelope(self.send("get", "/api/requests/email/LENA.ORTIZ@example.org"), 200)
		self.assertEqual(len(by_email["data"]), 2)
		hospital = self.assertEnvelope(self.send("get", "/api/requests/search/hospital?name=lakeside"), 200)
		self.assertEqual(len(hospital["data"]), 1)
		patient = self.assertEnvelope(self.send("get", "/api/requests/search/patient?name=tom"), 200)
		self.assertEqual([row["id"] for row in patient["data"]], [first["id"]])
		self.assertEnvelope(self.send("get", "/api/requests/search/patient"), 400, success=False)
		self.assertEnvelope(self.send("get", "/api/requests/recent"), 200)
		overdue = self.assertEnvelope(self.send("get", "/api/requests/overdue"), 200)
		self.assertEqual(overdue["data"], [])

	def test_statistics(self):
		self.create_request()
		stats = self.assertEnvelope(self.send("get", "/api/requests/statistics"), 200)
		self.assertEqual(stats["data"]["pendingRequests"], 1)
		self.assertEqual(stats["data"]["emergencyRequests"], 1)
		groups = self.assertEnvelope(self.send("get", "/api/requests/statistics/blood-groups"), 200)
		self.assertEqual(groups["data"][0]["bloodGroup"], "O-")
		self.assertEqual(groups["data"][0]["pendingUnits"], 3)

	def test_get_and_delete(self):
		data = self.create_request()

		self.assertEnvelope(self.send("get", f"/api/requests/{data['id']}"), 200)
		self.assertEnvelope(self.send("delete", f"/api/requests/{data['id']}"), 200)
		missing = self.assertEnvelope(self.send("get", f"/api/requests/{data['id']}"), 404, success=False)
		self.assertEqual(missing["error"], "NOT_FOUND")


class DashboardApiTests(ApiTestCase):
	def test_endpoints(self):
		ledger.create_group("A+", 12)

		stats = self.assertEnvelope(self.send("get", "/api/dashboard/stats"), 200)
		self.assertEqual(stats["data"]["totalBloodUnits"], 12)
		summary = self.assertEnvelope(self.send("get", "/api/dashboard/summary"), 200)
		self.assertEqual(summary["data"]["availability"][0]["bloodGroup"], "A+")
		self.assertEqual(summary["data"]["health"], "HEALTHY")
		health = self.assertEnvelope(self.send("get", "/api/dashboard/health"), 200)
		self.assertEqual(health["data"], {"status": "HEALTHY"})
