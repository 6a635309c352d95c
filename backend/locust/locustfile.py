"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags extension    # Test extensions racing new bookings
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
import uuid
from locust import HttpUser, task, between, tag, events
from datetime import date, timedelta

# Shared state
BOOKING_IDS = []
CONTESTED_UNIT = f"load-unit-{uuid.uuid4().hex[:6]}"
CONTESTED_CHECK_IN = (date.today() + timedelta(days=30)).isoformat()


def random_guest():
    return "guest_" + "".join(random.choices(string.ascii_lowercase, k=10))


def future_date(min_days=1, max_days=365):
    return (date.today() + timedelta(days=random.randint(min_days, max_days))).isoformat()


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "="*60)
    print(f"SETUP: contested unit {CONTESTED_UNIT}, check-in {CONTESTED_CHECK_IN}")
    print("="*60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - every user wants the same unit and nights

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings WHERE unit_id = '<contested unit>';
    Should be exactly 1
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.guest_name = random_guest()

    @tag("concurrency")
    @task
    def book_contested_unit(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "guest_name": self.guest_name,
                "unit_id": CONTESTED_UNIT,
                "check_in_date": CONTESTED_CHECK_IN,
                "number_of_nights": 3,
            },
            name="/api/v1/bookings/ [contested]",
            catch_response=True
        ) as resp:
            if resp.status_code in (200, 400):
                resp.success()  # 400: unit taken or guest already booked
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ExtensionUser(HttpUser):
    """
    TEST 2: Extensions - each user books a short stay in a shared pool of
    units and keeps extending it into whatever nights are still free.

    Run: locust -f locustfile.py --tags extension -u 50 -r 10 --run-time 60s

    After test, verify no unit has overlapping rows:
      SELECT a.id, b.id FROM bookings a JOIN bookings b
        ON a.unit_id = b.unit_id AND a.id < b.id
       AND a.check_in_date < b.check_out_date AND b.check_in_date < a.check_out_date;
    Should return no rows
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.booking_id = None
        resp = self.client.post("/api/v1/bookings/", json={
            "guest_name": random_guest(),
            "unit_id": f"pool-{random.randint(1, 5)}",
            "check_in_date": future_date(10, 60),
            "number_of_nights": 1,
        })
        if resp.status_code == 200:
            self.booking_id = resp.json()["id"]
            BOOKING_IDS.append(self.booking_id)

    @tag("extension")
    @task(5)
    def extend_stay(self):
        if not self.booking_id:
            return
        with self.client.put(f"/api/v1/bookings/{self.booking_id}",
            json={"number_of_nights": random.randint(0, 2)},
            name="/api/v1/bookings/{id} [extend]",
            catch_response=True
        ) as resp:
            if resp.status_code in (200, 400):
                resp.success()  # 400: ran into the next booking
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("extension", "read")
    @task(1)
    def read_booking(self):
        if BOOKING_IDS:
            self.client.get(f"/api/v1/bookings/{random.choice(BOOKING_IDS)}",
                name="/api/v1/bookings/{id}")

    @tag("extension")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def past_check_in(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "guest_name": random_guest(),
                "unit_id": "edge-unit",
                "check_in_date": (date.today() - timedelta(days=3)).isoformat(),
                "number_of_nights": 2,
            },
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def zero_nights(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "guest_name": random_guest(),
                "unit_id": "edge-unit",
                "check_in_date": future_date(),
                "number_of_nights": 0,
            },
            catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def unparseable_date(self):
        with self.client.post("/api/v1/bookings/",
            json={
                "guest_name": random_guest(),
                "unit_id": "edge-unit",
                "check_in_date": "31/31/2031",
                "number_of_nights": 2,
            },
            catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def extend_missing_booking(self):
        with self.client.put("/api/v1/bookings/999999999",
            json={"number_of_nights": 1},
            name="/api/v1/bookings/{id} [missing]",
            catch_response=True
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def negative_extension(self):
        with self.client.put("/api/v1/bookings/1",
            json={"number_of_nights": -4},
            name="/api/v1/bookings/{id} [negative]",
            catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/bookings/",
            data="not json at all",
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])
