import datetime as dt
import unittest

from fastapi.testclient import TestClient

from commute_helper.data_sources.base import CallableTransitDataSource
from commute_helper.domain import FetchResult, Processor
from commute_helper.main import app as fastapi_app

MONDAY_EVEN = dt.datetime(2024, 1, 8, 8, 30)
SATURDAY = dt.datetime(2024, 1, 6, 8, 30)

PAYLOAD = {
    "busStopId": "1001",
    "wmataApiKey": "wmata-key",
    "googleApiKey": "google-key",
    "places": {
        "home": {"lat": 38.9, "lon": -77.03},
        "destinations": [{"name": "Work", "lat": 38.89, "lon": -77.0}],
    },
}


def _fake_source(calls):
    def next_bus(cfg):
        calls.append("next_bus")
        return FetchResult.ok({"Predictions": []}, Processor.BUS_PREDICTIONS)

    def stop_schedule(cfg):
        calls.append("stop_schedule")
        return FetchResult.ok({"predictions": []}, Processor.STOP_SCHEDULE)

    def commute_time(cfg, dest):
        calls.append(f"commute_time:{dest.name}")
        return FetchResult.ok({"routes": []}, Processor.COMMUTE, name=dest.name)

    return CallableTransitDataSource(next_bus=next_bus, stop_schedule=stop_schedule, commute_time=commute_time)


class TestApi(unittest.TestCase):
    def setUp(self):
        import commute_helper.api as api_mod
        from commute_helper.config import settings

        self.api_mod = api_mod
        self.settings = settings
        self._orig_source = api_mod.NODE_HELPER.data_source
        self._orig_clock = api_mod.NODE_HELPER.clock
        self._orig_api_key = settings.api_key
        self._orig_redis = api_mod._redis_client
        self.calls = []
        api_mod.NODE_HELPER.data_source = _fake_source(self.calls)
        api_mod.NODE_HELPER.clock = lambda: MONDAY_EVEN
        settings.api_key = None
        api_mod._redis_client = None
        self.client = TestClient(fastapi_app)

    def tearDown(self):
        self.api_mod.NODE_HELPER.data_source = self._orig_source
        self.api_mod.NODE_HELPER.clock = self._orig_clock
        self.settings.api_key = self._orig_api_key
        self.api_mod._redis_client = self._orig_redis

    def test_health(self):
        resp = self.client.get("/v1/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_fetch_stop_schedule_returns_bus_stop_data(self):
        resp = self.client.post(
            "/v1/notifications",
            json={"notification": "MMM-WmataBusSchedule-FETCH_STOP_SCHEDULE", "payload": PAYLOAD},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["notifications"],
            [
                {
                    "notification": "MMM-WmataBusSchedule-BUS_STOP_DATA",
                    "payload": {"data": {"predictions": []}, "processor": "processStopData", "success": True},
                }
            ],
        )

    def test_fetch_commute_returns_ordered_results(self):
        resp = self.client.post("/v1/notifications", json={"notification": "FETCH_COMMUTE", "payload": PAYLOAD})
        self.assertEqual(resp.status_code, 200)
        notifications = resp.json()["notifications"]
        self.assertEqual(notifications[0]["notification"], "MMM-WmataBusSchedule-COMMUTE_DATA")
        self.assertEqual(
            [r["processor"] for r in notifications[0]["payload"]],
            ["processBusPredictorData", "processCommuteData"],
        )

    def test_outside_schedule_tears_down(self):
        self.api_mod.NODE_HELPER.clock = lambda: SATURDAY
        payload = dict(PAYLOAD, schedule={"days": [1, 2, 3, 4, 5], "times": {"start": "08:00", "stop": "09:00"}})

        resp = self.client.post("/v1/notifications", json={"notification": "FETCH_COMMUTE", "payload": payload})

        self.assertEqual(
            resp.json()["notifications"],
            [{"notification": "MMM-WmataBusSchedule-TEAR-DOWN-DOM", "payload": None}],
        )
        self.assertEqual(self.calls, [])

    def test_unknown_notification_is_400(self):
        resp = self.client.post("/v1/notifications", json={"notification": "FETCH_WEATHER", "payload": PAYLOAD})
        self.assertEqual(resp.status_code, 400)

    def test_invalid_payload_is_422(self):
        resp = self.client.post(
            "/v1/notifications",
            json={"notification": "FETCH_COMMUTE", "payload": {"busStopId": "1001"}},
        )
        self.assertEqual(resp.status_code, 422)

    def test_dropped_batch_returns_empty_list(self):
        def boom(cfg):
            raise ConnectionError("unreachable")

        self.api_mod.NODE_HELPER.data_source.next_bus = boom
        resp = self.client.post("/v1/notifications", json={"notification": "FETCH_COMMUTE", "payload": PAYLOAD})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"notifications": []})


class FakeRedis:
    def __init__(self, members):
        self.members = members

    def sismember(self, key, value):
        return value in self.members.get(key, set())


class TestApiKeyGuard(unittest.TestCase):
    def setUp(self):
        import commute_helper.api as api_mod
        from commute_helper.config import settings

        self.api_mod = api_mod
        self.settings = settings
        self._orig_api_key = settings.api_key
        self._orig_redis = api_mod._redis_client
        self.client = TestClient(fastapi_app)

    def tearDown(self):
        self.settings.api_key = self._orig_api_key
        self.api_mod._redis_client = self._orig_redis

    def test_missing_key_is_401_when_key_configured(self):
        self.settings.api_key = "secret"
        self.api_mod._redis_client = None
        self.assertEqual(self.client.get("/v1/health").status_code, 401)

    def test_static_key_accepted(self):
        self.settings.api_key = "secret"
        self.api_mod._redis_client = None
        resp = self.client.get("/v1/health", headers={"X-API-Key": "secret"})
        self.assertEqual(resp.status_code, 200)

    def test_wrong_key_rejected(self):
        self.settings.api_key = "secret"
        self.api_mod._redis_client = None
        resp = self.client.get("/v1/health", headers={"X-API-Key": "nope"})
        self.assertEqual(resp.status_code, 401)

    def test_redis_key_accepted(self):
        self.settings.api_key = None
        self.api_mod._redis_client = FakeRedis({self.settings.api_key_redis_set: {"mirror-key"}})
        resp = self.client.get("/v1/health", headers={"X-API-Key": "mirror-key"})
        self.assertEqual(resp.status_code, 200)


if __name__ == "__main__":
    unittest.main()
