import fakeredis
import redis

from ball_vision.config import TelemetryConfig
from ball_vision.geometry import BoundingBox
from ball_vision.telemetry import RedisTelemetryStore, TelemetryPublisher


def make_store():
    return RedisTelemetryStore(TelemetryConfig(), client=fakeredis.FakeRedis(decode_responses=True))


def test_publish_writes_text_form():
    store = make_store()
    publisher = TelemetryPublisher(store, "BallPosition")

    publisher.publish(BoundingBox(10, 20, 40, 60))

    assert store.get_string("BallPosition") == "{10, 20, 40x60}"


def test_publish_overwrites_previous_value():
    store = make_store()
    publisher = TelemetryPublisher(store, "BallPosition")

    publisher.publish(BoundingBox(10, 20, 40, 60))
    publisher.publish(BoundingBox(1, 2, 3, 4))

    assert store.get_string("BallPosition") == "{1, 2, 3x4}"


def test_missing_key_reads_none():
    assert make_store().get_string("BallPosition") is None


def test_write_failure_is_logged_not_raised(caplog):
    class DownRedis:
        def set(self, key, value):
            raise redis.ConnectionError("connection refused")

    store = RedisTelemetryStore(TelemetryConfig(), client=DownRedis())

    TelemetryPublisher(store, "BallPosition").publish(BoundingBox(0, 0, 1, 1))

    assert "Failed to write telemetry key 'BallPosition'" in caplog.text
