from core.models import Prediction
from core.sink import PredictionSink

CAT = (Prediction("cat", 0.9),)
DOG = (Prediction("dog", 0.6), Prediction("cat", 0.3))


def test_current_is_none_until_first_publish():
    assert PredictionSink().current() is None


def test_publish_replaces_wholesale():
    sink = PredictionSink()
    sink.publish(DOG)
    sink.publish(CAT)
    assert sink.current() == CAT


def test_subscribers_notified_with_new_value():
    sink = PredictionSink()
    seen = []
    sink.subscribe(seen.append)
    sink.publish(CAT)
    sink.publish(DOG)
    assert seen == [CAT, DOG]


def test_dispatcher_controls_delivery_context():
    sink = PredictionSink()
    queued = []
    seen = []
    sink.subscribe(seen.append, dispatcher=queued.append)
    sink.publish(CAT)
    assert seen == []
    for fn in queued:
        fn()
    assert seen == [CAT]


def test_failing_subscriber_does_not_block_others():
    sink = PredictionSink()
    seen = []

    def broken(_):
        raise ValueError("boom")

    sink.subscribe(broken)
    sink.subscribe(seen.append)
    sink.publish(CAT)
    assert seen == [CAT]
    assert sink.current() == CAT


def test_unsubscribe():
    sink = PredictionSink()
    seen = []
    unsubscribe = sink.subscribe(seen.append)
    assert sink.subscriber_count() == 1
    unsubscribe()
    unsubscribe()
    sink.publish(CAT)
    assert seen == []
    assert sink.subscriber_count() == 0
