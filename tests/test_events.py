from argeon.core.events import EventBus, EventRecorder
from argeon.models.events import InstallCompleteEvent, InstallErrorEvent, ProgressEvent


def _progress(current: int = 1) -> ProgressEvent:
    return ProgressEvent(filename="a.jar", current=current, total=2, percentage=50)


def test_event_channel_names() -> None:
    assert ProgressEvent.event_name == "instanceCreationProgress"
    assert InstallCompleteEvent.event_name == "instanceCreationComplete"
    assert InstallErrorEvent.event_name == "instanceCreationError"


def test_progress_payload_shape() -> None:
    assert _progress().model_dump() == {
        "type": "download",
        "filename": "a.jar",
        "current": 1,
        "total": 2,
        "percentage": 50,
    }


def test_handlers_receive_only_their_events() -> None:
    bus = EventBus()
    progress, everything = [], []
    bus.subscribe(ProgressEvent.event_name, progress.append)
    bus.subscribe(EventBus.ALL, everything.append)

    bus.publish(_progress())
    bus.publish(InstallErrorEvent(error="disk full"))

    assert len(progress) == 1
    assert len(everything) == 2


def test_unsubscribe_stops_delivery() -> None:
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(ProgressEvent.event_name, seen.append)

    bus.publish(_progress(1))
    unsubscribe()
    unsubscribe()
    bus.publish(_progress(2))

    assert [e.current for e in seen] == [1]


def test_failing_handler_does_not_reach_publisher() -> None:
    bus = EventBus()
    seen = []

    def broken(event: object) -> None:
        raise RuntimeError("display went away")

    bus.subscribe(EventBus.ALL, broken)
    bus.subscribe(EventBus.ALL, seen.append)

    bus.publish(_progress())

    assert len(seen) == 1


def test_recorder_filters_by_type() -> None:
    bus = EventBus()
    recorder = EventRecorder(bus)

    bus.publish(_progress())
    bus.publish(InstallCompleteEvent(instanceName="Pack", path="/tmp/Pack"))
    recorder.close()
    bus.publish(_progress(2))

    assert len(recorder.events) == 2
    assert [e.instanceName for e in recorder.of_type(InstallCompleteEvent)] == ["Pack"]
