import itertools

import pytest

from driver import CallbackBinding, OutputRequest, RunState
from utils.error_tracker import InvalidCombinationError, StartFailedError
from utils.settings import topics

IMAGE_TOPICS = [topics.left_raw, topics.right_raw, topics.left_rect, topics.right_rect]


@pytest.mark.parametrize(
    "cloud, images, expected",
    [
        (True, True, CallbackBinding.CLOUD_AND_IMAGES),
        (False, True, CallbackBinding.IMAGES_ONLY),
        (True, False, CallbackBinding.CLOUD_ONLY),
        (False, False, CallbackBinding.NONE),
    ],
)
def test_binding_precedence(cloud, images, expected):
    assert OutputRequest(cloud, images).binding() is expected


def test_non_boolean_request_rejected():
    with pytest.raises(InvalidCombinationError):
        OutputRequest("yes", False)


def test_idle_reconfigure_keeps_idle(router, session, camera):
    assert router.reconfigure(OutputRequest(True, False)) is CallbackBinding.CLOUD_ONLY
    assert router.binding is CallbackBinding.CLOUD_ONLY
    assert session.state is RunState.IDLE
    assert camera.calls["start"] == 0
    assert camera.calls["stop"] == 0


def test_streaming_switch_pauses_once(router, session, camera):
    router.reconfigure(OutputRequest(False, True))
    session.start()
    camera.calls.clear()
    router.reconfigure(OutputRequest(True, True))
    assert camera.calls["stop"] == 1
    assert camera.calls["disconnect"] == 1
    assert camera.calls["register_callback"] == 1
    assert camera.calls["start"] == 1
    assert router.binding is CallbackBinding.CLOUD_AND_IMAGES
    assert session.state is RunState.STREAMING


def test_at_most_one_binding_for_any_sequence(router, session, camera):
    requests = [OutputRequest(c, i) for c, i in itertools.product([True, False], repeat=2)]
    session.start(allow_unbound=True)
    for req in requests + requests[::-1] + requests:
        router.reconfigure(req)
        expected = 0 if router.binding is CallbackBinding.NONE else 1
        assert camera.connection_count == expected
        assert session.is_streaming


def test_repeated_request_does_not_duplicate(router, session, camera, sink):
    router.reconfigure(OutputRequest(True, True))
    router.reconfigure(OutputRequest(True, True))
    assert router.binding is CallbackBinding.CLOUD_AND_IMAGES
    assert camera.connection_count == 1
    session.start()
    camera.trigger()
    assert len(sink.on(topics.cloud)) == 1


def test_none_binding_streams_nothing(router, session, camera, sink):
    router.reconfigure(OutputRequest(True, False))
    session.start()
    router.reconfigure(OutputRequest(False, False))
    assert router.binding is CallbackBinding.NONE
    assert session.is_streaming
    assert camera.trigger() == 0
    assert sink.messages == []


def test_cloud_only_publishes_cloud(router, session, camera, sink):
    router.reconfigure(OutputRequest(True, False))
    session.start()
    camera.trigger()
    assert sink.topics == [topics.cloud]
    cloud = sink.messages[0].payload
    assert cloud.frame_id == "camera_link"
    assert cloud.points.shape == (50, 3)


def test_images_only_publishes_stereo_with_info(router, session, camera, sink):
    router.reconfigure(OutputRequest(False, True))
    session.start()
    camera.trigger()
    assert sink.topics == IMAGE_TOPICS
    left_raw = sink.on(topics.left_raw)[0]
    assert left_raw.info is not None
    assert left_raw.info.frame_id == "camera_link"
    assert sink.on(topics.left_rect)[0].info is None
    assert camera.calls["get_camera_info"] == 2


def test_cloud_and_images_publishes_everything(router, session, camera, sink):
    router.reconfigure(OutputRequest(True, True))
    session.start()
    camera.trigger()
    camera.trigger()
    assert sink.topics[:7] == IMAGE_TOPICS + [
        topics.left_info,
        topics.right_info,
        topics.cloud,
    ]
    assert len(sink.messages) == 14
    # calibration is fetched for every frame
    assert camera.calls["get_camera_info"] == 4
    assert router.frames_delivered == 2


def test_sink_failure_stays_on_device_thread(router, session, camera, sink):
    def broken(topic, cloud):
        raise RuntimeError("transport down")

    sink.publish_cloud = broken
    router.reconfigure(OutputRequest(True, False))
    session.start()
    camera.trigger()
    assert router.frames_delivered == 0
    assert session.is_streaming


def test_resume_failure_is_fatal_without_rollback(router, session, camera):
    router.reconfigure(OutputRequest(True, False))
    session.start()
    camera.fail_start = True
    with pytest.raises(StartFailedError):
        router.reconfigure(OutputRequest(False, True))
    assert router.binding is CallbackBinding.IMAGES_ONLY
    assert session.state is RunState.IDLE
