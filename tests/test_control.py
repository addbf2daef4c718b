from driver import CallbackBinding, RunState
from utils.error_tracker import CameraError


def test_trigger_false_does_nothing(control, session, camera):
    assert control.capture_single_cloud(False) == (False, None)
    assert camera.calls["grab_single_cloud"] == 0
    assert session.state is RunState.IDLE


def test_capture_reports_cloud(control):
    ok, cloud = control.capture_single_cloud(True)
    assert ok
    assert len(cloud) == 50


def test_capture_failure_reported_as_false(control, camera):
    assert control.reconfigure(True, False)
    assert control.set_streaming(True)
    camera.fail_capture = True
    assert control.capture_single_cloud(True) == (False, None)
    assert control.status() == (RunState.STREAMING, CallbackBinding.CLOUD_ONLY)


def test_streaming_toggle_leaves_binding(control):
    assert control.reconfigure(False, True)
    assert control.set_streaming(True)
    assert control.status() == (RunState.STREAMING, CallbackBinding.IMAGES_ONLY)
    assert control.set_streaming(False)
    assert control.set_streaming(False)
    assert control.status() == (RunState.IDLE, CallbackBinding.IMAGES_ONLY)


def test_start_without_binding_is_refused(control):
    assert not control.set_streaming(True)
    assert control.status() == (RunState.IDLE, CallbackBinding.NONE)


def test_invalid_request_is_refused(control):
    assert not control.reconfigure(1, None)
    assert control.status() == (RunState.IDLE, CallbackBinding.NONE)


def test_close_releases_everything(control, session, camera):
    control.reconfigure(True, True)
    control.set_streaming(True)
    control.close()
    assert not session.is_open
    assert control.status() == (RunState.IDLE, CallbackBinding.NONE)
    assert camera.connection_count == 0


def test_refused_stop_reported_as_false(control, camera):
    assert control.reconfigure(True, False)
    assert control.set_streaming(True)
    camera.fail_stop = True
    assert not control.set_streaming(False)
    assert control.status() == (RunState.STREAMING, CallbackBinding.CLOUD_ONLY)
    camera.fail_stop = False
    assert control.set_streaming(False)
    assert control.status() == (RunState.IDLE, CallbackBinding.CLOUD_ONLY)


def test_refused_stop_fails_reconfigure(control, camera):
    assert control.reconfigure(True, False)
    assert control.set_streaming(True)
    camera.fail_stop = True
    assert not control.reconfigure(False, True)
    assert control.status() == (RunState.STREAMING, CallbackBinding.CLOUD_ONLY)
    camera.fail_stop = False


def test_rejected_callback_registration_reported_as_false(control, camera, monkeypatch):
    def reject(products, callback):
        raise CameraError("no free callback slot")

    monkeypatch.setattr(camera, "register_callback", reject)
    assert not control.reconfigure(True, True)
    assert control.status() == (RunState.IDLE, CallbackBinding.NONE)
