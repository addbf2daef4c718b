import pytest

from cli.stereo_driver import create_cli
from utils.cli import EXIT_DEVICE_ERROR
from vision.pointcloud import PointCloudGenerator


def test_capture_command_saves_clouds(tmp_path):
    create_cli().run(
        ["capture", "--output", str(tmp_path), "--count", "2"],
        track_exceptions=False,
    )
    files = sorted(tmp_path.glob("*.ply"))
    assert len(files) == 2
    assert PointCloudGenerator.load_ply(files[0]).shape[1] == 3


def test_run_command_records_for_duration(tmp_path):
    create_cli().run(
        ["run", "--fps", "50", "--cloud", "--record", str(tmp_path), "--duration", "0.3"],
        track_exceptions=False,
    )
    assert list((tmp_path / "depth" / "points").glob("*.ply"))


def test_config_option_selects_device(tmp_path):
    config = tmp_path / "driver.yaml"
    config.write_text("driver:\n  serial: '000000'\n")
    with pytest.raises(SystemExit) as exc_info:
        create_cli().run(
            ["capture", "--config", str(config), "--output", str(tmp_path)],
            track_exceptions=False,
        )
    assert exc_info.value.code == EXIT_DEVICE_ERROR
    assert not list(tmp_path.glob("*.ply"))


def test_unknown_backend_is_rejected():
    with pytest.raises(SystemExit):
        create_cli().run(["info", "--backend", "usb"], track_exceptions=False)
