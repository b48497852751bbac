import pytest

from ball_vision.config import Config, load_config, save_example_config


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "missing.yaml"))

    assert config == Config()
    assert config.telemetry.key == "BallPosition"
    assert config.annotation.color == (255, 0, 255)
    assert config.annotation.thickness == 4
    assert config.vision.restart_on_failure is False


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(str(path)) == Config()


def test_partial_file_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "telemetry:\n"
        "  key: TargetPosition\n"
        "pipeline:\n"
        "  hsv_hue: [0, 10]\n"
        "logging:\n"
        "  level: debug\n"
    )

    config = load_config(str(path))

    assert config.telemetry.key == "TargetPosition"
    assert config.pipeline.hsv_hue == (0.0, 10.0)
    assert config.logging.level == "DEBUG"
    assert config.stream.port == 1181


@pytest.mark.parametrize("body", [
    "logging:\n  level: LOUD\n",
    "pipeline:\n  hsv_value: [200, 100]\n",
    "annotation:\n  color: [0, 0, 300]\n",
    "pipeline:\n  min_width: 50\n  max_width: 10\n",
])
def test_invalid_values_raise(tmp_path, body):
    path = tmp_path / "config.yaml"
    path.write_text(body)

    with pytest.raises(RuntimeError):
        load_config(str(path))


def test_example_config_loads(tmp_path):
    path = tmp_path / "etc" / "config.yaml"

    save_example_config(str(path))

    assert load_config(str(path)) == Config()
