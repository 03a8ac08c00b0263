import json
import logging
import math

import pytest

from softraster.config import RenderConfig
from softraster.logger import DEFAULT_CHANNELS, LoggerConfig, RenderLogger, channel_logger
from softraster.shading import SHADE_HALF_LAMBERT, SHADE_UNLIT, shading_model


def test_render_config_defaults() -> None:
    config = RenderConfig()
    assert (config.width, config.height) == (1280, 720)
    assert config.fov == pytest.approx(2.0 * math.pi / 3.0)
    assert config.light_direction == (0.0, 0.0, -1.0)
    assert config.shading_id == SHADE_HALF_LAMBERT
    assert config.near_clip > 0.0


def test_light_direction_is_normalized() -> None:
    config = RenderConfig(light_direction=(3.0, 0.0, -4.0))
    assert config.light_direction == pytest.approx((0.6, 0.0, -0.8))
    assert config.light_array().tolist() == pytest.approx([0.6, 0.0, -0.8])


@pytest.mark.parametrize("kwargs", [
    {"width": 0},
    {"height": -5},
    {"light_direction": (0.0, 0.0, 0.0)},
    {"light_direction": (1.0, 0.0)},
    {"shading": "phong"},
])
def test_render_config_rejects_bad_values(kwargs) -> None:
    with pytest.raises(ValueError):
        RenderConfig(**kwargs)


def test_shading_model_names() -> None:
    assert shading_model("unlit") == SHADE_UNLIT
    with pytest.raises(ValueError, match="unknown shading model"):
        shading_model("toon")


def test_render_config_from_settings(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "width": 640,
        "height": 480,
        "lightDirection": [0, 2, 0],
        "shading": "unlit",
        "nearClip": 0.5,
        "logLevel": "DEBUG",
    }))
    config = RenderConfig.from_settings(path)
    assert (config.width, config.height) == (640, 480)
    assert config.light_direction == (0.0, 1.0, 0.0)
    assert config.shading_id == SHADE_UNLIT
    assert config.near_clip == 0.5
    assert config.fov == pytest.approx(2.0 * math.pi / 3.0)


def test_render_config_missing_or_broken_settings(tmp_path) -> None:
    assert RenderConfig.from_settings(tmp_path / "nope.json") == RenderConfig()
    broken = tmp_path / "settings.json"
    broken.write_text("{ width: ")
    assert RenderConfig.from_settings(broken) == RenderConfig()


def test_logger_config_from_settings(tmp_path) -> None:
    assert LoggerConfig.from_settings(tmp_path / "nope.json") == LoggerConfig()

    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logLevel": "debug", "logChannels": {"raster": True, "app": False}}))
    config = LoggerConfig.from_settings(path)
    assert config.level == logging.DEBUG
    assert config.channels["raster"] is True
    assert config.channels["app"] is False
    assert config.channels["render"] is DEFAULT_CHANNELS["render"]


def test_render_logger_channels() -> None:
    registry = RenderLogger(LoggerConfig(channels={"render": True, "raster": False}))
    assert set(registry.channels()) == {"render", "raster"}
    assert registry.channel("render").enabled
    assert not registry.channel("raster").enabled

    # unknown channels start disabled
    extra = registry.channel("physics")
    assert not extra.enabled
    registry.set_enabled("physics", True)
    assert registry.channel("physics") is extra
    assert extra.enabled


def test_disabled_channel_emits_nothing(caplog) -> None:
    log = channel_logger("testing", enabled=False)
    with caplog.at_level(logging.DEBUG, logger="softraster.testing"):
        log.info("hidden")
        log.enabled = True
        log.info("shown %d", 1)
    messages = [r.getMessage() for r in caplog.records if r.name == "softraster.testing"]
    assert messages == ["shown 1"]
    assert log.name == "testing"
