"""Renderer logging utilities with channel toggles."""

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

DEFAULT_CHANNELS = {
    "render": True,
    "raster": False,
    "assets": True,
    "app": True,
}


@dataclass
class LoggerConfig:
    """Configuration for runtime logging."""

    level: int = logging.INFO
    channels: Dict[str, bool] = field(default_factory=lambda: DEFAULT_CHANNELS.copy())

    @classmethod
    def from_settings(cls, settings_path: Path) -> "LoggerConfig":
        if not settings_path.exists():
            return cls()
        try:
            data = json.loads(settings_path.read_text())
        except json.JSONDecodeError:
            return cls()
        level_name = str(data.get("logLevel", "INFO")).upper()
        level = getattr(logging, level_name, logging.INFO)
        channels = DEFAULT_CHANNELS.copy()
        channels.update(data.get("logChannels", {}))
        return cls(level=level, channels=channels)


class ChannelLogger:
    """Wrapper that only emits records when the channel is enabled."""

    def __init__(self, name: str, logger: logging.Logger, enabled: bool):
        self._logger = logger
        self._enabled = enabled
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool):
        self._enabled = value

    def debug(self, msg: str, *args, **kwargs):
        if self._enabled:
            self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        if self._enabled:
            self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        if self._enabled:
            self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        if self._enabled:
            self._logger.error(msg, *args, **kwargs)


def channel_logger(name: str, enabled: bool = True) -> ChannelLogger:
    """Standalone channel under the `softraster` logger, without touching handlers."""
    return ChannelLogger(name, logging.getLogger(f"softraster.{name}"), enabled)


class RenderLogger:
    """Central logging registry for the renderer and its collaborators."""

    def __init__(self, config: LoggerConfig):
        logging.basicConfig(
            level=config.level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            stream=sys.stdout,
        )
        self._root = logging.getLogger("softraster")
        self._root.setLevel(config.level)
        self._channels: Dict[str, ChannelLogger] = {}
        for name, enabled in config.channels.items():
            self._channels[name] = channel_logger(name, enabled)

    def channel(self, name: str) -> ChannelLogger:
        if name not in self._channels:
            # Unknown channels start disabled until explicitly enabled.
            self._channels[name] = channel_logger(name, False)
        return self._channels[name]

    def set_enabled(self, name: str, enabled: bool):
        self.channel(name).enabled = enabled

    def channels(self) -> Iterable[str]:
        return self._channels.keys()


def init_logger(settings_path: Optional[Path] = None) -> RenderLogger:
    """Initialise a logger from settings.json."""
    settings_path = settings_path or Path("settings.json")
    config = LoggerConfig.from_settings(settings_path)
    return RenderLogger(config)


__all__ = ["RenderLogger", "LoggerConfig", "ChannelLogger", "channel_logger", "init_logger"]
