import configparser
import logging
from dataclasses import dataclass

log = logging.getLogger("mazegen.config")


@dataclass
class MazeLimits:
    """Admission limits applied before any grid is allocated."""

    min_size: int = 10
    max_width: int = 200
    max_height: int = 200
    max_cells: int = 10000
    memory_fraction: float = 0.8


class ConfigService:
    """Manages reading from and writing to the mazegen.cfg file."""

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.defaults = {
            "Maze": {
                "min_size": "10",
                "max_width": "200",
                "max_height": "200",
                "max_cells": "10000",
                "memory_fraction": "0.8",
            },
            "Server": {
                "host": "127.0.0.1",
                "port": "5000",
            },
        }

    def get_settings(self) -> dict:
        """Reads settings from the config file, applying defaults if missing."""
        config = configparser.ConfigParser()
        for section, values in self.defaults.items():
            config[section] = values

        if not config.read(self.config_path):
            log.info("Config file not found at %s. Creating with defaults.", self.config_path)
            self.save_settings(self._config_to_dict(config))

        return self._config_to_dict(config)

    def save_settings(self, settings: dict):
        """Saves a dictionary of settings to the config file."""
        config = configparser.ConfigParser()
        for section, values in settings.items():
            config[section] = {k: str(v) for k, v in values.items()}

        try:
            with open(self.config_path, "w") as configfile:
                config.write(configfile)
            log.info("Settings successfully saved to %s", self.config_path)
        except IOError as e:
            log.error("Failed to write settings to %s: %s", self.config_path, e)

    def get_limits(self) -> MazeLimits:
        """Builds the admission limits from the [Maze] section."""
        maze = self.get_settings().get("Maze", {})
        defaults = MazeLimits()
        try:
            return MazeLimits(
                min_size=int(maze.get("min_size", defaults.min_size)),
                max_width=int(maze.get("max_width", defaults.max_width)),
                max_height=int(maze.get("max_height", defaults.max_height)),
                max_cells=int(maze.get("max_cells", defaults.max_cells)),
                memory_fraction=float(maze.get("memory_fraction", defaults.memory_fraction)),
            )
        except ValueError as e:
            log.warning("Invalid [Maze] settings in %s (%s). Using defaults.", self.config_path, e)
            return defaults

    def _config_to_dict(self, config: configparser.ConfigParser) -> dict:
        """Converts a ConfigParser object to a nested dictionary."""
        return {s: dict(config.items(s)) for s in config.sections()}
