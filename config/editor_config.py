"""
Editor configuration.
Simple dataclass presets with JSON save/load, in the spirit of machine presets.
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import List
from core.palette import DEFAULT_COLORS, DEFAULT_HEIGHTS
from core.viewport import DEFAULT_FIT_MARGIN, DEFAULT_GRID_LINES, DEFAULT_PADDING
from utils.errors import ConfigError
from utils.units import Units

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    """Configuration for the editor and its 2D view."""
    name: str
    units: str = Units.METRIC.value

    # View fitting
    padding: float = DEFAULT_PADDING
    fit_margin: float = DEFAULT_FIT_MARGIN
    grid_target_lines: int = DEFAULT_GRID_LINES

    # Z-height colors
    colors: List[str] = field(default_factory=lambda: list(DEFAULT_COLORS))
    default_heights: List[float] = field(default_factory=lambda: list(DEFAULT_HEIGHTS))

    # Files offered by the open/save dialogs
    file_extensions: List[str] = field(default_factory=lambda: [".gcode", ".nc", ".ngc", ".txt"])

    @property
    def units_enum(self) -> Units:
        return Units.coerce(self.units)

    def file_filter(self) -> str:
        """Qt file-dialog filter string for the allowed extensions."""
        patterns = " ".join(f"*{ext}" for ext in self.file_extensions)
        return f"G-Code Files ({patterns});;All Files (*)"


class ConfigManager:
    """Manages editor configurations with simple presets."""

    @staticmethod
    def default() -> EditorConfig:
        """Metric CNC editing."""
        return EditorConfig(name="Default")

    @staticmethod
    def printer() -> EditorConfig:
        """3D-printer files: many thin layers, finer layer colors."""
        return EditorConfig(
            name="3D Printer",
            default_heights=[0.2, 0.4, 0.6, 0.8, 1.0],
            file_extensions=[".gcode", ".g", ".txt"],
        )

    @staticmethod
    def imperial() -> EditorConfig:
        """Files written in inches."""
        config = ConfigManager.default()
        config.name = "Imperial"
        config.units = Units.IMPERIAL.value
        return config

    @staticmethod
    def get_config(preset: str) -> EditorConfig:
        """Get configuration by preset name."""
        configs = {
            "default": ConfigManager.default,
            "metric": ConfigManager.default,
            "printer": ConfigManager.printer,
            "imperial": ConfigManager.imperial,
        }
        return configs.get(preset.lower(), ConfigManager.default)()

    @staticmethod
    def preset_names() -> List[str]:
        return ["default", "printer", "imperial"]

    @staticmethod
    def save_config(config: EditorConfig, filepath: str):
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(asdict(config), f, indent=2)

    @staticmethod
    def load_config(filepath: str, strict: bool = False) -> EditorConfig:
        """Load configuration from JSON file.

        A missing or malformed file falls back to the default preset, unless
        strict is set, in which case ConfigError is raised.
        """
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
            config = EditorConfig(**data)
            Units.coerce(config.units)
            return config
        except (OSError, ValueError, TypeError) as e:
            if strict:
                raise ConfigError(filepath, str(e)) from e
            logger.warning("Using default configuration, cannot load %s: %s", filepath, e)
            return ConfigManager.default()
