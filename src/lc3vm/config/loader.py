import yaml
from typing import Any, Dict

from .models import START_MODES, MachineConfig

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

class ConfigError(ValueError):
    pass

class ConfigLoader:
    def load_from_file(self, path: str) -> MachineConfig:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return self.parse_config(data or {})

    def parse_config(self, data: Dict[str, Any]) -> MachineConfig:
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping.")

        defaults = MachineConfig()
        keyboard = data.get("keyboard") or {}
        if not isinstance(keyboard, dict):
            raise ConfigError("'keyboard' must be a mapping with 'status' and 'data' addresses.")

        start_mode = str(data.get("start_mode", defaults.start_mode)).lower()
        if start_mode not in START_MODES:
            raise ConfigError(f"Invalid start_mode: {start_mode} (expected one of {', '.join(START_MODES)})")

        log_level = str(data.get("log_level", defaults.log_level)).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"Invalid log_level: {log_level}")

        return MachineConfig(
            origin_pc=self._parse_word(data.get("origin_pc", defaults.origin_pc)),
            keyboard_status=self._parse_word(keyboard.get("status", defaults.keyboard_status)),
            keyboard_data=self._parse_word(keyboard.get("data", defaults.keyboard_data)),
            start_mode=start_mode,
            history_length=self._parse_int(data.get("history_length", defaults.history_length)),
            prompt=str(data.get("prompt", defaults.prompt)),
            trace=bool(data.get("trace", defaults.trace)),
            log_level=log_level,
        )

    def _parse_word(self, value: Any) -> int:
        number = self._parse_int(value)
        if not 0 <= number <= 0xFFFF:
            raise ConfigError(f"Value out of 16-bit range: {value}")
        return number

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                if value.lower().startswith("x"):
                    return int(value[1:], 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")
