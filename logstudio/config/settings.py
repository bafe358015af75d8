"""
Settings Module - Application settings and their persistence

AppSettings is an immutable value passed into the viewer; SettingsStore keeps
it in a small JSON key-value file. Environment variables (optionally from a
.env file) override the stored values.
"""
import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from logstudio.core.schema import LogSchema, DEFAULT_SCHEMA

logger = logging.getLogger(__name__)

SETTINGS_KEY = "logstudio-settings"
DEFAULT_SETTINGS_PATH = Path.home() / ".logstudio" / "settings.json"


class AppSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    log_schema: LogSchema = DEFAULT_SCHEMA
    log_directory: str = ""
    log_extensions: List[str] = Field(default_factory=lambda: [".log"])
    auto_refresh: bool = True
    refresh_interval: int = Field(default=1000, ge=100, le=60000)  # milliseconds


DEFAULT_SETTINGS = AppSettings()


class SettingsStore:
    """JSON key-value store holding the settings under SETTINGS_KEY"""

    def __init__(self, path=DEFAULT_SETTINGS_PATH):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def load(self) -> AppSettings:
        """
        Load stored settings merged over the defaults

        A stored schema that no longer validates is dropped in favour of the
        default schema; any other unreadable content yields the defaults.
        """
        try:
            stored = self._read_all().get(SETTINGS_KEY) or {}
        except (OSError, ValueError) as e:
            logger.error("Error loading settings from %s: %s", self.path, e)
            return DEFAULT_SETTINGS

        if not isinstance(stored, dict):
            logger.error("Stored settings in %s are not an object", self.path)
            return DEFAULT_SETTINGS

        merged = {**DEFAULT_SETTINGS.model_dump(), **stored}
        try:
            return AppSettings.model_validate(merged)
        except ValidationError as e:
            logger.error("Stored settings rejected: %s", e)

        merged.pop('log_schema', None)
        try:
            return AppSettings.model_validate({**DEFAULT_SETTINGS.model_dump(), **merged})
        except ValidationError:
            return DEFAULT_SETTINGS

    def save(self, settings: AppSettings) -> bool:
        """
        Persist settings, keeping any other keys in the file

        Returns:
            True on success; failures are logged
        """
        try:
            try:
                data = self._read_all()
            except ValueError:
                data = {}
            data[SETTINGS_KEY] = settings.model_dump(mode='json')

            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except OSError as e:
            logger.error("Error saving settings to %s: %s", self.path, e)
            return False


def load_settings(store: Optional[SettingsStore] = None) -> AppSettings:
    """
    Load settings honouring the environment

    LOGSTUDIO_SETTINGS: settings file path (when no store is given)
    LOGSTUDIO_LOG_DIR: overrides the log directory
    """
    load_dotenv()

    if store is None:
        store = SettingsStore(os.getenv("LOGSTUDIO_SETTINGS", DEFAULT_SETTINGS_PATH))

    settings = store.load()

    log_dir = os.getenv("LOGSTUDIO_LOG_DIR")
    if log_dir:
        settings = settings.model_copy(update={'log_directory': log_dir})

    return settings
