"""Editor settings loaded from YAML."""

import os
import logging
from pathlib import Path
from typing import Optional, Union
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from pipeline_editor.graph.exceptions import PipelineError


SETTINGS_ENV_VAR = "PIPELINE_EDITOR_SETTINGS"

# Set up logging
logger = logging.getLogger(__name__)


class SettingsError(PipelineError):
    """Exception raised for invalid settings files."""
    pass


class EditorSettings(BaseModel):
    """Configuration for a pipeline editor session."""
    storage_dir: Path = Field(Path("pipelines"), description="Directory for saved pipelines")
    export_file_name: str = Field("pipeline-workflow.json", description="Default export file name")
    export_indent: Optional[int] = Field(2, ge=0, description="JSON indentation of exported documents")
    log_level: str = Field("INFO", description="Logging level name")

    model_config = {"extra": "forbid"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level


def load_settings(path: Union[str, Path, None] = None) -> EditorSettings:
    """Load editor settings from a YAML file.

    Args:
        path: The settings file. If None, the file named by the
              PIPELINE_EDITOR_SETTINGS environment variable is used, and
              defaults are returned when neither is set or the file is absent.

    Returns:
        The loaded settings

    Raises:
        SettingsError: If the file is not valid YAML or holds invalid values
    """
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR)
    if not path:
        return EditorSettings()

    settings_path = Path(path)
    if not settings_path.exists():
        logger.debug(f"Settings file {settings_path} not found, using defaults")
        return EditorSettings()

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {settings_path}: {str(e)}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {settings_path} must contain a mapping")
    try:
        return EditorSettings(**data)
    except PydanticValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {str(e)}") from e


def configure_logging(settings: Optional[EditorSettings] = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or EditorSettings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
