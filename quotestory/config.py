"""Configuration management using Pydantic Settings."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AspectRatio(Enum):
    """Supported story canvas formats."""

    STORY = "9:16"
    SQUARE = "1:1"
    WIDE = "2:1"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AspectRatio":
        """Map a selector string to a variant; unknown or empty values fall back to 9:16."""
        if isinstance(value, cls):
            return value
        if value:
            for member in cls:
                if member.value == value.strip():
                    return member
        return cls.STORY


class RatioProfile(BaseModel):
    """Rendering constants for one aspect-ratio variant."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    margin: int = Field(ge=0)
    text_top: int = Field(ge=0)
    overlay_alpha: float = Field(ge=0.0, le=1.0)
    panel_padding_x: int = Field(ge=0)
    panel_padding_y: int = Field(ge=0)
    panel_blur_max: int = Field(gt=0)
    thumbnail_rule: Literal["corner", "column"] = "corner"
    thumbnail_height_fraction: float = Field(default=0.25, gt=0.0, le=1.0)
    column_fraction: float = Field(default=0.35, gt=0.0, lt=1.0)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @model_validator(mode="after")
    def _check_margins(self) -> "RatioProfile":
        if 2 * self.margin >= min(self.width, self.height):
            raise ValueError(f"margin {self.margin} leaves no room on a {self.width}x{self.height} canvas")
        return self


# All formats share the margin, overlay strength and panel constants
RATIO_PROFILES: dict[AspectRatio, RatioProfile] = {
    AspectRatio.STORY: RatioProfile(
        width=1080, height=1920, margin=80, text_top=100, overlay_alpha=0.33,
        panel_padding_x=60, panel_padding_y=40, panel_blur_max=100,
    ),
    AspectRatio.SQUARE: RatioProfile(
        width=1080, height=1080, margin=80, text_top=100, overlay_alpha=0.33,
        panel_padding_x=60, panel_padding_y=40, panel_blur_max=100,
    ),
    AspectRatio.WIDE: RatioProfile(
        width=1920, height=960, margin=80, text_top=80, overlay_alpha=0.33,
        panel_padding_x=60, panel_padding_y=40, panel_blur_max=100,
        thumbnail_rule="column", column_fraction=0.35,
    ),
}


def _validate_profiles(profiles: dict[AspectRatio, RatioProfile]) -> None:
    """Fail at import time if any variant lacks a rendering profile."""
    missing = [ratio.value for ratio in AspectRatio if ratio not in profiles]
    if missing:
        raise RuntimeError(f"No rendering profile for aspect ratio(s): {', '.join(missing)}")


_validate_profiles(RATIO_PROFILES)


def get_profile(aspect_ratio: AspectRatio) -> RatioProfile:
    """Return the rendering profile for an aspect ratio."""
    return RATIO_PROFILES[aspect_ratio]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Rendering
    font_path: str = Field(default="DejaVuSerif.ttf", alias="FONT_PATH")
    default_aspect_ratio: str = Field(default="9:16", alias="DEFAULT_ASPECT_RATIO")

    # HTTP
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    public_dir: Path = Field(default=Path("public"), alias="PUBLIC_DIR")
    max_upload_mb: int = Field(default=10, alias="MAX_UPLOAD_MB")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("default_aspect_ratio")
    @classmethod
    def _known_ratio(cls, value: str) -> str:
        return AspectRatio.parse(value).value

    @property
    def max_upload_bytes(self) -> int:
        """Upload size cap in bytes."""
        return self.max_upload_mb * 1024 * 1024


# Global settings instance
settings = Settings()
