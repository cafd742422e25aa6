# fluxgate/config/schema.py
"""
Configuration schema for fluxgate.

Schema hierarchy:
- GateConfig: the complete config consumed by discovery, validation and the gate
- PlatformConfig: where platform services are imported from
- ConventionsConfig: file naming conventions used by the source extractor
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryConvention(BaseModel):
    """
    Naming convention for one export category.

    Example:
        >>> CategoryConvention(directory="services", keyword="service")
        matches services/todo_service.py and exports like `todo_service`
    """

    directory: str = Field(..., description="Directory inside the unit holding these files")
    keyword: str = Field(..., description="Keyword that file and export names must contain")

    model_config = ConfigDict(extra="forbid")

    @field_validator("directory")
    @classmethod
    def _directory_is_single_package(cls, v: str) -> str:
        # compared against a single import path segment
        if not v.isidentifier():
            raise ValueError(f"directory must be a single package name, got {v!r}")
        return v

    @field_validator("keyword")
    @classmethod
    def _keyword_is_lowercase_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"keyword must be an identifier, got {v!r}")
        return v.lower()


class ConventionsConfig(BaseModel):
    routes: CategoryConvention = Field(
        default_factory=lambda: CategoryConvention(directory="routes", keyword="route")
    )
    services: CategoryConvention = Field(
        default_factory=lambda: CategoryConvention(directory="services", keyword="service")
    )
    models: CategoryConvention = Field(
        default_factory=lambda: CategoryConvention(directory="models", keyword="model")
    )

    model_config = ConfigDict(extra="forbid")


class PlatformConfig(BaseModel):
    package: str = Field("appkit", description="Package exposing platform services, may be dotted")

    model_config = ConfigDict(extra="forbid")

    @field_validator("package")
    @classmethod
    def _package_is_dotted_name(cls, v: str) -> str:
        if not all(part.isidentifier() for part in v.split(".")):
            raise ValueError(f"package must be an absolute dotted module path, got {v!r}")
        return v


class GateConfig(BaseModel):
    """
    Complete fluxgate configuration.

    Example YAML:
        fluxgate:
          units_dir: src/features
          entry_file: feature.py
          disabled_prefix: "_"
          platform:
            package: appkit
    """

    units_dir: str = Field("src/features", description="Units root, relative to the project root")
    entry_file: str = Field("feature.py", description="Contract-bearing entry file of a unit")
    entry_attribute: str = Field("feature", description="Module attribute holding the FeatureConfig")
    disabled_prefix: str = Field("_", min_length=1, description="Directory prefix marking a disabled unit")
    default_prefix: str = Field("/api", description="Mount prefix when a unit declares none")
    loader: Literal["module", "static"] = Field("module", description="How entry files are loaded")
    max_workers: int = Field(4, ge=1, le=64, description="Concurrent extraction workers")
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    conventions: ConventionsConfig = Field(default_factory=ConventionsConfig)

    model_config = ConfigDict(extra="forbid")

    @field_validator("default_prefix")
    @classmethod
    def _prefix_starts_with_slash(cls, v: str) -> str:
        if v and not v.startswith("/"):
            raise ValueError(f"default_prefix must start with '/', got {v!r}")
        return v.rstrip("/")

    @field_validator("entry_file")
    @classmethod
    def _entry_is_python_file(cls, v: str) -> str:
        if not v.endswith(".py"):
            raise ValueError(f"entry_file must be a .py file, got {v!r}")
        return v


__all__ = ["CategoryConvention", "ConventionsConfig", "PlatformConfig", "GateConfig"]
