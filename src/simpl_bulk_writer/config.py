"""Application settings."""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Simpl Bulk Writer"
    api_prefix: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    aws_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_force_path_style: bool = False
    s3_multipart_part_size_mb: int = 8
    max_parallel_tasks: int = 4
    identifier_max_attempts: int = 16
    dirty_record_limit: int | None = None
    dirty_record_sample_size: int = 20
    columnar_batch_size: int = 1024

    @field_validator("s3_endpoint_url", "dirty_record_limit", mode="before")
    @classmethod
    def blank_as_unset(cls, value: object) -> object:
        """Treat empty env var values as unset."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Ensure numeric limits are usable."""

        if self.port < 1:
            raise ValueError("SIMPL_BW_PORT must be >= 1.")
        if self.s3_multipart_part_size_mb < 5:
            raise ValueError("SIMPL_BW_S3_MULTIPART_PART_SIZE_MB must be >= 5.")
        if self.max_parallel_tasks < 1:
            raise ValueError("SIMPL_BW_MAX_PARALLEL_TASKS must be >= 1.")
        if self.identifier_max_attempts < 1:
            raise ValueError("SIMPL_BW_IDENTIFIER_MAX_ATTEMPTS must be >= 1.")
        if self.dirty_record_limit is not None and self.dirty_record_limit < 0:
            raise ValueError("SIMPL_BW_DIRTY_RECORD_LIMIT must be >= 0 when set.")
        if self.dirty_record_sample_size < 0:
            raise ValueError("SIMPL_BW_DIRTY_RECORD_SAMPLE_SIZE must be >= 0.")
        if self.columnar_batch_size < 1:
            raise ValueError("SIMPL_BW_COLUMNAR_BATCH_SIZE must be >= 1.")
        return self

    model_config = SettingsConfigDict(env_prefix="SIMPL_BW_", extra="ignore")


__all__ = ["Settings"]
