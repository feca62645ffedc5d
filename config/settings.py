from pydantic import Field
from pydantic_settings import BaseSettings


class FrameSettings(BaseSettings):
    discord_token: str | None = Field(default=None, description="Discord bot token")
    database_url: str = Field(default="sqlite:///data/frame.db", description="Settings database connection URL")

    command_prefix: str = Field(default="!", description="Default command prefix")
    owner_ids: list[int] = Field(default_factory=list, description="User IDs recognised as bot owners")
    invite: str | None = Field(default=None, description="Support server invite shown in error replies")
    environment: str = Field(default="development", description="Environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Argument collection
    args_prompt_wait: int = Field(default=30, description="Seconds to wait for an answer to an argument prompt")

    # Command loading
    commands_directory: str | None = Field(default=None, description="Directory to load commands from")

    # Development settings
    debug: bool = Field(default=False, description="Enable debug mode")

    # Redis configuration (cross-process setting propagation)
    redis_url: str | None = Field(default=None, description="Redis connection URL")
    settings_channel: str = Field(default="frame:settings", description="Redis pub/sub channel for setting changes")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = FrameSettings()
