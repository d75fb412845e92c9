"""Configuration module for stick-gpt using pydantic-settings."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant with access to various tools. "
    "Use them when appropriate to help the user."
)

# Model used when none is configured, per provider
DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "ollama": "llama3.2:latest",
}


class StickGptSettings(BaseSettings):
    """Main configuration settings for stick-gpt.

    All settings can be overridden via environment variables with the STICK_
    prefix (STICK_MODEL overrides model, and so on). Values are also read from
    a local .env file. The OpenAI key is additionally accepted as the plain
    OPENAI_API_KEY variable.
    """

    # Model backend
    provider: str = "openai"
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # Credentials / hosts
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("STICK_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    ollama_host: str = "http://localhost:11434"

    # Tool loop
    max_iterations: int | None = 50
    parallel_tool_calls: bool = False

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="STICK_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def resolved_model(self) -> str:
        """Get the configured model, or the provider's default model."""
        if self.model:
            return self.model
        return DEFAULT_MODELS.get(self.provider, DEFAULT_MODELS["openai"])
