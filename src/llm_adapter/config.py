"""Configuration management for the provider adapter."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

from .llm.exceptions import AuthError
from .llm.models import GenerationConfig

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


class Configuration:
    """Manages configuration and environment variables for the adapter."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.load_env()  # Load .env for API keys
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def active_provider(self) -> str:
        return self._config.get("llm", {}).get("active", "gemini")

    def get_llm_config(self) -> dict[str, Any]:
        """Get active LLM provider configuration from YAML.

        Returns:
            Active LLM provider configuration dictionary.
        """
        llm_config = self._config.get("llm", {})
        providers = llm_config.get("providers", {})

        if self.active_provider not in providers:
            raise ValueError(
                f"Active provider '{self.active_provider}' not found in providers config"
            )

        return providers[self.active_provider]

    @property
    def base_url(self) -> str:
        llm_config = self.get_llm_config()
        if "base_url" not in llm_config:
            raise ValueError(
                f"base_url must be explicitly configured for provider "
                f"'{self.active_provider}' in config.yaml"
            )
        return llm_config["base_url"].rstrip("/")

    @property
    def api_key_env(self) -> str:
        """Name of the environment variable holding the provider API key."""
        llm_config = self.get_llm_config()
        if "api_key_env" not in llm_config:
            raise ValueError(
                f"api_key_env must be explicitly configured for provider "
                f"'{self.active_provider}' in config.yaml"
            )
        return llm_config["api_key_env"]

    @property
    def llm_api_key(self) -> str:
        """Get the API key for the active LLM provider.

        Returns:
            The API key as a string.

        Raises:
            AuthError: If the API key is not found in environment variables.
        """
        env_key = self.api_key_env
        api_key = os.getenv(env_key)
        if not api_key:
            raise AuthError(
                f"API key '{env_key}' not found in environment variables "
                f"for provider '{self.active_provider}'",
                provider=self.active_provider,
            )

        return api_key

    def get_generation_defaults(self) -> GenerationConfig:
        """Get default generation parameters for the active provider.

        Raises:
            ValueError: If the model is not configured.
        """
        llm_config = self.get_llm_config()
        if "model" not in llm_config:
            raise ValueError(
                f"model must be explicitly configured for provider "
                f"'{self.active_provider}' in config.yaml"
            )

        return GenerationConfig(
            model=llm_config["model"],
            temperature=llm_config.get("temperature", 0.7),
            max_tokens=llm_config.get("max_tokens", 4096),
            json_mode=llm_config.get("json_mode", False),
        )

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration for the active LLM provider.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        llm_config = self.get_llm_config()
        http_config = llm_config.get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured "
                    f"for provider '{self.active_provider}' in config.yaml"
                )
            if http_config[key] <= 0:
                raise ValueError(f"http_client.{key} must be positive")

        return {**http_config}

    def get_streaming_config(self) -> dict[str, Any]:
        """Get streaming configuration for the active LLM provider.

        Returns:
            Streaming configuration dictionary.

        Raises:
            ValueError: If channel_size is missing or negative.
        """
        llm_config = self.get_llm_config()
        streaming_config = llm_config.get("streaming", {})

        if "channel_size" not in streaming_config:
            raise ValueError(
                "streaming.channel_size must be explicitly configured "
                f"for provider '{self.active_provider}' in config.yaml"
            )

        channel_size = streaming_config["channel_size"]
        if not isinstance(channel_size, int) or channel_size < 0:
            raise ValueError("streaming.channel_size must be a non-negative integer")

        return {**streaming_config}

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging", {})
