from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Corpus
    CONTENT_ROOT: str = "content/posts"
    FILE_GLOB: str = "**/*.md"
    # Matches e.g. <|RELATED_DOC_SEP-magic-1234|>
    SEPARATOR_PATTERN: str = r"<\|RELATED_DOC_SEP[^|>]*\|>"

    # Loader
    MAX_WORKERS: int = 4

    # Site
    BASE_URL: str = ""
    POSTS_URL_PREFIX: str = "/posts/"
    WORDS_PER_MINUTE: int = 200

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def posts_section(self) -> str:
        """Posts URL prefix without surrounding slashes, e.g. ``posts``."""
        return self.POSTS_URL_PREFIX.strip("/")


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
