"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use HIKIDOWN_ prefix (e.g., HIKIDOWN_HEADER_LEVEL=2).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use HIKIDOWN_ prefix.

    Examples:
        HIKIDOWN_HEADER_LEVEL=2
        HIKIDOWN_JEKYLL_LAYOUT=article
        HIKIDOWN_ATTACH_DIR=/srv/wiki/attach
    """

    model_config = SettingsConfigDict(
        env_prefix="HIKIDOWN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Compiler configuration
    header_level: int = Field(
        default=1,
        ge=1,
        le=6,
        description="Heading level assigned to a single '!' header line",
    )

    placeholder_sentinels: str = Field(
        default="\x00\ufdd0\ufdd1\ufdd2\ufdd3",
        min_length=1,
        description="Candidate sentinel characters for plugin placeholders, tried in order",
    )

    image_extensions: List[str] = Field(
        default=[".jpg", ".jpeg", ".gif", ".png"],
        description="Link target extensions rendered as embedded images",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during compilation",
    )

    # Markdown output configuration
    jekyll_layout: str = Field(
        default="post",
        description="Layout written into the generated front matter",
    )

    attach_dir: str = Field(
        default="attach",
        description="Directory holding per-document attachment folders",
    )

    images_baseurl: str = Field(
        default="{{site.baseurl}}/images",
        description="URL prefix for attachment images and downloads",
    )

    def sentinel_pick(self, text: str) -> str:
        """
        Choose a placeholder sentinel that does not occur in the text.

        Args:
            text: Raw document about to be escaped

        Returns:
            First configured sentinel absent from text

        Raises:
            ValueError: If every configured sentinel occurs in the text

        Example:
            >>> settings = AppSettings()
            >>> settings.sentinel_pick("plain text")
            '\\x00'
        """
        for sentinel in self.placeholder_sentinels:
            if sentinel not in text:
                return sentinel
        raise ValueError(
            "No placeholder sentinel available: every candidate in "
            f"{self.placeholder_sentinels!r} occurs in the document"
        )


# Singleton instance - import this in your code
appsettings = AppSettings()
