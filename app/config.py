from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from integrations.affiliates import AffiliateConfig
from integrations.amazon.catalog import DEFAULT_CATALOG_PATH
from recommendations.query_rules_loader import DEFAULT_RULESET_PATH


class Settings(BaseSettings):
    frontend_base: str = Field("http://localhost:5173", alias="FRONTEND_BASE")
    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    env: str = Field("prod", alias="ENV")

    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    openai_api_base: str = Field("https://api.openai.com/v1", alias="OPENAI_API_BASE")
    openai_model: str = Field("gpt-4o", alias="OPENAI_MODEL")
    llm_proxy_url: Optional[str] = Field(None, alias="LLM_PROXY_URL")
    llm_timeout_seconds: float = Field(30.0, alias="LLM_TIMEOUT_SECONDS")

    amazon_associate_id: str = Field("ocassia-20", alias="AMAZON_ASSOCIATE_ID")
    opentable_partner_id: str = Field("ocassia", alias="OPENTABLE_PARTNER_ID")
    expedia_partner_id: str = Field("ocassia", alias="EXPEDIA_PARTNER_ID")

    catalog_path: Path = Field(DEFAULT_CATALOG_PATH, alias="CATALOG_PATH")
    ruleset_path: Path = Field(DEFAULT_RULESET_PATH, alias="RULESET_PATH")

    reco_cache_ttl_seconds: int = Field(300, alias="RECO_CACHE_TTL_SECONDS", gt=0)
    reco_cache_max_items: int = Field(1000, alias="RECO_CACHE_MAX_ITEMS", gt=0)
    search_top_n: int = Field(8, alias="SEARCH_TOP_N", ge=1, le=50)
    chat_top_n: int = Field(6, alias="CHAT_TOP_N", ge=1, le=50)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    def affiliate_config(self) -> AffiliateConfig:
        return AffiliateConfig(
            amazon_associate_id=self.amazon_associate_id,
            opentable_partner_id=self.opentable_partner_id,
            expedia_partner_id=self.expedia_partner_id,
        )

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return origins or [self.frontend_base]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
