from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DjeliaConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DJELIA_")

    api_key: str = ""
    api_key_file: str = ""
    base_url: str = "https://djelia.cloud"

    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_backoff: float = Field(default=2.0, ge=0)
    retry_backoff_max: float = Field(default=10.0, ge=0)

    def read_secret(self, path: str) -> str:
        if not path:
            return ""
        try:
            with open(path) as f:
                return f.read().strip()
        except FileNotFoundError:
            return ""

    def resolve_api_key(self) -> str:
        return self.api_key or self.read_secret(self.api_key_file)
