from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    retell_api_key: str = ""
    retell_agent_id: str = ""
    retell_from_number: str = ""
    retell_api_base_url: str = "https://api.retellai.com"
    make_hook_url: str = ""
    port: int = 3000
    cors_origin: str = "*"
    debug_webhook: bool = False
    node_env: str = "development"
    log_level: str = "INFO"
    default_country_code: str = "1"
    http_timeout_seconds: float = 30.0
    name_mismatch_min_length: int = 2
    phone_mismatch_min_length: int = 5

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()] or ["*"]
