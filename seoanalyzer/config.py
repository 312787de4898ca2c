from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Gemini
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.5-flash-preview-05-20"

    # Retry policy for the reasoning service
    gemini_max_attempts: int = 3
    backoff_base: float = 2.0
    backoff_on_http_error: bool = False  # False keeps "no wait on non-2xx"
    request_timeout_seconds: float = 60.0

    # Content relay
    relay_base_url: str = "https://cors.eu.org/"  # empty = fetch the target directly
    fetch_timeout_seconds: float = 30.0
    user_agent: str = "LLMSeoAnalyzer/1.0 (+https://example.local)"

    # Analysis
    analysis_runs: int = 2
    min_content_length: int = 200
    max_content_chars: int = 0  # 0 = no cap

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_to_file: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
