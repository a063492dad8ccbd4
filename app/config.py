"""Application configuration via environment variables."""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Auth
    api_key: str = ""

    # Music library (host path, mounted as /music in the yt-dlp container)
    music_root: str = "/music"

    # Worker
    ytdlp_container: str = "yt-dlp-music"
    docker_bin: str = "docker"

    # HTTP
    port: int = 8787
    cors_origins: str = ""  # comma-separated, "prefix*" matches by prefix
    max_body_bytes: int = 256 * 1024

    # Rate limiting (per client IP)
    rate_limit_requests: int = 40
    rate_limit_window_seconds: float = 60
    trust_proxy_headers: bool = False  # key on X-Forwarded-For / X-Real-IP

    # Job processing
    job_ttl_hours: float = 2
    janitor_interval_seconds: float = 60
    job_log_max_lines: int = 2000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def cors_origin_rules(self) -> List[str]:
        return [s.strip() for s in self.cors_origins.split(",") if s.strip()]


settings = Settings()
