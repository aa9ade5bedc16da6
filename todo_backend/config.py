from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./todo.db"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"
    MAX_BODY_BYTES: int = 5 * 1024 * 1024

    # Mail (Gmail over implicit TLS by default)
    EMAIL_HOST: str | None = "smtp.gmail.com"
    EMAIL_PORT: int = 465
    EMAIL_USE_TLS: bool = True
    EMAIL_USER: str | None = None
    EMAIL_PASS: str | None = None
    EMAIL_TIMEOUT: float = 10.0

    # Security
    BCRYPT_ROUNDS: int = 10
    OTP_TTL_MINUTES: int = 10
    OTP_PURGE_INTERVAL_MINUTES: int = 15
    OTP_ECHO: bool = True  # existing clients read the code from the response
    ENABLE_SCHEDULER: bool = True

    class Config:
        env_file = ".env"

    @property
    def async_database_url(self) -> str:
        # Ensure we use the async driver
        return self.database_url.replace("postgresql://", "postgresql+asyncpg://")

settings = Settings()
