from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "SpendWise"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: list[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: str | None = Field(default=None)
    DYNAMO_USERS_TABLE: str = Field(default="spendwise-users")
    DYNAMO_EXPENSES_TABLE: str = Field(default="spendwise-expenses")
    DYNAMO_BUDGETS_TABLE: str = Field(default="spendwise-budgets")
    DYNAMO_INSIGHTS_TABLE: str = Field(default="spendwise-ai-insights")
    DYNAMO_CREATE_TABLES: bool = Field(default=False)

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="0b6a1f1d2f8c4e0e9b7d3c5a6e4f2a1b8c9d0e1f2a3b4c5d6e7f8091a2b3c4d5")
    JWT_REFRESH_SECRET_KEY: str = Field(default="7e3c9a1b5d2f4e6a8c0b1d3f5a7c9e2b4d6f8a0c1e3b5d7f9a2c4e6b8d0f1a3c")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    JWT_REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Text generation
    OPENAI_API_KEY: str | None = Field(default=None)
    OPENAI_MODEL: str = Field(default="gpt-3.5-turbo")
    OPENAI_TIMEOUT_SECONDS: float = Field(default=20.0)

    # AI insight cache windows (hours)
    SPENDING_ANALYSIS_MAX_AGE_HOURS: float = 24
    SPENDING_ANALYSIS_TTL_HOURS: float = 24
    BUDGET_OPTIMIZATION_MAX_AGE_HOURS: float = 48
    BUDGET_OPTIMIZATION_TTL_HOURS: float = 48

    # Expired insight reaper
    INSIGHT_REAPER_ENABLED: bool = Field(default=True)
    INSIGHT_REAPER_INTERVAL_MINUTES: int = Field(default=30)


settings = Settings()
