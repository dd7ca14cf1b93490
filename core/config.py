from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str = "mysql+pymysql://root:@localhost:3306/eggmart"
    DB_POOL_SIZE: int = 10

    SECRET_KEY: str = "dev-secret"
    ALGORITHM: str = "HS256"
    AUTH_COOKIE_NAME: str = "auth_token"
    AUTH_TOKEN_EXPIRE_DAYS: int = 7

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    DELIVERY_FEE: float = 50
    FREE_DELIVERY_THRESHOLD: float = 500

    STORE_NAME: str = "EggMart Store"
    STORE_ADDRESS: str = "123 Farm Road, Agriculture District"
    STORE_PHONE: str = "+63 912 345 6789"
    STORE_EMAIL: str = "info@eggmart.com"


settings = Settings()
