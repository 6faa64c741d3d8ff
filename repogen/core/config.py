from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "repogen"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    log_level: str = "INFO"

    # Where generated repository modules are written
    output_dir: str = "generated"
    package_dir: str = "repos"

settings = Settings()
