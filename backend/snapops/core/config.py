from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    model_config = {"extra": "allow", "env_file": ".env", "case_sensitive": True}
    
    # Application
    APP_NAME: str = "SnapOps"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    
    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS_ORIGINS string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
    
    # Azure Authentication
    # DefaultAzureCredential unless a service principal is explicitly requested
    AZURE_TENANT_ID: Optional[str] = None
    AZURE_CLIENT_ID: Optional[str] = None
    AZURE_CLIENT_SECRET: Optional[str] = None
    AZURE_USE_SERVICE_PRINCIPAL: bool = False
    
    # Snapshot naming
    SNAPSHOT_NAME_MAX_LENGTH: int = 82
    SNAPSHOT_NAMING_POLICY: str = "vm_disk_combined"
    
    # VM lookup across subscriptions
    VM_LOCATOR_POLICY: str = "first_match"
    
    # Snapshot creation
    SNAPSHOT_INCREMENTAL: bool = False
    SNAPSHOT_TARGET_RESOURCE_GROUP: Optional[str] = None
    
    # Reports
    REPORT_OUTPUT_DIR: str = "."
    AZURE_STORAGE_CONNECTION_STRING: Optional[str] = None
    AZURE_STORAGE_CONTAINER_NAME: str = "snapshot-reports"


# Create settings instance
settings = Settings()


def validate_settings(current: Optional[Settings] = None):
    """Validate that required settings are present, based on auth mode"""
    current = current or settings
    required_settings = []

    # Service principal credentials are only needed when explicitly enabled
    if current.AZURE_USE_SERVICE_PRINCIPAL:
        required_settings += [
            "AZURE_TENANT_ID",
            "AZURE_CLIENT_ID",
            "AZURE_CLIENT_SECRET",
        ]

    missing_settings = []
    for setting in required_settings:
        value = getattr(current, setting, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing_settings.append(setting)

    if missing_settings:
        raise ValueError(f"Missing required settings: {', '.join(missing_settings)}")

    if current.SNAPSHOT_NAME_MAX_LENGTH < 1:
        raise ValueError("SNAPSHOT_NAME_MAX_LENGTH must be a positive integer")
