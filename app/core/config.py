"""
Application configuration.
Secrets can be preloaded from Azure Key Vault (set KEY_VAULT_NAME) and are
otherwise read from environment variables / .env file.

Every third-party integration is described once in _INTEGRATIONS. Handlers
ask ``settings.integration(name)`` and get either an IntegrationConfig or the
INTEGRATION_UNAVAILABLE sentinel.
"""
import os
import logging
from dataclasses import dataclass, field

from azure.core.exceptions import ResourceNotFoundError
from azure.identity import ManagedIdentityCredential, DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key Vault → environment variable mapping
# Secret names in Key Vault use lowercase-dashes; env vars use UPPER_SNAKE.
# ---------------------------------------------------------------------------
_KV_TO_ENV: dict[str, str] = {
    "database-url":              "DATABASE_URL",
    "auth-jwt-key":              "AUTH_JWT_KEY",
    "sendgrid-api-key":          "SENDGRID_API_KEY",
    "sendgrid-from-email":       "SENDGRID_FROM_EMAIL",
    "lead-notification-email":   "LEAD_NOTIFICATION_EMAIL",
    "storage-connection-string": "AZURE_BLOB_CONNECTION_STRING",
    "azure-storage-account":     "AZURE_STORAGE_ACCOUNT",
    "twilio-account-sid":        "TWILIO_ACCOUNT_SID",
    "twilio-auth-token":         "TWILIO_AUTH_TOKEN",
    "twilio-phone-number":       "TWILIO_PHONE_NUMBER",
    "enphase-api-key":           "ENPHASE_API_KEY",
    "enphase-api-user-id":       "ENPHASE_API_USER_ID",
    "google-solar-api-key":      "GOOGLE_SOLAR_API_KEY",
    "facebook-pixel-id":         "FACEBOOK_PIXEL_ID",
    "facebook-access-token":     "FACEBOOK_ACCESS_TOKEN",
    "ga4-measurement-id":        "GA4_MEASUREMENT_ID",
    "ga4-api-secret":            "GA4_API_SECRET",
}


def _load_from_key_vault(vault_name: str) -> int:
    """
    Fetch secrets from Azure Key Vault and inject them into os.environ.
    Returns the number of secrets successfully loaded.
    """
    vault_url = f"https://{vault_name}.vault.azure.net/"
    try:
        try:
            credential = ManagedIdentityCredential()
            credential.get_token("https://vault.azure.net/.default")
        except Exception:
            credential = DefaultAzureCredential()

        client = SecretClient(vault_url=vault_url, credential=credential)
        loaded = 0
        for kv_name, env_name in _KV_TO_ENV.items():
            try:
                secret = client.get_secret(kv_name)
                if secret.value:
                    os.environ[env_name] = secret.value
                    loaded += 1
            except ResourceNotFoundError:
                continue
            except Exception as e:
                logger.warning("KV: could not load '%s': %s", kv_name, e)
        return loaded
    except Exception as e:
        logger.warning("Key Vault load failed (%s); falling back to environment / .env file.", e)
        return 0


_kv_name = os.environ.get("KEY_VAULT_NAME", "")
if _kv_name:
    _n = _load_from_key_vault(_kv_name)
    if _n:
        logger.info("Loaded %d secrets from Key Vault '%s'", _n, _kv_name)


# ---------------------------------------------------------------------------
# Integrations
# ---------------------------------------------------------------------------
class _IntegrationUnavailable:
    """Sentinel returned when an integration is missing required settings."""

    def __bool__(self):
        return False

    def __repr__(self):
        return "INTEGRATION_UNAVAILABLE"


INTEGRATION_UNAVAILABLE = _IntegrationUnavailable()


@dataclass(frozen=True)
class IntegrationConfig:
    name: str
    values: dict = field(default_factory=dict)

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def get(self, key: str, default=None):
        return self.values.get(key, default)


# name -> (required settings, optional settings)
_INTEGRATIONS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "email": (
        ("SENDGRID_API_KEY", "SENDGRID_FROM_EMAIL", "LEAD_NOTIFICATION_EMAIL"),
        ("SENDGRID_FROM_NAME",),
    ),
    "sms": (("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"), ()),
    "storage": (
        ("AZURE_BLOB_CONNECTION_STRING", "AZURE_STORAGE_ACCOUNT"),
        ("BILL_UPLOAD_CONTAINER", "PHOTO_CONTAINER"),
    ),
    "enphase": (("ENPHASE_API_KEY", "ENPHASE_API_USER_ID", "ENPHASE_API_URL"), ()),
    "google_solar": (("GOOGLE_SOLAR_API_KEY",), ()),
    "meta_conversions": (("FACEBOOK_PIXEL_ID", "FACEBOOK_ACCESS_TOKEN"), ("FACEBOOK_TEST_EVENT_CODE",)),
    "ga4": (("GA4_MEASUREMENT_ID", "GA4_API_SECRET"), ()),
}


# ---------------------------------------------------------------------------
# Pydantic Settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str

    # External identity provider (verifies CRM session tokens)
    AUTH_JWT_KEY: str = ""
    AUTH_JWT_ALGORITHM: str = "RS256"
    AUTH_JWT_ISSUER: str = ""
    AUTH_JWT_AUDIENCE: str = ""

    # SendGrid Email
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = "info@quantumsolar.us"
    SENDGRID_FROM_NAME: str = "Quantum Solar"
    LEAD_NOTIFICATION_EMAIL: str = "cesar@quantumsolar.us"

    # Twilio SMS
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""

    # Azure Blob Storage
    AZURE_BLOB_CONNECTION_STRING: str = ""
    AZURE_STORAGE_ACCOUNT: str = ""
    BILL_UPLOAD_CONTAINER: str = "bill-uploads"
    PHOTO_CONTAINER: str = "solar-photos"

    # Enphase monitoring
    ENPHASE_API_KEY: str = ""
    ENPHASE_API_USER_ID: str = ""
    ENPHASE_API_URL: str = "https://api.enphaseenergy.com/api/v4"

    # Google Solar / Geocoding
    GOOGLE_SOLAR_API_KEY: str = ""

    # Meta Conversions API / GA4 Measurement Protocol
    FACEBOOK_PIXEL_ID: str = ""
    FACEBOOK_ACCESS_TOKEN: str = ""
    FACEBOOK_TEST_EVENT_CODE: str = ""
    GA4_MEASUREMENT_ID: str = ""
    GA4_API_SECRET: str = ""

    # Public site, used by the splash form client
    SITE_URL: str = "http://localhost:8000"
    GALLERY_DIR: str = "static/installations"

    KEY_VAULT_NAME: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"

    def integration(self, name: str):
        """Return the IntegrationConfig for ``name`` or INTEGRATION_UNAVAILABLE."""
        required, optional = _INTEGRATIONS[name]
        values = {key: getattr(self, key) for key in required}
        if not all(values.values()):
            return INTEGRATION_UNAVAILABLE
        for key in optional:
            values[key] = getattr(self, key)
        return IntegrationConfig(name=name, values=values)

    def validate_integrations(self) -> dict[str, bool]:
        """Check every integration once and log the result."""
        status = {name: bool(self.integration(name)) for name in _INTEGRATIONS}
        for name, available in status.items():
            if available:
                logger.info("Integration '%s' configured", name)
            else:
                logger.warning("Integration '%s' not configured; related features are disabled", name)
        if not self.AUTH_JWT_KEY:
            logger.warning("AUTH_JWT_KEY is not set; CRM endpoints will reject all requests")
        return status


settings = Settings()
