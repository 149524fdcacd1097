"""Azure Blob Storage service for bill uploads and installation photos."""

import logging
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient
from app.core.config import settings, INTEGRATION_UNAVAILABLE

logger = logging.getLogger(__name__)


class StorageNotConfigured(Exception):
    """Azure Blob connection settings are missing."""


class BlobStorageService:
    """Uploads customer files to Azure Blob and returns their public URL."""

    def __init__(self):
        config = settings.integration("storage")
        self.enabled = config is not INTEGRATION_UNAVAILABLE
        self.connection_string = config["AZURE_BLOB_CONNECTION_STRING"] if self.enabled else None
        self.account_name = config["AZURE_STORAGE_ACCOUNT"] if self.enabled else None
        self.container_bills = settings.BILL_UPLOAD_CONTAINER
        self.container_photos = settings.PHOTO_CONTAINER

    def blob_url(self, container: str, blob_name: str) -> str:
        return f"https://{self.account_name}.blob.core.windows.net/{container}/{blob_name}"

    async def upload(self, container: str, blob_name: str, data: bytes, content_type: str) -> str:
        """Upload ``data`` and return its URL. Azure errors propagate."""
        if not self.enabled:
            raise StorageNotConfigured("Azure Blob connection string not configured")

        async with BlobServiceClient.from_connection_string(self.connection_string) as blob_service:
            blob_client = blob_service.get_blob_client(container=container, blob=blob_name)
            await blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )

        url = self.blob_url(container, blob_name)
        logger.info("Blob uploaded: %s", url)
        return url

    async def upload_bill(self, file_name: str, data: bytes, content_type: str) -> str:
        return await self.upload(self.container_bills, file_name, data, content_type)

    async def upload_photo(self, blob_name: str, data: bytes, content_type: str) -> str:
        return await self.upload(self.container_photos, blob_name, data, content_type)


# Singleton instance
blob_service = BlobStorageService()
