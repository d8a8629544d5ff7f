"""
Client hebergeur media / Media host client.

Envoie un fichier vers Cloudinary (upload signe) et renvoie une URL publique stable.
Uploads a file to Cloudinary (signed upload) and returns a stable public URL.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import PurePath

import httpx
from cloudinary.utils import api_sign_request

from garage.config import settings
from garage.errors import MediaHostError

log = logging.getLogger(__name__)


def media_kind(content_type: str | None) -> str:
    """'video' si le type MIME commence par video/, sinon 'image'."""
    if content_type and content_type.startswith("video/"):
        return "video"
    return "image"


@dataclass
class UploadedMedia:
    url: str
    public_id: str
    kind: str


class MediaHost:
    """Upload signe Cloudinary / Cloudinary signed upload."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        base_url: str | None = None,
        folder: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cloud_name = cloud_name if cloud_name is not None else settings.CLOUDINARY_CLOUD_NAME
        self.api_key = api_key if api_key is not None else settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.CLOUDINARY_API_SECRET
        self.base_url = (base_url or settings.CLOUDINARY_UPLOAD_URL).rstrip("/")
        self.folder = folder or settings.MEDIA_FOLDER
        self.transport = transport

    def sign(self, params: dict[str, str]) -> str:
        """Signature Cloudinary des parametres / Cloudinary request signature (SHA-1 by default)."""
        return api_sign_request(params, self.api_secret)

    async def upload(
        self,
        payload: bytes,
        filename: str,
        content_type: str | None,
        owner_id: int,
    ) -> UploadedMedia:
        """Envoyer un fichier rattache a une moto / Upload a file owned by a motor."""
        if not self.cloud_name:
            raise MediaHostError("Media host is not configured")

        kind = media_kind(content_type)
        params = {
            "folder": f"{self.folder}/motors/{owner_id}",
            "public_id": f"{int(time.time() * 1000)}-{PurePath(filename or 'upload').stem}",
            "timestamp": str(int(time.time())),
        }
        data = {**params, "api_key": self.api_key, "signature": self.sign(params)}
        files = {"file": (filename or "upload", payload, content_type or "application/octet-stream")}

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/{self.cloud_name}/{kind}/upload",
                    data=data,
                    files=files,
                    timeout=settings.MEDIA_TIMEOUT_SECONDS,
                )
        except httpx.HTTPError as exc:
            log.warning("Media upload for motor %s failed: %s", owner_id, exc)
            raise MediaHostError("Upload failed") from exc

        if response.status_code != 200:
            log.warning("Media upload for motor %s rejected: %s", owner_id, response.status_code)
            raise MediaHostError("Upload failed")

        body = response.json()
        url = body.get("secure_url") or body.get("url")
        if not url:
            raise MediaHostError("Upload failed: no URL returned")
        return UploadedMedia(url=url, public_id=body.get("public_id", params["public_id"]), kind=kind)


def get_media_host() -> MediaHost:
    """Dependance FastAPI / FastAPI dependency (surchargee dans les tests / overridden in tests)."""
    return MediaHost()
