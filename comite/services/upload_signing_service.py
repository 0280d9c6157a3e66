"""
Upload authorization and URL signing service
"""
import hmac
import logging
from datetime import timedelta
from typing import Any, Optional
from urllib.parse import quote

from ..core.config import settings
from ..core.exceptions import (
    AuthenticationException,
    ComiteException,
    AuthorizationException,
    ConfigurationException,
    StorageException,
    ValidationException,
)
from ..core.firebase_config import get_storage, initialize_firebase
from ..core.rate_limit import FixedWindowRateLimiter
from ..models.upload import SignedUpload, UploadRequest

logger = logging.getLogger(__name__)

ALLOWED_ROLES = ("owner", "admin", "editor")
ALLOWED_MIME = ("image/jpeg", "image/png", "image/webp")
MAX_BYTES = 10 * 1024 * 1024  # 10MB
URL_TTL_SECONDS = 60
CACHE_CONTROL = "public, max-age=31536000, immutable"

RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_MAX = 20

# Characters encodeURI leaves alone on top of quote()'s always-safe set
_URI_SAFE = "!*'();,/?:@&=+$#"


def encode_uri(value: str) -> str:
    return quote(value, safe=_URI_SAFE)


class UploadSigner:
    """Base class for primitives that sign a direct PUT upload"""

    def sign_put(self, object_key: str, content_type: str, expires_in: int, cache_control: str) -> str:
        raise NotImplementedError


class FirebaseUploadSigner(UploadSigner):
    """Signs direct PUT uploads against the Firebase Storage bucket"""

    def __init__(self, bucket_name: str, api_access_endpoint: Optional[str] = None):
        self.bucket = get_storage(bucket_name)
        self.api_access_endpoint = api_access_endpoint

    def sign_put(self, object_key: str, content_type: str, expires_in: int, cache_control: str) -> str:
        blob = self.bucket.blob(object_key)
        options = {}
        if self.api_access_endpoint:
            options["api_access_endpoint"] = self.api_access_endpoint
        return blob.generate_signed_url(
            version="v4",
            expiration=timedelta(seconds=expires_in),
            method="PUT",
            content_type=content_type,
            headers={"Cache-Control": cache_control, "x-goog-acl": "public-read"},
            **options,
        )


class UploadSigningService:
    """Gatekeeper for admin console uploads to object storage"""

    def __init__(
        self,
        signer: UploadSigner,
        shared_secret: str,
        public_base_url: str,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
    ):
        self.signer = signer
        self.shared_secret = shared_secret
        self.public_base_url = public_base_url.rstrip("/")
        self.rate_limiter = rate_limiter or FixedWindowRateLimiter(
            calls=RATE_LIMIT_MAX, period=RATE_LIMIT_WINDOW_SECONDS
        )

    def authorize(self, role: Optional[str], secret: Optional[str]) -> str:
        """
        Check the caller's role and shared secret

        Raises:
            AuthenticationException: Missing identity or wrong secret
            AuthorizationException: Role may not upload
        """
        if not role or not secret:
            raise AuthenticationException("Unauthorized")
        if role not in ALLOWED_ROLES:
            logger.warning(f"Upload signing refused for role {role!r}")
            raise AuthorizationException("Forbidden", details={"role": role})
        if not hmac.compare_digest(secret.encode(), self.shared_secret.encode()):
            logger.warning(f"Upload signing refused, bad secret for role {role!r}")
            raise AuthenticationException("Unauthorized")
        return role

    def parse_request(self, payload: Any) -> UploadRequest:
        """
        Validate the signing request body

        Raises:
            ValidationException: Missing fields, disallowed type, or oversized file
        """
        payload = payload if isinstance(payload, dict) else {}
        content_type = payload.get("contentType")
        object_key = payload.get("objectKey")
        content_length = payload.get("contentLength")

        if not content_type or not object_key:
            raise ValidationException("contentType and objectKey are required")
        if not isinstance(object_key, str):
            raise ValidationException("objectKey must be a string")
        if content_type not in ALLOWED_MIME:
            raise ValidationException("Invalid MIME type", details={"allowed": list(ALLOWED_MIME)})

        is_number = isinstance(content_length, (int, float)) and not isinstance(content_length, bool)
        if is_number and content_length > MAX_BYTES:
            raise ValidationException("File too large", details={"max_bytes": MAX_BYTES})

        return UploadRequest(
            contentType=content_type,
            objectKey=object_key,
            contentLength=content_length if is_number else None,
        )

    def public_url_for(self, object_key: str) -> str:
        return f"{self.public_base_url}/{encode_uri(object_key)}"

    def sign(self, upload: UploadRequest) -> SignedUpload:
        """
        Produce a time-boxed PUT URL and the eventual public URL

        Raises:
            StorageException: If the signing primitive fails
        """
        try:
            upload_url = self.signer.sign_put(
                upload.object_key, upload.content_type, URL_TTL_SECONDS, CACHE_CONTROL
            )
        except Exception as e:
            logger.error(f"Error signing upload for {upload.object_key}: {str(e)}")
            raise StorageException(
                "Failed to sign upload URL",
                details={"key": upload.object_key, "error": str(e)}
            )

        return SignedUpload(
            upload_url=upload_url,
            key=upload.object_key,
            public_url=self.public_url_for(upload.object_key),
            expires_in=URL_TTL_SECONDS,
        )

    def handle(self, client_ip: str, role: Optional[str], secret: Optional[str], payload: Any) -> SignedUpload:
        """
        Rate limit, authorize, validate and sign, in that order

        Raises:
            ComiteException: Any failure; unexpected errors become StorageException
        """
        try:
            self.rate_limiter.hit(client_ip)
            self.authorize(role, secret)
            upload = self.parse_request(payload)
            signed = self.sign(upload)
        except ComiteException:
            raise
        except Exception as e:
            logger.exception("Unexpected error while signing upload")
            raise StorageException("Failed to sign upload URL", details={"error": repr(e)})

        logger.info(f"Signed upload for {upload.object_key} ({upload.content_type})")
        return signed


def build_upload_signing_service() -> UploadSigningService:
    """
    Build the service from settings

    Raises:
        ConfigurationException: If storage or the shared secret is not configured
    """
    shared_secret = settings.require("ADMIN_SHARED_SECRET")
    bucket_name = settings.require("STORAGE_BUCKET")
    public_base_url = settings.require("PUBLIC_CDN_BASE_URL")
    if not initialize_firebase():
        raise ConfigurationException("Firebase credentials are required for upload signing")

    signer = FirebaseUploadSigner(bucket_name, settings.STORAGE_API_ENDPOINT)
    return UploadSigningService(signer, shared_secret, public_base_url)
