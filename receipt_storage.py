"""
Receipt delivery

Saves finished receipts to disk, or publishes them to Cloudflare R2 and hands
back a time-limited download link for the client.
"""

import os
import unicodedata
import uuid
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import quote

from dotenv import load_dotenv

from pdf_receipt_renderer import ReceiptArtifact

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# R2 presigned URLs max out at 7 days (604800 seconds)
MAX_LINK_DAYS = 7
RECEIPT_KEY_PREFIX = "receipts"


def save_receipt(artifact: ReceiptArtifact, output_dir: Union[str, Path]) -> Path:
    """Write a receipt into output_dir under its suggested file name.

    Args:
        artifact: Rendered receipt
        output_dir: Target directory (created if missing)

    Returns:
        Path of the written file
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.filename
    path.write_bytes(artifact.content)
    logger.info(f"Saved receipt to {path} ({len(artifact.content)} bytes)")
    return path


def receipt_object_key(artifact: ReceiptArtifact, issued_on: date) -> str:
    """Bucket key for a receipt: receipts/<year>/<month>/<token>/<file name>

    The random token keeps two receipts with the same file name apart and
    makes the link unguessable from the client's name.
    """
    return (f"{RECEIPT_KEY_PREFIX}/{issued_on:%Y}/{issued_on:%m}/"
            f"{uuid.uuid4().hex}/{artifact.filename}")


def content_disposition(filename: str) -> str:
    """Attachment header for a receipt download (RFC 6266).

    HTTP headers are limited to ASCII, so non-ASCII names get an ASCII
    fallback plus the exact name in the UTF-8 filename* parameter.
    """
    fallback = unicodedata.normalize('NFKD', filename).encode('ascii', 'ignore').decode('ascii')
    fallback = fallback.replace('"', '').replace('\\', '')
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback or 'receipt.pdf'}\"; filename*=UTF-8''{quote(filename)}"


def link_lifetime_days(requested: Optional[int], default: int) -> int:
    """Days a download link stays valid, kept within 1..MAX_LINK_DAYS"""
    days = default if requested is None else requested
    return max(1, min(days, MAX_LINK_DAYS))


@dataclass
class R2Settings:
    """Bucket and credentials for publishing receipts."""
    account_id: str = ""
    access_key: str = ""
    secret_key: str = ""
    bucket: str = "yoga-receipts"
    link_days: int = MAX_LINK_DAYS

    @classmethod
    def from_environment(cls) -> "R2Settings":
        """Load settings from environment variables."""
        return cls(
            account_id=os.getenv("R2_ACCOUNT_ID", ""),
            access_key=os.getenv("R2_ACCESS_KEY_ID", ""),
            secret_key=os.getenv("R2_SECRET_ACCESS_KEY", ""),
            bucket=os.getenv("R2_BUCKET", "yoga-receipts"),
            link_days=int(os.getenv("RECEIPT_LINK_EXPIRY_DAYS", str(MAX_LINK_DAYS))),
        )

    @property
    def endpoint(self) -> Optional[str]:
        if not self.account_id:
            return None
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    def validate(self) -> Tuple[bool, str]:
        """Validate settings. Returns (is_valid, error_message)."""
        required = [
            ("R2_ACCOUNT_ID", self.account_id),
            ("R2_ACCESS_KEY_ID", self.access_key),
            ("R2_SECRET_ACCESS_KEY", self.secret_key),
            ("R2_BUCKET", self.bucket),
        ]
        for env_name, value in required:
            if not value:
                return False, f"{env_name} is not set"
        return True, ""


def _r2_client(settings: R2Settings):
    """boto3 S3 client pointed at the R2 endpoint"""
    import boto3
    from botocore.config import Config

    return boto3.client(
        's3',
        endpoint_url=settings.endpoint,
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        config=Config(signature_version='s3v4'),
        region_name='auto'  # R2 uses 'auto' region
    )


class ReceiptStorageService:
    """Publish receipts to R2 and return a download link for the client."""

    def __init__(self, settings: Optional[R2Settings] = None):
        self.settings = settings or R2Settings.from_environment()

    def is_configured(self) -> Tuple[bool, str]:
        return self.settings.validate()

    def upload_pdf(
        self,
        artifact: ReceiptArtifact,
        expiry_days: Optional[int] = None,
        issued_on: Optional[date] = None,
    ) -> Optional[str]:
        """Upload a receipt and return a presigned download URL.

        Args:
            artifact: Rendered receipt
            expiry_days: Days the link stays valid (1 to 7, defaults to the settings)
            issued_on: Receipt date, used to file the object by month (defaults to today)

        Returns:
            Presigned URL string, or None if the receipt could not be published
        """
        is_configured, error = self.is_configured()
        if not is_configured:
            logger.warning(f"Receipt storage not configured: {error}")
            return None

        days = link_lifetime_days(expiry_days, self.settings.link_days)
        key = receipt_object_key(artifact, issued_on or date.today())

        try:
            client = _r2_client(self.settings)
            client.put_object(
                Bucket=self.settings.bucket,
                Key=key,
                Body=artifact.content,
                ContentType='application/pdf',
                ContentDisposition=content_disposition(artifact.filename),
            )
            url = client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.settings.bucket, 'Key': key},
                ExpiresIn=days * 24 * 3600
            )
        except Exception as e:
            logger.error(f"Failed to publish receipt {artifact.filename}: {e}")
            return None

        logger.info(f"Published receipt to {key} (link valid {days} days)")
        return url
