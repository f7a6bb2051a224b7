"""
Receipt renderer configuration

Asset locations and rendering switches come from environment variables
(optionally loaded from a .env file).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from receipt_assets import DEFAULT_ASSET_TIMEOUT, ReceiptAssets, is_url
from receipt_constants import (
    DEFAULT_BACKGROUND_IMAGE,
    DEFAULT_LOGO_IMAGE,
    DEFAULT_SIGNATURE_IMAGE,
    DEFAULT_WORDMARK_IMAGE,
)

# Load environment variables
load_dotenv()

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ReceiptConfig:
    """Configuration for receipt rendering and delivery."""
    background_image: str = str(DEFAULT_BACKGROUND_IMAGE)
    logo_image: str = str(DEFAULT_LOGO_IMAGE)
    signature_image: str = DEFAULT_SIGNATURE_IMAGE
    wordmark_image: Optional[str] = str(DEFAULT_WORDMARK_IMAGE)
    asset_timeout: float = DEFAULT_ASSET_TIMEOUT
    output_dir: str = "receipts"
    page_compression: bool = True
    clip_images: bool = True

    @classmethod
    def from_environment(cls) -> "ReceiptConfig":
        """Load configuration from environment variables."""
        # An empty RECEIPT_WORDMARK_IMAGE disables the header wordmark
        wordmark = os.getenv("RECEIPT_WORDMARK_IMAGE", str(DEFAULT_WORDMARK_IMAGE))
        return cls(
            background_image=os.getenv("RECEIPT_BACKGROUND_IMAGE", str(DEFAULT_BACKGROUND_IMAGE)),
            logo_image=os.getenv("RECEIPT_LOGO_IMAGE", str(DEFAULT_LOGO_IMAGE)),
            signature_image=os.getenv("RECEIPT_SIGNATURE_IMAGE", DEFAULT_SIGNATURE_IMAGE),
            wordmark_image=wordmark or None,
            asset_timeout=float(os.getenv("RECEIPT_ASSET_TIMEOUT", str(DEFAULT_ASSET_TIMEOUT))),
            output_dir=os.getenv("RECEIPT_OUTPUT_DIR", "receipts"),
            page_compression=_env_flag("RECEIPT_PAGE_COMPRESSION", True),
            clip_images=_env_flag("RECEIPT_CLIP_IMAGES", True),
        )

    def validate(self) -> Tuple[bool, str]:
        """Validate configuration. Returns (is_valid, error_message)."""
        if self.asset_timeout <= 0:
            return False, "RECEIPT_ASSET_TIMEOUT must be positive"

        required = [
            ("RECEIPT_BACKGROUND_IMAGE", self.background_image),
            ("RECEIPT_LOGO_IMAGE", self.logo_image),
            ("RECEIPT_SIGNATURE_IMAGE", self.signature_image),
        ]
        for env_name, ref in required:
            if not ref:
                return False, f"{env_name} is not set"

        optional = [("RECEIPT_WORDMARK_IMAGE", self.wordmark_image)] if self.wordmark_image else []
        for env_name, ref in required + optional:
            if not is_url(ref) and not Path(ref).exists():
                return False, f"{env_name} points to a missing file: {ref}"
        return True, ""

    def assets(self) -> ReceiptAssets:
        """Asset references for a render."""
        return ReceiptAssets(
            background=self.background_image,
            logo=self.logo_image,
            signature=self.signature_image,
            wordmark=self.wordmark_image,
        )
