"""
Image asset resolution for the receipt

An asset reference is raw image bytes, a filesystem path, or an http(s) URL.
References are resolved one at a time, when the section that draws them is
rendered, and any failure surfaces as AssetLoadError.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import requests
from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

from receipt_errors import AssetLoadError

logger = logging.getLogger(__name__)

AssetRef = Union[bytes, bytearray, str, Path]

DEFAULT_ASSET_TIMEOUT = 10


@dataclass
class ReceiptAssets:
    """The images a receipt needs. Wordmark is optional."""
    background: AssetRef
    logo: AssetRef
    signature: AssetRef
    wordmark: Optional[AssetRef] = None


def is_url(ref: AssetRef) -> bool:
    return isinstance(ref, str) and ref.lower().startswith(('http://', 'https://'))


class AssetResolver:
    """Turns asset references into reportlab ImageReaders"""

    def __init__(self, timeout: float = DEFAULT_ASSET_TIMEOUT, session=None):
        self.timeout = timeout
        # Anything with a requests-compatible get() works (a Session, or the module)
        self.http = session if session is not None else requests

    def load_bytes(self, ref: AssetRef, label: str) -> bytes:
        """Fetch the raw bytes behind a reference."""
        if ref is None:
            raise AssetLoadError(label, ref, "no reference configured")

        if isinstance(ref, (bytes, bytearray)):
            data = bytes(ref)
        elif is_url(ref):
            try:
                response = self.http.get(ref, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.warning(f"Failed to fetch {label} image: {e}")
                raise AssetLoadError(label, ref, str(e)) from e
            data = response.content
        else:
            try:
                data = Path(ref).read_bytes()
            except OSError as e:
                logger.warning(f"Failed to read {label} image: {e}")
                raise AssetLoadError(label, ref, str(e)) from e

        if not data:
            raise AssetLoadError(label, ref, "image is empty")
        return data

    def resolve(self, ref: AssetRef, label: str) -> ImageReader:
        """
        Resolve a reference to a decodable image.

        Args:
            ref: Bytes, path or URL
            label: Human name used in errors ("logo", "signature", ...)

        Returns:
            ImageReader ready for canvas.drawImage

        Raises:
            AssetLoadError: if the reference cannot be loaded or decoded
        """
        data = self.load_bytes(ref, label)

        try:
            with Image.open(BytesIO(data)) as img:
                img.load()
                logger.debug(f"Resolved {label} image: {img.format} {img.size[0]}x{img.size[1]}")
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            raise AssetLoadError(label, ref, f"not a readable image ({e})") from e

        return ImageReader(BytesIO(data))
