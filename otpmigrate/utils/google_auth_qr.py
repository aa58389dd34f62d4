"""
Google Authenticator migration QR code processing

This module turns an otpauth-migration:// URI, or a picture of the QR code
that carries one, into decoded accounts. Each stage raises its own error so
callers can tell the user what went wrong.
"""

import base64
import binascii
import logging
import re
from urllib.parse import unquote, urlparse

from PIL import Image, ImageEnhance, UnidentifiedImageError

from otpmigrate.utils.migration_payload import decode
from otpmigrate.utils.wire_format import DecodeError

logger = logging.getLogger(__name__)

MIGRATION_SCHEME = 'otpauth-migration'
MIGRATION_PREFIX = 'otpauth-migration://'

class MigrationError(Exception):
    """Base class for errors while importing a migration export"""
    stage = 'migration import'

class MigrationUriError(MigrationError):
    stage = 'URI parsing'

class Base64DecodeError(MigrationError):
    stage = 'base64 decode'

class PayloadDecodeError(MigrationError):
    stage = 'binary message decode'

class QrScanError(MigrationError):
    stage = 'QR code scan'

def extract_migration_data(uri):
    """
    Extract the data parameter from a migration URI

    Args:
        uri (str): A URI of the form otpauth-migration://offline?data=...

    Returns:
        str: The data parameter as it appears in the URI (still URL encoded)
    """
    uri = uri.strip()
    parsed = urlparse(uri)
    if parsed.scheme != MIGRATION_SCHEME:
        raise MigrationUriError(f"Not a Google Authenticator migration URI: {uri[:40]}")

    # parse_qs would turn '+' into a space, so pull the raw value out instead
    match = re.search(r'(?:^|&)data=([^&]*)', parsed.query)
    if not match or not match.group(1):
        raise MigrationUriError("Migration URI has no data parameter")
    return match.group(1)

def decode_base64_data(data):
    """
    Decode the URL-encoded base64 data parameter into raw bytes

    Accepts both the standard and the URL-safe alphabet, with or without
    padding.

    Args:
        data (str): The data parameter value

    Returns:
        bytes: The binary migration payload
    """
    text = re.sub(r'[\r\n\t]+', '', unquote(data))
    # Spaces stand in for '+' if the URI passed through form decoding
    text = text.replace(' ', '+')
    text = text.replace('-', '+').replace('_', '/')
    text = text.rstrip('=')
    text += '=' * (-len(text) % 4)

    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(f"Failed to decode base64 data: {e}") from e

def decode_migration_uri(uri):
    """
    Decode a migration URI into its accounts

    Args:
        uri (str): The otpauth-migration:// URI

    Returns:
        MigrationPayload: The decoded accounts in export order
    """
    data = extract_migration_data(uri)
    payload_bytes = decode_base64_data(data)
    logger.debug(f"Decoded {len(payload_bytes)} bytes of migration data")

    try:
        payload = decode(payload_bytes)
    except DecodeError as e:
        raise PayloadDecodeError(f"Failed to parse migration data: {e}") from e

    logger.info(f"Found {len(payload)} accounts in migration data")
    return payload

def _zbar_decode(image):
    # pyzbar loads the zbar shared library on import
    from pyzbar import pyzbar
    return pyzbar.decode(image)

def _scan_with_preprocessing(image):
    """
    Apply various preprocessing techniques to improve QR code detection

    Args:
        image: PIL Image object

    Returns:
        list: Decoded QR code objects
    """
    width, height = image.size
    candidates = (
        lambda: image,
        lambda: image.convert('L'),
        lambda: image.resize((width * 2, height * 2), Image.LANCZOS),
        lambda: ImageEnhance.Contrast(image).enhance(2.0),
        lambda: ImageEnhance.Brightness(image).enhance(1.5),
    )
    for make_candidate in candidates:
        decoded_objects = _zbar_decode(make_candidate())
        if decoded_objects:
            return decoded_objects
    return []

def scan_migration_qr(image_input):
    """
    Read the migration URI from a QR code image

    Args:
        image_input (str or PIL.Image): Path to the image or a PIL Image object

    Returns:
        str: The otpauth-migration:// URI found in the image
    """
    if isinstance(image_input, Image.Image):
        image = image_input
    else:
        try:
            image = Image.open(image_input)
            image.load()
        except (OSError, UnidentifiedImageError) as e:
            raise QrScanError(f"Could not open image file: {e}") from e

    decoded_objects = _scan_with_preprocessing(image)
    if not decoded_objects:
        raise QrScanError("No QR code found in the image")

    for obj in decoded_objects:
        data = obj.data.decode('utf-8', errors='replace') if isinstance(obj.data, bytes) else str(obj.data)
        if data.startswith(MIGRATION_PREFIX):
            return data
        logger.debug(f"Ignoring QR code that is not a migration export: {data[:30]}...")

    raise QrScanError("No valid Google Authenticator QR code found")
