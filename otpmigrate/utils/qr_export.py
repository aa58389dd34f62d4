"""
QR code export

Writes one otpauth:// QR code per account so the accounts can be scanned
into another authenticator app.
"""

import logging
import os
import re

import qrcode

logger = logging.getLogger(__name__)

def qr_filename(account):
    """File name for an account's QR code, e.g. 'GitHub(alice).png'"""
    label = f"{account.issuer}({account.name})"
    # Path separators and characters Windows refuses in file names
    label = re.sub(r'[\\/:*?"<>|\x00-\x1f]', '_', label)
    return f"{label}.png"

def make_qr_image(data):
    """Build a QR code image for the given text"""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white")

def save_qr_codes(payload, directory):
    """
    Save a QR code image for each account

    Existing files are left untouched.

    Args:
        payload (MigrationPayload or list of AccountRecord): Accounts to export
        directory (str): Output directory, created if missing

    Returns:
        list: (path, created) tuples in account order
    """
    os.makedirs(directory, exist_ok=True)

    results = []
    for account in payload:
        path = os.path.join(directory, qr_filename(account))
        if os.path.exists(path):
            logger.warning(f"{path} already exists.")
            results.append((path, False))
            continue

        make_qr_image(account.provisioning_uri()).save(path)
        logger.info(f"{path} created.")
        results.append((path, True))

    return results
