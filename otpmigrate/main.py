"""
Command line front end for otpmigrate

Decodes a Google Authenticator export URI and either prints the accounts,
saves them as JSON, or writes one QR code per account.
"""

import argparse
import json
import logging
import sys

from otpmigrate.settings import load_settings
from otpmigrate.utils.file_io import save_accounts
from otpmigrate.utils.google_auth_qr import MigrationError, decode_migration_uri, scan_migration_qr
from otpmigrate.utils.qr_export import save_qr_codes

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

INTRO = """Enter the URI from Google Authenticator QR code.
The URI looks like otpauth-migration://offline?data=...

You can get it by exporting from Google Authenticator app, then scanning the QR
with a QR reader app and copying the text to your computer.
"""

WARNING = """By using online QR decoders or untrusted ways of transferring the URI text,
you risk someone storing the QR code or URI text and stealing your 2FA codes!
Remember that the data contains the website, your email and the 2FA code!
"""

def build_parser():
    parser = argparse.ArgumentParser(
        prog="otpmigrate",
        description="Decode Google Authenticator migration URIs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "otpauth-migration://offline?data=..."
  %(prog)s -o accounts.json "otpauth-migration://offline?data=..."
  %(prog)s -q --qr-dir ./my-qrcodes --image export.png
        """
    )
    parser.add_argument(
        "uri",
        nargs="?",
        help="The otpauth-migration:// URI (prompted for if omitted)"
    )
    parser.add_argument(
        "--image",
        help="Read the URI from a picture of the export QR code"
    )
    parser.add_argument(
        "-o", "--output",
        help="Save the accounts to this JSON file"
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Allow replacing an existing output file"
    )
    parser.add_argument(
        "-q", "--qrcode",
        action="store_true",
        help="Write an otpauth:// QR code image for each account"
    )
    parser.add_argument(
        "--qr-dir",
        help="Directory for QR code images (default: ./qrCodes)"
    )
    parser.add_argument(
        "--settings",
        help="Settings JSON file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )
    return parser

def prompt_for_uri(input_func=input):
    print(INTRO)
    print(WARNING)
    return input_func("totpUri: ").strip()

def ask_for_output_file(input_func=input):
    """Ask whether to save, returning a filename or None"""
    answer = input_func("Save to file? (y/n): ").strip().lower()
    if not answer.startswith("y"):
        return None
    return input_func("Filename: ").strip() or None

def print_accounts(payload, indent, declined_save=False):
    if declined_save:
        print("Not saving. Here is the data:")
    print(json.dumps(payload.to_list(), indent=indent, ensure_ascii=False))
    print("What you want to use as secret key in other password managers is 'totpSecret', not 'secret'!")

def main(argv=None, input_func=input):
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings["log_level"],
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    overwrite = settings["overwrite"] if args.overwrite is None else args.overwrite
    interactive = False

    try:
        if args.image:
            uri = scan_migration_qr(args.image)
        elif args.uri:
            uri = args.uri
        else:
            uri = prompt_for_uri(input_func)
            interactive = True

        payload = decode_migration_uri(uri)

        if args.qrcode:
            directory = args.qr_dir or settings["qr_dir"]
            results = save_qr_codes(payload, directory)
            created = sum(1 for _, was_created in results if was_created)
            print(f"Wrote {created} of {len(results)} QR codes to {directory}")
            return 0

        output = args.output
        if output is None and interactive:
            output = ask_for_output_file(input_func)

        if output:
            print(f'Saving to "{output}"...')
            save_accounts(output, payload, indent=settings["json_indent"], overwrite=overwrite)
        else:
            print_accounts(payload, settings["json_indent"], declined_save=interactive)
    except MigrationError as e:
        logger.debug("Import failed", exc_info=True)
        print(f"Error during {e.stage}: {e}", file=sys.stderr)
        return 1
    except FileExistsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
