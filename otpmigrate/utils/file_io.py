import json
import logging
import os

logger = logging.getLogger(__name__)

def read_json(file_path):
    """Read and parse a JSON file

    Args:
        file_path (str): Path to the JSON file

    Returns:
        dict: The parsed JSON data or an empty dict if file not found or invalid
    """
    if not os.path.exists(file_path):
        logger.debug(f"File not found: {file_path}")
        return {}

    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            data = json.load(file)
    except json.JSONDecodeError as e:
        logger.warning(f"Error parsing JSON from {file_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object in {file_path}, ignoring it")
        return {}
    return data

def write_json(file_path, data, indent=4, overwrite=False):
    """Write data to a JSON file

    Args:
        file_path (str): Path to the JSON file
        data: JSON-serializable data to write
        indent (int): Indentation of the written JSON
        overwrite (bool): Replace the file if it already exists

    Raises:
        FileExistsError: If the file exists and overwrite is False
    """
    if not overwrite and os.path.exists(file_path):
        raise FileExistsError(f'File "{file_path}" exists!')

    directory = os.path.dirname(file_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)
        logger.debug(f"Created directory: {directory}")

    with open(file_path, 'w', encoding='utf-8') as file:
        json.dump(data, file, indent=indent, ensure_ascii=False)
        file.flush()
        os.fsync(file.fileno())

def save_accounts(file_path, payload, indent=4, overwrite=False):
    """Save decoded accounts as a JSON list

    Args:
        file_path (str): Destination file
        payload (MigrationPayload or list of AccountRecord): Accounts to save
        indent (int): Indentation of the written JSON
        overwrite (bool): Replace the file if it already exists
    """
    accounts = [account.to_dict() for account in payload]
    write_json(file_path, accounts, indent=indent, overwrite=overwrite)
    logger.info(f"Saved {len(accounts)} accounts to {file_path}")
