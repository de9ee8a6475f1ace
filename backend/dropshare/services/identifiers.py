"""Short, readable identifiers for share links and uploader sessions."""
import random

FILE_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
FILE_ID_LENGTH = 6
UPLOADER_ID_PREFIX = "up_"


def generate_file_id() -> str:
    """Return a 6-character lowercase alphanumeric id.

    Uniqueness is not checked against existing records.
    """
    return "".join(random.choices(FILE_ID_ALPHABET, k=FILE_ID_LENGTH))


def generate_uploader_id() -> str:
    return f"{UPLOADER_ID_PREFIX}{generate_file_id()}"
