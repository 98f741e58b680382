import secrets
import string

RECORD_ID_ALPHABET = string.ascii_lowercase + string.digits
RECORD_ID_LENGTH = 9


def new_record_id() -> str:
    """Short random identifier for new products and parking records."""
    return "".join(secrets.choice(RECORD_ID_ALPHABET) for _ in range(RECORD_ID_LENGTH))
