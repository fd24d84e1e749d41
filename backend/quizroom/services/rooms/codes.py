import random
import string

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_code(length=6):
    """Generate a short, human-typeable room code.

    Not unique on its own; the registry retries against live codes.
    """
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))


def normalize_room_code(code):
    if not isinstance(code, str):
        return None
    return code.strip().upper() or None
