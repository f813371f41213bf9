import re
import secrets

# No I, O, 0 or 1: codes get read aloud and typed from printed cards.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
SEGMENTS = 4
SEGMENT_LENGTH = 4
CODE_LENGTH = SEGMENTS * SEGMENT_LENGTH


def _strip(raw: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "", raw or "").upper()


def normalize_card_code(raw: str) -> str:
    """Canonical ``XXXX-XXXX-XXXX-XXXX`` form of a typed or scanned code."""
    cleaned = _strip(raw)
    chunks = [cleaned[i:i + SEGMENT_LENGTH] for i in range(0, len(cleaned), SEGMENT_LENGTH)]
    return "-".join(chunks)


def is_valid_card_code(raw: str) -> bool:
    return len(_strip(raw)) == CODE_LENGTH


def generate_card_code() -> str:
    segments = (
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(SEGMENT_LENGTH))
        for _ in range(SEGMENTS)
    )
    return "-".join(segments)
