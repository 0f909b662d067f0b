from __future__ import annotations

import secrets

from .constants import ROOM_ID_ALPHABET, ROOM_ID_LENGTH


def generate_room_id(length: int = ROOM_ID_LENGTH) -> str:
    """Return a short random room id such as ``"k3v9x0q2m"``.

    Uniqueness is only probabilistic; the registry rejects live duplicates.
    """
    return "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))


__all__ = ["generate_room_id"]
