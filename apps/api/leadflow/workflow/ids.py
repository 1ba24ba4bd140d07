from __future__ import annotations

import random
import string
from datetime import datetime

ID_PREFIX = "L-"
ID_ALPHABET = string.digits + string.ascii_uppercase
ID_SUFFIX_LENGTH = 6

_system_random = random.SystemRandom()


def generate_lead_id(now: datetime, rng: random.Random | None = None) -> str:
    """Build ``L-<YYYYMMDD>-<XXXXXX>`` from the local date and a base36 suffix."""
    source = rng or _system_random
    suffix = "".join(source.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{ID_PREFIX}{now.strftime('%Y%m%d')}-{suffix}"
