from __future__ import annotations

import random
import re
from datetime import datetime

from leadflow.workflow.ids import ID_ALPHABET, generate_lead_id


LEAD_ID_RE = re.compile(r"^L-\d{8}-[A-Z0-9]{6}$")


def test_lead_id_uses_local_date_and_base36_suffix() -> None:
    lead_id = generate_lead_id(datetime(2026, 3, 9, 23, 59, 59), random.Random(1))

    assert LEAD_ID_RE.match(lead_id)
    assert lead_id.startswith("L-20260309-")
    assert all(char in ID_ALPHABET for char in lead_id.split("-")[-1])


def test_lead_id_suffix_is_driven_by_rng() -> None:
    now = datetime(2026, 3, 9, 12, 0, 0)

    assert generate_lead_id(now, random.Random(42)) == generate_lead_id(now, random.Random(42))
    assert len({generate_lead_id(now) for _ in range(50)}) > 1
