import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from pos.numbering import generate_transaction_number

FIXED_NOW = datetime(2026, 10, 19, 14, 30, 15, 123456, tzinfo=timezone.utc)


def test_number_format():
    number = generate_transaction_number(FIXED_NOW)
    assert re.fullmatch(r"TRX20261019143015123-[0-9A-F]{10}", number)


def test_same_millisecond_does_not_collide():
    numbers = {generate_transaction_number(FIXED_NOW) for _ in range(5000)}
    assert len(numbers) == 5000


def test_concurrent_generation_is_unique():
    """Simulated stations generating numbers at the same instant."""
    with ThreadPoolExecutor(max_workers=8) as pool:
        numbers = list(pool.map(lambda _: generate_transaction_number(FIXED_NOW), range(4000)))
    assert len(set(numbers)) == len(numbers)
