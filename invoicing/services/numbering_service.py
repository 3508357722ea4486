"""
Invoice number allocation.

The counter (setting ``last_invoice_number``) is the highest invoice number
ever issued; the next number is always ``counter + 1``. Every code path that
mints an invoice number goes through this module.

All writes to the counter are compare-and-set updates against the value
that was read, so two concurrent allocations can never hand out the same
number. A caller that loses the race re-reads and tries again, up to
MAX_ALLOCATION_ATTEMPTS times.
"""

import logging
import re
from typing import List

from supabase import Client

from invoicing.config import settings
from invoicing.services.settings_service import (
    compare_and_set_setting,
    ensure_setting,
    get_setting,
)
from invoicing.utils.constants import SETTING_KEYS

logger = logging.getLogger(__name__)

COUNTER_KEY = SETTING_KEYS["LAST_INVOICE_NUMBER"]
MAX_ALLOCATION_ATTEMPTS = 5

_INVOICE_NUMBER_PATTERN = re.compile(r"^(?P<prefix>[A-Za-z0-9]+)#(?P<number>\d+)$")


class InvoiceNumberValidationError(ValueError):
    """Raised when a requested counter value breaks the numbering rules."""


class InvoiceNumberConflictError(Exception):
    """Raised when a number can no longer be claimed (stale or contended)."""

    def __init__(self, message: str, expected_next: int | None = None):
        super().__init__(message)
        self.expected_next = expected_next


def format_invoice_number(number: int) -> str:
    """Format a counter value as a display invoice number, e.g. BLH#2800."""
    return f"{settings.INVOICE_PREFIX}#{number}"


def parse_invoice_number(invoice_number: str) -> int:
    """
    Extract the numeric part of a formatted invoice number.

    Raises:
        InvoiceNumberValidationError: If the string is not "<PREFIX>#<int>"
            with this installation's prefix.
    """
    match = _INVOICE_NUMBER_PATTERN.match(invoice_number.strip())
    if not match or match.group("prefix") != settings.INVOICE_PREFIX:
        raise InvoiceNumberValidationError(
            f"Invoice number must look like {settings.INVOICE_PREFIX}#<number>"
        )
    return int(match.group("number"))


async def get_counter(supabase_client: Client) -> int:
    """
    Read the counter without writing.

    A counter that was never stored reads as the floor value.
    """
    value = await get_setting(supabase_client, COUNTER_KEY)
    if value is None:
        return settings.INVOICE_NUMBER_FLOOR
    return int(value)


async def peek_next(supabase_client: Client) -> int:
    """Return the number the next allocation would issue. Read-only."""
    return await get_counter(supabase_client) + 1


async def _load_counter_for_update(supabase_client: Client) -> int:
    value = await ensure_setting(
        supabase_client,
        COUNTER_KEY,
        str(settings.INVOICE_NUMBER_FLOOR),
    )
    return int(value)


async def allocate_one(supabase_client: Client) -> str:
    """
    Issue the next invoice number and persist the advanced counter.

    Returns:
        The formatted invoice number (e.g. "BLH#2800")

    Raises:
        InvoiceNumberConflictError: If the counter kept changing underneath
            us for MAX_ALLOCATION_ATTEMPTS attempts
    """
    for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
        current = await _load_counter_for_update(supabase_client)
        next_number = current + 1

        if await compare_and_set_setting(
            supabase_client, COUNTER_KEY, str(current), str(next_number)
        ):
            invoice_number = format_invoice_number(next_number)
            logger.info(f"Allocated invoice number {invoice_number}")
            return invoice_number

        logger.warning(
            f"Invoice counter changed during allocation (attempt {attempt}/"
            f"{MAX_ALLOCATION_ATTEMPTS})"
        )

    raise InvoiceNumberConflictError(
        "Could not allocate an invoice number: counter is under contention"
    )


async def claim(supabase_client: Client, number: int) -> str:
    """
    Claim a specific number the client was shown as "next".

    Succeeds only if ``number`` is still exactly ``counter + 1``; the
    counter is then advanced to ``number``.

    Raises:
        InvoiceNumberConflictError: If another invoice already took the
            number, or the client skipped ahead
    """
    current = await _load_counter_for_update(supabase_client)
    expected_next = current + 1

    if number != expected_next:
        raise InvoiceNumberConflictError(
            f"Invoice number {format_invoice_number(number)} is not the next "
            f"available number ({format_invoice_number(expected_next)})",
            expected_next=expected_next,
        )

    if not await compare_and_set_setting(
        supabase_client, COUNTER_KEY, str(current), str(number)
    ):
        raise InvoiceNumberConflictError(
            f"Invoice number {format_invoice_number(number)} was just issued "
            "to another invoice",
            expected_next=await peek_next(supabase_client),
        )

    invoice_number = format_invoice_number(number)
    logger.info(f"Claimed invoice number {invoice_number}")
    return invoice_number


async def allocate_batch(supabase_client: Client, count: int) -> List[str]:
    """
    Issue ``count`` consecutive invoice numbers.

    The counter is persisted after every single allocation, so if this
    fails part-way the counter reflects exactly the numbers already issued.
    """
    if count < 0:
        raise InvoiceNumberValidationError("Batch size must not be negative")

    return [await allocate_one(supabase_client) for _ in range(count)]


async def set_counter(supabase_client: Client, value: int) -> int:
    """
    Administratively move the counter forward.

    Args:
        supabase_client: Supabase client
        value: New "last issued" number

    Returns:
        The persisted counter value

    Raises:
        InvoiceNumberValidationError: If ``value`` is not an integer, is
            below INVOICE_NUMBER_FLOOR, or is below the current counter
        InvoiceNumberConflictError: If the counter kept changing underneath us
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvoiceNumberValidationError("Invoice number must be an integer")

    floor = settings.INVOICE_NUMBER_FLOOR
    if value < floor:
        raise InvoiceNumberValidationError(
            f"Invoice number cannot be less than {floor}"
        )

    for _ in range(MAX_ALLOCATION_ATTEMPTS):
        current = await _load_counter_for_update(supabase_client)

        if value < current:
            raise InvoiceNumberValidationError(
                f"Invoice number cannot be less than current number ({current})"
            )

        if value == current:
            return current

        if await compare_and_set_setting(
            supabase_client, COUNTER_KEY, str(current), str(value)
        ):
            logger.info(f"Invoice counter moved from {current} to {value}")
            return value

    raise InvoiceNumberConflictError(
        "Could not update the invoice counter: counter is under contention"
    )
