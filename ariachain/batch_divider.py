"""Splitting a batch of transactions into sub-batches by transaction id."""

from __future__ import annotations

from typing import Iterable, Protocol, TypeVar


class _HasTransactionId(Protocol):
    transaction_id: int


T = TypeVar("T", bound=_HasTransactionId)


def divide_transaction_batch(transactions: Iterable[T], divide_count: int) -> list[list[T]]:
    """Split ``transactions`` into ``divide_count`` sub-batches.

    A transaction goes to the sub-batch given by the low bits of its id
    (``transaction_id & (divide_count - 1)``), so ``divide_count`` is meant
    to be a power of two. Order within each sub-batch is preserved.
    """
    if divide_count < 1:
        raise ValueError("divide_count must be at least 1")
    mask = divide_count - 1
    batches: list[list[T]] = [[] for _ in range(divide_count)]
    for transaction in transactions:
        batches[transaction.transaction_id & mask].append(transaction)
    return batches