from typing import List


def split_into_batches(total: int, batch_size: int) -> List[int]:
    """
    Split a total into batches.

    Examples:
        >>> split_into_batches(44, 10)
        [10, 10, 10, 10, 4]

        >>> split_into_batches(20, 10)
        [10, 10]
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    if total <= 0:
        return []

    full, remainder = divmod(total, batch_size)
    batches = [batch_size] * full
    if remainder:
        batches.append(remainder)
    return batches


def batch_offsets(batches: List[int], start: int = 0) -> List[int]:
    """Index of the first item of each batch: [10, 10, 4] -> [0, 10, 20]."""
    offsets = []
    position = start
    for size in batches:
        offsets.append(position)
        position += size
    return offsets
