import logging
from typing import Sequence

from .errors import DuplicateKey
from .repository import DocumentRepository
from .sequence import SequenceAllocator

_logger = logging.getLogger(__name__)


async def seed_if_empty(
    repository: DocumentRepository,
    allocator: SequenceAllocator,
    bootstrap: Sequence,
    sequence_name: str,
    last_bootstrap_id: int,
) -> bool:
    """Insert ``bootstrap`` once and align the counter with it.

    Returns True only when this call inserted the records. A non-empty
    collection is left alone, counter included. Two instances racing on an
    empty collection both pass the count check; the loser gets DuplicateKey
    from the batch insert and treats it as seeded by the other instance.
    """
    count = await repository.count()
    if count > 0:
        _logger.info("%s collection already has %s items, skipping seed", repository.collection, count)
        return False

    _logger.info("Seeding %s collection", repository.collection)
    try:
        await repository.insert_many(bootstrap)
    except DuplicateKey:
        _logger.warning("%s already seeded by another instance", repository.collection)
        # Winner may have crashed before setting the counter; this is a no-op otherwise
        await allocator.initialize(sequence_name, last_bootstrap_id)
        return False

    await allocator.initialize(sequence_name, last_bootstrap_id)
    _logger.info("Seeded %s %s", len(bootstrap), repository.collection)
    return True
