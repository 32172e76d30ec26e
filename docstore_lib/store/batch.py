"""Bounded-concurrency batch saves."""
from __future__ import annotations
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Iterable
import logging

from .paths import StorePath
from .save_requests import SaveRequest

if TYPE_CHECKING:
    from .document_store import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


class BatchWriter:
    """Runs many saves on a worker pool.

    At most `max_concurrency` saves execute at any instant, which keeps the
    request rate under the backend's limits. Completion order is not
    preserved. Path resolution inside each save is still serialized by the
    store's lock, so saves racing for the same missing folder create it once.
    """

    def __init__(self, store: "DocumentStore"):
        self.store = store

    def save_all(
        self,
        folder_path: StorePath | str,
        requests: Iterable[SaveRequest],
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Save every request under `folder_path`.

        Returns once all saves finished. The first failure is re-raised;
        saves that have not started yet are cancelled and those in flight
        are left to finish in the background.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        folder = StorePath.parse(folder_path)
        requests = list(requests)
        if not requests:
            return

        logger.debug("Saving %d documents under %s with max_concurrency=%d", len(requests), folder, max_concurrency)
        pool = ThreadPoolExecutor(max_workers=max_concurrency, thread_name_prefix="docstore-save")
        futures = [pool.submit(self.store.save_one, folder, request) for request in requests]
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        failed = next((f for f in futures if f in done and f.exception() is not None), None)
        if failed is None:
            pool.shutdown(wait=True)
            return

        pool.shutdown(wait=False, cancel_futures=True)
        logger.warning(
            "Batch save under %s failed; %d of %d saves had not completed",
            folder, len(not_done), len(requests),
        )
        exc = failed.exception()
        assert exc is not None
        raise exc
