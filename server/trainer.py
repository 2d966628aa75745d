# Background trainer using an in-memory deque as an event queue.
# It is the single writer: online updates are applied one at a time through the
# store's lock. Provides enqueue_event, process_batch, start_trainer and stop_trainer.

import logging
import threading
import time
from collections import deque

logger = logging.getLogger(__name__)

EVENT_QUEUE = deque()
_stop = threading.Event()


def enqueue_event(ev: dict):
    EVENT_QUEUE.append(ev)


def process_batch(store, batch, default_learning_rate: float) -> int:
    applied = 0
    for ev in batch:
        try:
            gradient = float(ev['gradient'])
            lr = ev.get('learning_rate')
            lr = default_learning_rate if lr is None else float(lr)
            features = ev.get('features')
            if features is None:
                features = {}
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed update event: %s", e)
            continue
        store.update(gradient, lr, features)
        applied += 1
    return applied


def start_trainer(store, batch_size=256, save_every=60, model_path=None, default_learning_rate=0.1):
    _stop.clear()

    def _loop():
        last_saved = time.time()
        logger.info("Trainer started (in-memory)")
        while not _stop.is_set():
            try:
                batch = []
                while EVENT_QUEUE and len(batch) < batch_size:
                    batch.append(EVENT_QUEUE.popleft())
                if batch and store.loaded:
                    applied = process_batch(store, batch, default_learning_rate)
                    logger.debug("Applied %d/%d updates", applied, len(batch))
                elif batch:
                    logger.warning("Dropping %d updates, no model loaded", len(batch))
                else:
                    _stop.wait(0.5)
                if save_every and model_path and store.loaded and time.time() - last_saved >= save_every:
                    store.save(model_path)
                    last_saved = time.time()
            except Exception:
                logger.exception("Trainer loop exception")
        logger.info("Trainer stopped")

    t = threading.Thread(target=_loop, daemon=True)
    t.start()
    return t


def stop_trainer(thread=None, timeout=5.0):
    _stop.set()
    if thread is not None:
        thread.join(timeout)
