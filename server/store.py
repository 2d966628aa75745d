# Holds the live model behind one lock so online updates never interleave with
# scoring or saving, and persists it to disk atomically.

import logging
import os
import threading
from pathlib import Path
from typing import Optional

from model import KernelModel, load_model

logger = logging.getLogger(__name__)


class ModelStore:
    def __init__(self, model: Optional[KernelModel] = None):
        self._model = model
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> Optional[KernelModel]:
        return self._model

    def _require(self) -> KernelModel:
        if self._model is None:
            raise RuntimeError("no model loaded")
        return self._model

    def score(self, features) -> float:
        with self._lock:
            return self._require().score_item(features)

    def update(self, gradient: float, learning_rate: float, features):
        with self._lock:
            self._require().online_update(gradient, learning_rate, features)

    def update_and_score(self, gradient: float, learning_rate: float, features) -> float:
        with self._lock:
            model = self._require()
            model.online_update(gradient, learning_rate, features)
            return model.score_item(features)

    def replace(self, model: KernelModel):
        with self._lock:
            self._model = model

    def save(self, path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + '.tmp')
        with self._lock:
            model = self._require()
            try:
                with tmp.open('w', encoding='utf-8') as f:
                    model.save(f)
                # atomic replace, still under the lock so saves never share the tmp file
                os.replace(tmp, path)
            except BaseException:
                tmp.unlink(missing_ok=True)
                raise
        logger.info("Saved model to %s", path)

    def load(self, path):
        path = Path(path)
        with path.open('r', encoding='utf-8') as f:
            model = load_model(f)
        # swap only after the whole file parsed
        self.replace(model)
        logger.info("Loaded model from %s", path)
        return model
