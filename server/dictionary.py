# Maps (family, name) feature keys to dense vector indices and projects
# sparse feature vectors onto those indices.

from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from scipy import sparse

from schemas import iter_float_features

FeatureKey = Tuple[str, str]


class Dictionary:
    def __init__(self, keys: Optional[Iterable[Iterable[str]]] = None):
        self._index: Dict[FeatureKey, int] = {}
        self._keys: List[FeatureKey] = []
        for key in keys or []:
            family, name = key
            if (family, name) in self._index:
                raise ValueError(f"duplicate dictionary key: {family}/{name}")
            self.add(family, name)

    def add(self, family: str, name: str) -> int:
        key = (family, name)
        idx = self._index.get(key)
        if idx is None:
            idx = len(self._keys)
            self._index[key] = idx
            self._keys.append(key)
        return idx

    def index_of(self, family: str, name: str) -> Optional[int]:
        return self._index.get((family, name))

    def size(self) -> int:
        return len(self._keys)

    def __len__(self):
        return len(self._keys)

    def __contains__(self, key) -> bool:
        return tuple(key) in self._index

    @property
    def keys(self) -> List[FeatureKey]:
        return list(self._keys)

    def project(self, features) -> np.ndarray:
        """Dense vector sized to the dictionary; unknown features are dropped
        and repeated keys add up."""
        cols, vals = [], []
        for family, name, value in iter_float_features(features):
            idx = self._index.get((family, name))
            if idx is not None:
                cols.append(idx)
                vals.append(value)
        size = len(self._keys)
        if not cols:
            return np.zeros(size, dtype=np.float64)
        # coo -> dense sums duplicate entries
        mat = sparse.coo_matrix(
            (np.asarray(vals, dtype=np.float64), (np.zeros(len(cols), dtype=np.int64), np.asarray(cols))),
            shape=(1, size),
        )
        return mat.toarray().ravel()

    def __eq__(self, other):
        if not isinstance(other, Dictionary):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self):
        return f"Dictionary(size={len(self._keys)})"
