# A support vector: a kernel kind, its fixed parameters (reference point,
# scale, bias, degree) and a trainable weight.
# Kernel math is delegated to sklearn's pairwise kernels, dispatched by tag.

import math
from typing import Callable, Dict

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity, linear_kernel, polynomial_kernel, rbf_kernel

from schemas import KernelType, SupportVectorRecord


def _linear(x, c, sv):
    return linear_kernel(x, c)[0, 0]


def _polynomial(x, c, sv):
    return polynomial_kernel(x, c, degree=sv.degree, gamma=sv.scale, coef0=sv.bias)[0, 0]


def _rbf(x, c, sv):
    return rbf_kernel(x, c, gamma=sv.scale)[0, 0]


def _arc_cosine(x, c, sv):
    cos = float(np.clip(cosine_similarity(x, c)[0, 0], -1.0, 1.0))
    return 1.0 - math.acos(cos) / math.pi


KERNELS: Dict[KernelType, Callable] = {
    KernelType.LINEAR: _linear,
    KernelType.POLYNOMIAL: _polynomial,
    KernelType.RADIAL_BASIS_FUNCTION: _rbf,
    KernelType.ARC_COSINE: _arc_cosine,
}


def _align(a: np.ndarray, b: np.ndarray):
    # dictionary indices are append-only, so missing trailing slots are zero.
    # sklearn rejects zero-width inputs, hence at least one slot.
    n = max(a.shape[0], b.shape[0], 1)
    if a.shape[0] < n:
        a = np.pad(a, (0, n - a.shape[0]))
    if b.shape[0] < n:
        b = np.pad(b, (0, n - b.shape[0]))
    return a.reshape(1, -1), b.reshape(1, -1)


class SupportVector:
    """Kernel kind and parameters are fixed at construction; only the weight moves."""

    def __init__(self, kernel: KernelType, center, weight: float = 0.0,
                 scale: float = 1.0, bias: float = 0.0, degree: int = 2):
        self._kernel = KernelType(kernel)
        self._center = np.array(center, dtype=np.float64).ravel()
        self._center.setflags(write=False)
        self._scale = float(scale)
        self._bias = float(bias)
        self._degree = int(degree)
        self.weight = float(weight)

    @property
    def kernel(self) -> KernelType:
        return self._kernel

    @property
    def center(self) -> np.ndarray:
        return self._center

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def bias(self) -> float:
        return self._bias

    @property
    def degree(self) -> int:
        return self._degree

    def get_weight(self) -> float:
        return self.weight

    def set_weight(self, weight: float):
        self.weight = float(weight)

    def evaluate_unweighted(self, vec: np.ndarray) -> float:
        x, c = _align(np.asarray(vec, dtype=np.float64).ravel(), self._center)
        return float(KERNELS[self._kernel](x, c, self))

    def evaluate(self, vec: np.ndarray) -> float:
        return self.weight * self.evaluate_unweighted(vec)

    def to_record(self) -> SupportVectorRecord:
        return SupportVectorRecord(
            function_form=self._kernel,
            center=self._center.tolist(),
            scale=self._scale,
            bias=self._bias,
            degree=self._degree,
            weight=self.weight,
        )

    @classmethod
    def from_record(cls, record: SupportVectorRecord) -> "SupportVector":
        return cls(
            kernel=record.function_form,
            center=record.center,
            weight=record.weight,
            scale=record.scale,
            bias=record.bias,
            degree=record.degree,
        )

    def __eq__(self, other):
        if not isinstance(other, SupportVector):
            return NotImplemented
        return (self._kernel == other._kernel
                and np.array_equal(self._center, other._center)
                and self._scale == other._scale
                and self._bias == other._bias
                and self._degree == other._degree
                and self.weight == other.weight)

    def __repr__(self):
        return f"SupportVector({self._kernel.value}, dim={self._center.shape[0]}, weight={self.weight})"
