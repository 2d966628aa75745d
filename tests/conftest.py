import pytest

from dictionary import Dictionary
from model import KernelModel
from schemas import FeatureVector, KernelType
from support_vector import SupportVector


@pytest.fixture
def linear_model():
    """Two-feature model with one linear support vector at [1, 0], weight 2."""
    model = KernelModel()
    model.dictionary = Dictionary([("f", "a"), ("f", "b")])
    model.support_vectors = [SupportVector(KernelType.LINEAR, [1.0, 0.0], weight=2.0)]
    return model


@pytest.fixture
def mixed_model():
    model = KernelModel()
    model.dictionary = Dictionary([("loc", "lat"), ("loc", "lng"), ("price", "usd")])
    model.support_vectors = [
        SupportVector(KernelType.RADIAL_BASIS_FUNCTION, [1.0, 0.5, 0.0], weight=0.75, scale=0.5),
        SupportVector(KernelType.LINEAR, [0.0, 1.0, 2.0], weight=-0.1),
        SupportVector(KernelType.POLYNOMIAL, [1.0, 1.0, 1.0], weight=0.3, scale=0.5, bias=1.0, degree=3),
        SupportVector(KernelType.ARC_COSINE, [0.2, 0.0, 1.0], weight=1.1),
    ]
    return model


@pytest.fixture
def item_a():
    return FeatureVector(float_features={"f": {"a": 1.0}})
