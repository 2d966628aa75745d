from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class KernelType(str, Enum):
    LINEAR = "linear"
    POLYNOMIAL = "polynomial"
    RADIAL_BASIS_FUNCTION = "rbf"
    ARC_COSINE = "arc_cosine"


class FeatureVector(BaseModel):
    # family -> name -> value
    float_features: Dict[str, Dict[str, float]] = Field(default_factory=dict)

    def iter_floats(self) -> Iterator[Tuple[str, str, float]]:
        for family, feats in self.float_features.items():
            for name, value in feats.items():
                yield family, name, value


def iter_float_features(item) -> Iterator[Tuple[str, str, float]]:
    """Yields (family, name, value) from a FeatureVector or a plain nested dict."""
    if item is None:
        return iter(())
    if hasattr(item, "iter_floats"):
        return item.iter_floats()
    return FeatureVector(float_features=item).iter_floats()


# --- persisted records, one per line ---

class ModelHeader(BaseModel):
    model_type: str
    dictionary: List[Tuple[str, str]] = Field(default_factory=list)
    num_records: int = Field(default=0, ge=0)


class SupportVectorRecord(BaseModel):
    # weights are not validated, so NaN/inf must survive a save/load
    model_config = ConfigDict(ser_json_inf_nan='constants')

    function_form: KernelType
    center: List[float] = Field(default_factory=list)
    scale: float = 1.0
    bias: float = 0.0
    degree: int = 2
    weight: float = 0.0


class ModelRecord(BaseModel):
    model_config = ConfigDict(ser_json_inf_nan='constants')

    model_header: Optional[ModelHeader] = None
    support_vector: Optional[SupportVectorRecord] = None


class DebugScoreRecord(BaseModel):
    feature_family: str
    feature_name: str
    feature_value: float
    feature_weight: float


# --- HTTP bodies ---

class ScoreRequest(BaseModel):
    features: FeatureVector


class UpdateRequest(BaseModel):
    gradient: float
    learning_rate: Optional[float] = None
    features: FeatureVector
