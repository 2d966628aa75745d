# KernelModel: a kernel machine whose support vectors may each use a different
# kernel. Sparse features are mapped to a dense vector through the dictionary;
# feature interactions come from the kernel responses, so no feature crossing
# is needed. Keep the dictionary small (hundreds, not millions, of features).
#
# The model does no locking. score_item calls may run concurrently, but
# online_update and save need exclusive access (see store.ModelStore).

import logging
from typing import List, Optional

from codec import RecordDecodeError, decode_model, encode
from dictionary import Dictionary
from schemas import DebugScoreRecord, ModelHeader, ModelRecord
from support_vector import SupportVector

logger = logging.getLogger(__name__)


class ModelLoadError(Exception):
    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class KernelModel:
    MODEL_TYPE = "kernel"

    def __init__(self):
        self.dictionary = Dictionary()
        self.support_vectors: List[SupportVector] = []

    def score_item(self, features) -> float:
        vec = self.dictionary.project(features)
        total = 0.0
        for sv in self.support_vectors:
            total += sv.evaluate(vec)
        return total

    def debug_score_item(self, features, builder: Optional[List[str]] = None) -> float:
        # not implemented yet; builder is left untouched
        return 0.0

    def debug_score_components(self, features) -> List[DebugScoreRecord]:
        return []

    def online_update(self, gradient: float, learning_rate: float, features):
        """One SGD step on the weights only.

        Each support vector's unweighted kernel response plays the part of the
        feature value in a linear update: w += -learning_rate * gradient * response.
        """
        vec = self.dictionary.project(features)
        delta_g = -learning_rate * gradient
        for sv in self.support_vectors:
            response = sv.evaluate_unweighted(vec)
            sv.set_weight(sv.get_weight() + delta_g * response)

    def save(self, writer):
        header = ModelHeader(
            model_type=self.MODEL_TYPE,
            dictionary=self.dictionary.keys,
            num_records=len(self.support_vectors),
        )
        writer.write(encode(ModelRecord(model_header=header)))
        writer.write("\n")
        for sv in self.support_vectors:
            writer.write(encode(ModelRecord(support_vector=sv.to_record())))
            writer.write("\n")
        writer.flush()

    def load(self, header: ModelHeader, reader):
        """Reads header.num_records lines from reader. Nothing is installed
        unless every record decodes."""
        if header.model_type != self.MODEL_TYPE:
            raise ModelLoadError(f"expected model type {self.MODEL_TYPE!r}, got {header.model_type!r}")
        try:
            dictionary = Dictionary(header.dictionary)
        except ValueError as e:
            raise ModelLoadError(str(e), line_number=1) from e

        support_vectors = []
        for i in range(header.num_records):
            line_number = i + 2  # header is line 1
            line = reader.readline()
            if not line:
                raise ModelLoadError(
                    f"expected {header.num_records} support vectors, file ends after {i}",
                    line_number=line_number,
                )
            try:
                record = decode_model(line)
            except RecordDecodeError as e:
                raise ModelLoadError(str(e), line_number=line_number) from e
            if record.support_vector is None or record.model_header is not None:
                raise ModelLoadError("not a support vector record", line_number=line_number)
            support_vectors.append(SupportVector.from_record(record.support_vector))

        self.dictionary = dictionary
        self.support_vectors = support_vectors
        logger.info("Loaded kernel model: %d features, %d support vectors",
                    len(dictionary), len(support_vectors))


MODEL_TYPES = {
    KernelModel.MODEL_TYPE: KernelModel,
}


def load_model(reader):
    """Reads the header line and builds the model type it names."""
    line = reader.readline()
    if not line:
        raise ModelLoadError("empty model file", line_number=1)
    try:
        record = decode_model(line)
    except RecordDecodeError as e:
        raise ModelLoadError(str(e), line_number=1) from e
    header = record.model_header
    if header is None:
        raise ModelLoadError("first record is not a model header", line_number=1)
    cls = MODEL_TYPES.get(header.model_type)
    if cls is None:
        raise ModelLoadError(f"unknown model type {header.model_type!r}", line_number=1)
    model = cls()
    model.load(header, reader)
    return model
