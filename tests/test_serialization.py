import io
import json
import math

import pytest

from codec import RecordDecodeError, decode_model, encode
from model import KernelModel, ModelLoadError, load_model
from schemas import KernelType, ModelHeader, ModelRecord
from support_vector import SupportVector


def _saved(model):
    buf = io.StringIO()
    model.save(buf)
    return buf.getvalue()


def test_save_layout(mixed_model):
    lines = _saved(mixed_model).splitlines()
    assert len(lines) == 1 + len(mixed_model.support_vectors)

    header = json.loads(lines[0])["model_header"]
    assert header["model_type"] == "kernel"
    assert header["num_records"] == 4
    assert header["dictionary"] == [["loc", "lat"], ["loc", "lng"], ["price", "usd"]]

    first = json.loads(lines[1])["support_vector"]
    assert first["function_form"] == "rbf"
    assert first["center"] == [1.0, 0.5, 0.0]
    assert first["weight"] == 0.75


def test_round_trip(mixed_model):
    mixed_model.online_update(0.3, 0.07, {"loc": {"lat": 0.1}, "price": {"usd": 2.0}})

    loaded = load_model(io.StringIO(_saved(mixed_model)))

    assert isinstance(loaded, KernelModel)
    assert loaded.dictionary.keys == mixed_model.dictionary.keys
    assert loaded.support_vectors == mixed_model.support_vectors
    for a, b in zip(loaded.support_vectors, mixed_model.support_vectors):
        assert a.weight == b.weight
    item = {"loc": {"lat": 0.5, "lng": 0.5}}
    assert loaded.score_item(item) == mixed_model.score_item(item)


def test_round_trip_empty_model():
    loaded = load_model(io.StringIO(_saved(KernelModel())))
    assert loaded.dictionary.size() == 0
    assert loaded.support_vectors == []


def test_load_leaves_reader_after_records(linear_model):
    reader = io.StringIO(_saved(linear_model) + "trailing\n")
    load_model(reader)
    assert reader.readline() == "trailing\n"


def test_truncated_file(mixed_model):
    lines = _saved(mixed_model).splitlines(keepends=True)
    with pytest.raises(ModelLoadError) as exc:
        load_model(io.StringIO("".join(lines[:3])))
    assert exc.value.line_number == 4


def test_corrupt_record_installs_nothing(linear_model, mixed_model):
    lines = _saved(mixed_model).splitlines(keepends=True)
    lines[2] = "{not json\n"
    reader = io.StringIO("".join(lines))
    header = decode_model(reader.readline()).model_header

    with pytest.raises(ModelLoadError) as exc:
        linear_model.load(header, reader)

    assert exc.value.line_number == 3
    assert isinstance(exc.value.__cause__, RecordDecodeError)
    assert linear_model.dictionary.keys == [("f", "a"), ("f", "b")]
    assert len(linear_model.support_vectors) == 1


def test_header_in_place_of_support_vector(linear_model):
    text = _saved(linear_model).splitlines(keepends=True)
    bad = text[0] + text[0]
    with pytest.raises(ModelLoadError) as exc:
        load_model(io.StringIO(bad))
    assert exc.value.line_number == 2


def test_unknown_model_type():
    line = encode(ModelRecord(model_header=ModelHeader(model_type="forest"))) + "\n"
    with pytest.raises(ModelLoadError, match="forest"):
        load_model(io.StringIO(line))


def test_kernel_model_rejects_other_header():
    with pytest.raises(ModelLoadError):
        KernelModel().load(ModelHeader(model_type="linear"), io.StringIO(""))


def test_empty_file():
    with pytest.raises(ModelLoadError) as exc:
        load_model(io.StringIO(""))
    assert exc.value.line_number == 1


def test_missing_header(linear_model):
    records = _saved(linear_model).splitlines(keepends=True)[1:]
    with pytest.raises(ModelLoadError, match="header"):
        load_model(io.StringIO("".join(records)))


def test_decode_rejects_bad_lines():
    with pytest.raises(RecordDecodeError):
        decode_model("")
    with pytest.raises(RecordDecodeError):
        decode_model('{"support_vector": {"function_form": "sigmoid"}}')
    with pytest.raises(RecordDecodeError):
        decode_model('{"model_header": {"model_type": "kernel", "num_records": -1}}')


def test_save_flushes(linear_model):
    class Sink(io.StringIO):
        flushed = False

        def flush(self):
            self.flushed = True
            super().flush()

    sink = Sink()
    linear_model.save(sink)
    assert sink.flushed
    assert sink.getvalue().endswith("\n")


def test_round_trip_non_finite_values(linear_model):
    linear_model.support_vectors[0].set_weight(float("nan"))
    linear_model.support_vectors.append(
        SupportVector(KernelType.LINEAR, [float("inf"), float("-inf")], weight=float("inf")))

    text = _saved(linear_model)
    assert "null" not in text

    loaded = load_model(io.StringIO(text))
    assert math.isnan(loaded.support_vectors[0].weight)
    assert loaded.support_vectors[1].weight == float("inf")
    assert loaded.support_vectors[1].center.tolist() == [float("inf"), float("-inf")]
