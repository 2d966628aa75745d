# Line transport for model files: every record is one JSON object on one line.

from pydantic import ValidationError

from schemas import ModelRecord


class RecordDecodeError(ValueError):
    pass


def encode(record: ModelRecord) -> str:
    return record.model_dump_json(exclude_none=True)


def decode_model(line: str) -> ModelRecord:
    if line is None:
        raise RecordDecodeError("no record to decode")
    text = line.strip()
    if not text:
        raise RecordDecodeError("empty record line")
    try:
        return ModelRecord.model_validate_json(text)
    except ValidationError as e:
        raise RecordDecodeError(f"malformed record: {e.error_count()} error(s)") from e
