# Settings read from the environment (and a local .env when present).

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    model_path: str = "./model/kernel_model.jsonl"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:4200"])
    learning_rate: float = 0.1
    trainer_batch_size: int = 256
    # seconds between periodic saves, 0 disables
    save_every: float = 60.0


# env var -> (Settings field, parser); unset vars keep the dataclass default
ENV_VARS = {
    "KERNEL_MODEL_PATH": ("model_path", str),
    "KERNEL_CORS_ORIGINS": ("cors_origins", _origins),
    "KERNEL_LEARNING_RATE": ("learning_rate", float),
    "KERNEL_TRAINER_BATCH_SIZE": ("trainer_batch_size", int),
    "KERNEL_SAVE_EVERY": ("save_every", float),
}


def get_settings() -> Settings:
    overrides = {}
    for var, (name, parse) in ENV_VARS.items():
        raw = os.getenv(var)
        if raw is not None:
            overrides[name] = parse(raw)
    return Settings(**overrides)
