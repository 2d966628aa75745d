import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import trainer
from config import get_settings
from model import ModelLoadError
from schemas import ScoreRequest, UpdateRequest
from store import ModelStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - [%(levelname)s] - %(name)s - %(message)s',
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger("kernel_model_api")

settings = get_settings()

# Global in-memory components
store = ModelStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.path.exists(settings.model_path):
        try:
            store.load(settings.model_path)
        except ModelLoadError as e:
            logger.error("Could not load model from %s: %s", settings.model_path, e)
    else:
        logger.warning("No model file at %s, serving without a model", settings.model_path)
    # Start background trainer with a reference to the store
    thread = trainer.start_trainer(
        store,
        batch_size=settings.trainer_batch_size,
        save_every=settings.save_every,
        model_path=settings.model_path,
        default_learning_rate=settings.learning_rate,
    )
    yield
    trainer.stop_trainer(thread)


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_model():
    if not store.loaded:
        raise HTTPException(status_code=503, detail='no model loaded')


@app.post('/score')
def score(req: ScoreRequest):
    _require_model()
    return {"score": float(store.score(req.features))}


@app.post('/update')
def update(req: UpdateRequest):
    _require_model()
    trainer.enqueue_event({
        'gradient': req.gradient,
        'learning_rate': req.learning_rate,
        'features': req.features,
    })
    return {"status": "queued"}


@app.post('/update/sync')
def update_sync(req: UpdateRequest):
    _require_model()
    lr = settings.learning_rate if req.learning_rate is None else req.learning_rate
    new_score = store.update_and_score(req.gradient, lr, req.features)
    return {"status": "ok", "score": float(new_score)}


@app.post('/save')
def save():
    _require_model()
    store.save(settings.model_path)
    return {"status": "ok", "path": settings.model_path}


@app.get('/model')
def model_info():
    _require_model()
    model = store.model
    return {
        "model_type": model.MODEL_TYPE,
        "dictionary_size": len(model.dictionary),
        "num_support_vectors": len(model.support_vectors),
    }


@app.get('/health')
def health():
    return {"status": "ok", "model_loaded": store.loaded}
