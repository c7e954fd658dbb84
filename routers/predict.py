import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.datastructures import UploadFile

from models.errors import ValidationError
from models.schema import PredictionRecord, PredictResponse, HistoriesResponse
from routers.image_classifier import ImageClassifier, ModelLoader, classify
from routers.prediction_store import PredictionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/predict", tags=["Predict"])

model_loader = ModelLoader()


# === Dependencies ===
def get_classifier() -> ImageClassifier:
    return ImageClassifier(model_loader)


def get_prediction_store() -> PredictionStore:
    return PredictionStore()


@router.post("", response_model=PredictResponse)
async def predict(
    request: Request,
    classifier: ImageClassifier = Depends(get_classifier),
    store: PredictionStore = Depends(get_prediction_store),
):
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        raise HTTPException(status_code=415, detail="Unsupported Media Type")

    # Form is parsed by hand so a missing field maps to 400 instead of 422
    async with request.form() as form:
        image = form.get("image")
        if not isinstance(image, UploadFile):
            logger.info("Image not found")
            raise ValidationError("Image not found")
        image_bytes = await image.read()

    try:
        score = await asyncio.to_thread(classifier.predict, image_bytes)
        result, suggestion = classify(score)
        record = PredictionRecord(result=result, suggestion=suggestion)
        await asyncio.to_thread(store.save, record)
    except Exception:
        logger.exception("Prediction failed")
        raise HTTPException(status_code=500, detail="An error occurred during prediction")

    logger.info(f"Prediction {record.id}: score={score:.4f} result={result}")
    return PredictResponse(data=record)


@router.get("/histories", response_model=HistoriesResponse)
async def get_prediction_histories(store: PredictionStore = Depends(get_prediction_store)):
    try:
        histories = await asyncio.to_thread(store.list_all)
    except Exception:
        logger.exception("Failed to fetch prediction histories")
        raise HTTPException(status_code=500, detail="Failed to fetch prediction histories")

    return HistoriesResponse(data=histories)
