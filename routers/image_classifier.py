import os
import logging
import tempfile
import threading
from typing import Tuple

import tensorflow as tf

from config import MODEL_URI, MODEL_CACHE, IMAGE_SIZE, CANCER_THRESHOLD
from firebase_config import get_storage_client
from models.errors import ModelLoadError, DecodeError, InferenceError
from models.schema import PredictionLabel

logger = logging.getLogger(__name__)

CANCER = "Cancer"
NON_CANCER = "Non-cancer"
SUGGESTIONS = {
    CANCER: "Please consult a doctor immediately!",
    NON_CANCER: "No signs of cancer detected.",
}


# -------------------- Model Loading --------------------

def _split_gcs_uri(uri: str) -> Tuple[str, str]:
    bucket_name, _, prefix = uri[len("gs://"):].partition("/")
    if not bucket_name:
        raise ModelLoadError(f"Invalid model URI: {uri}")
    return bucket_name, prefix.strip("/")


def download_model_dir(uri: str, target_dir: str) -> int:
    """
    Download every blob under a gs://bucket/prefix into target_dir,
    keeping the paths relative to the prefix. Returns the file count.
    """
    bucket_name, prefix = _split_gcs_uri(uri)
    client = get_storage_client()
    count = 0
    for blob in client.list_blobs(bucket_name, prefix=f"{prefix}/" if prefix else None):
        if blob.name.endswith("/"):
            continue
        relative = blob.name[len(prefix):].lstrip("/") if prefix else blob.name
        local_path = os.path.join(target_dir, relative)
        os.makedirs(os.path.dirname(local_path), exist_ok=True)
        blob.download_to_filename(local_path)
        count += 1
    return count


class ModelLoader:
    def __init__(self, uri: str = MODEL_URI, cache: bool = MODEL_CACHE):
        self.uri = uri
        self.cache = cache
        self._model = None
        self._lock = threading.Lock()

    def _materialize(self):
        logger.info(f"Loading model from {self.uri}")
        try:
            if not self.uri.startswith("gs://"):
                return tf.saved_model.load(self.uri)

            with tempfile.TemporaryDirectory(prefix="model-") as tmp_dir:
                if download_model_dir(self.uri, tmp_dir) == 0:
                    raise ModelLoadError(f"No model files found at {self.uri}")
                return tf.saved_model.load(tmp_dir)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(f"Failed to load model from {self.uri}: {e}") from e

    def load(self):
        if not self.cache:
            return self._materialize()

        # Single-flight: concurrent first callers wait for one load
        if self._model is None:
            with self._lock:
                if self._model is None:
                    self._model = self._materialize()
                    logger.info("Model loaded and cached")
        return self._model

    def release(self):
        with self._lock:
            self._model = None


# -------------------- Prediction --------------------

def preprocess_image(image_bytes: bytes, img_size=IMAGE_SIZE) -> tf.Tensor:
    """
    Decode -> bilinear resize -> scale to [0, 1] -> add batch dimension.
    Returns a float32 tensor of shape (1, height, width, 3).
    """
    try:
        image = tf.io.decode_image(image_bytes, channels=3, expand_animations=False)
    except (tf.errors.InvalidArgumentError, ValueError) as e:
        raise DecodeError(f"Unable to decode image: {e}") from e

    # Legacy sampling (no half-pixel centers) to match the tfjs resizeBilinear default
    resized = tf.compat.v1.image.resize(
        image, list(img_size), method=tf.compat.v1.image.ResizeMethod.BILINEAR, align_corners=False
    )
    normalized = tf.cast(resized, tf.float32) / 255.0
    return tf.expand_dims(normalized, axis=0)


def forward(model, batch: tf.Tensor) -> float:
    signature = model.signatures["serving_default"]
    input_name = next(iter(signature.structured_input_signature[1]))
    outputs = signature(**{input_name: batch})
    prediction = next(iter(outputs.values()))
    return float(tf.reshape(prediction, [-1])[0].numpy())


class ImageClassifier:
    def __init__(self, loader: ModelLoader):
        self.loader = loader

    def predict(self, image_bytes: bytes) -> float:
        model = self.loader.load()
        batch = None
        try:
            batch = preprocess_image(image_bytes)
            return forward(model, batch)
        except DecodeError:
            raise
        except Exception as e:
            raise InferenceError(f"Inference failed: {e}") from e
        finally:
            del batch
            del model


def classify(score: float) -> Tuple[PredictionLabel, str]:
    result = CANCER if score > CANCER_THRESHOLD else NON_CANCER
    return result, SUGGESTIONS[result]
