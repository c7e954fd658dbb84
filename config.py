import os
import logging

from dotenv import load_dotenv

load_dotenv()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# === Model ===
MODEL_URI = os.getenv("MODEL_URI", "gs://asclepius-ml-models/model")
MODEL_CACHE = os.getenv("MODEL_CACHE", "true").lower() in ("1", "true", "yes")
IMAGE_SIZE = (224, 224)
CANCER_THRESHOLD = 0.5

# === Firestore ===
PREDICTIONS_COLLECTION = os.getenv("PREDICTIONS_COLLECTION", "predictions")
FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS")

# === HTTP ===
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", "1000000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
