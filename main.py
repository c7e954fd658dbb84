# ✅ main.py for the cancer prediction API
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import HOST, PORT, MAX_UPLOAD_BYTES
from middleware import PayloadLimitMiddleware
from models.errors import PredictionServiceError

# === Routers ===
from routers import predict

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Prediction API starting up")
    yield
    predict.model_loader.release()
    logger.info("Prediction API shutting down")


app = FastAPI(title="Asclepius Prediction API", version="1.0", lifespan=lifespan)

# === Middleware ===
app.add_middleware(PayloadLimitMiddleware, max_bytes=MAX_UPLOAD_BYTES, paths=["/predict"])
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Error responses ===
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    status = "fail" if exc.status_code < 500 else "error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": status, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(PredictionServiceError)
async def prediction_error_handler(request: Request, exc: PredictionServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# === Register Routers ===
app.include_router(predict.router)


@app.get("/")
def root():
    return {"message": "Welcome to the Asclepius Prediction API"}


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
