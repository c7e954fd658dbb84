from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal
from datetime import datetime
import uuid
import pytz

# ----------------- Literal Types -----------------
PredictionLabel = Literal["Cancer", "Non-cancer"]
ResponseStatus = Literal["success", "fail", "error"]


# ----------------- Helper Functions -----------------
def generate_id() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """
    Current UTC time as ISO 8601 with milliseconds, e.g. 2024-05-01T09:30:00.123Z
    """
    return datetime.now(pytz.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ----------------- Predictions -----------------
class PredictionRecord(BaseModel):
    id: str = Field(default_factory=generate_id)
    result: PredictionLabel
    suggestion: str
    createdAt: str = Field(default_factory=utc_timestamp)

    model_config = {"frozen": True}


class PredictResponse(BaseModel):
    status: ResponseStatus = "success"
    message: str = "Model predicted successfully"
    data: PredictionRecord


class HistoryEntry(BaseModel):
    id: str
    history: Dict[str, Any]


class HistoriesResponse(BaseModel):
    status: ResponseStatus = "success"
    data: List[HistoryEntry]
