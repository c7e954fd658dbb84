class PredictionServiceError(Exception):
    """Base class for failures raised inside the prediction service."""

    status_code = 500

    def to_dict(self):
        status = "fail" if self.status_code < 500 else "error"
        return {"status": status, "message": str(self)}


class ValidationError(PredictionServiceError):
    status_code = 400


class PayloadTooLarge(PredictionServiceError):
    status_code = 413


class ModelLoadError(PredictionServiceError):
    """The model artifact could not be fetched or materialized."""


class DecodeError(PredictionServiceError):
    """The uploaded bytes are not a decodable raster image."""


class InferenceError(PredictionServiceError):
    pass


class PersistenceError(PredictionServiceError):
    pass
