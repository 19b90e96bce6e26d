from .dto import LicenseName, TrackUpdateDTO, UploadCompleteDTO, validation_details  # noqa: F401
