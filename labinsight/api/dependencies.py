from fastapi import Request

from labinsight.documents.file_store import FileStore
from labinsight.documents.validation import UploadValidator
from labinsight.jobs.controller import AnalysisJobController


def get_controller(request: Request) -> AnalysisJobController:
    return request.app.state.controller


def get_file_store(request: Request) -> FileStore:
    return request.app.state.file_store


def get_upload_validator(request: Request) -> UploadValidator:
    return request.app.state.upload_validator
