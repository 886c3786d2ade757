"""Service dependencies resolved from application state."""

from fastapi import Request

from backend.app.docs.editor import DocumentEditor
from backend.app.docs.processor import DocumentProcessor
from backend.app.generation.service import QuestionGenerationService


def get_processor(request: Request) -> DocumentProcessor:
    return request.app.state.processor


def get_editor(request: Request) -> DocumentEditor:
    return request.app.state.editor


def get_generation_service(request: Request) -> QuestionGenerationService:
    return request.app.state.generation
