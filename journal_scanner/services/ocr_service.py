"""
OCR providers transcribing handwritten page images
"""
from abc import ABC, abstractmethod

import requests

from journal_scanner.services.base_service import BaseService
from journal_scanner.services.exceptions import EmptyResultError, UpstreamError, handle_service_exceptions
from journal_scanner.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

VISION_ANNOTATE_URL = 'https://vision.googleapis.com/v1/images:annotate'


def strip_data_uri(image: str) -> str:
    """Return the base64 payload of a data URI, or the input unchanged"""
    if image.startswith('data:') and ',' in image:
        return image.split(',', 1)[1]
    return image


class TextRecognizer(ABC):
    """Capability: transcribe the text of an image"""

    @abstractmethod
    def transcribe(self, image_base64: str, api_key: str) -> str:
        """Return the full text found in the image"""


class GoogleVisionRecognizer(BaseService, TextRecognizer):
    """Google Cloud Vision document text detection"""

    def __init__(self, timeout: float | None = 30, language_hints: tuple[str, ...] = ('en',)):
        super().__init__()
        self.timeout = timeout
        self.language_hints = language_hints

    def build_request(self, image_base64: str) -> dict:
        return {
            'requests': [{
                'image': {'content': strip_data_uri(image_base64)},
                'features': [{'type': 'DOCUMENT_TEXT_DETECTION'}],
                'imageContext': {'languageHints': list(self.language_hints)},
            }]
        }

    @handle_service_exceptions(logger)
    def transcribe(self, image_base64: str, api_key: str) -> str:
        response = requests.post(
            VISION_ANNOTATE_URL,
            params={'key': api_key},
            json=self.build_request(image_base64),
            timeout=self.timeout,
        )
        if not response.ok:
            error = self._json_object(response).get('error')
            error = error if isinstance(error, dict) else {}
            message = error.get('message') or f"Vision API returned HTTP {response.status_code}"
            self.logger.error(f"Vision API error {response.status_code}: {message}")
            raise UpstreamError(message, status=response.status_code, code=error.get('status'))

        data = response.json()
        if not isinstance(data, dict):
            raise UpstreamError("Unexpected response from Vision API", status=response.status_code)

        first = (data.get('responses') or [{}])[0]
        if first.get('error'):
            message = first['error'].get('message', 'Vision API error')
            self.logger.error(f"Vision API reported an error: {message}")
            raise UpstreamError(message, status=response.status_code, code=first['error'].get('code'))

        text = first.get('fullTextAnnotation', {}).get('text')
        if not text:
            raise EmptyResultError("No text found in image. Try a clearer photo.")

        self.logger.info(f"Vision API extracted {len(text)} characters")
        return text
