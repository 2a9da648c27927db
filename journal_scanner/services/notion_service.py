"""
Document database providers publishing journal entries as pages
"""
from abc import ABC, abstractmethod

import requests

from journal_scanner.services.base_service import BaseService
from journal_scanner.services.exceptions import UpstreamError, handle_service_exceptions
from journal_scanner.shared.logging_config import get_project_logger
from journal_scanner.shared.models import CreatedPage, PageRequest
from journal_scanner.shared.text_utils import RICH_TEXT_LIMIT, chunk_text, fallback_title, split_paragraphs


logger = get_project_logger(__name__)

NOTION_API_URL = 'https://api.notion.com/v1'
NOTION_VERSION = '2022-06-28'

SOURCE_NAME = 'Journal Scanner'
TRANSCRIPTION_HEADING = 'Transcription'
IMAGE_HEADING = 'Original Image'
IMAGE_NOTICE = ('The photo of the handwritten page is attached to this entry in '
                'Journal Scanner and is not uploaded to Notion.')


def rich_text(content: str) -> list[dict]:
    return [{'type': 'text', 'text': {'content': piece}} for piece in chunk_text(content)]


def heading_block(content: str) -> dict:
    return {'object': 'block', 'type': 'heading_2', 'heading_2': {'rich_text': rich_text(content)}}


def paragraph_block(content: str) -> dict:
    return {'object': 'block', 'type': 'paragraph', 'paragraph': {'rich_text': rich_text(content)}}


def divider_block() -> dict:
    return {'object': 'block', 'type': 'divider', 'divider': {}}


def build_page_properties(page: PageRequest) -> dict:
    title = (page.title or '').strip() or fallback_title(page.date)
    properties = {
        'Page': {'title': [{'text': {'content': title[:RICH_TEXT_LIMIT]}}]},
        'Date': {'date': {'start': page.date.isoformat()}},
        'Source': {'select': {'name': SOURCE_NAME}},
    }
    if page.tags:
        properties['Tags'] = {'multi_select': [{'name': tag} for tag in page.tags]}
    return properties


def build_page_children(text: str) -> list[dict]:
    """Heading, one paragraph per blank-line separated segment, divider, image notice"""
    children = [heading_block(TRANSCRIPTION_HEADING)]
    children.extend(paragraph_block(paragraph) for paragraph in split_paragraphs(text))
    children.append(divider_block())
    children.append(heading_block(IMAGE_HEADING))
    children.append(paragraph_block(IMAGE_NOTICE))
    return children


def build_create_page_request(page: PageRequest, database_id: str) -> dict:
    return {
        'parent': {'database_id': database_id},
        'properties': build_page_properties(page),
        'children': build_page_children(page.text),
    }


class PagePublisher(ABC):
    """Capability: create pages in, and query, a hosted document database"""

    @abstractmethod
    def create_page(self, page: PageRequest, token: str, database_id: str) -> CreatedPage:
        """Create a page and return its identifier and url"""

    @abstractmethod
    def query_database(self, database_id: str, query: dict, token: str) -> dict:
        """Run a database query and return the raw result"""


class NotionPublisher(BaseService, PagePublisher):
    """Notion REST API client"""

    def __init__(self, timeout: float | None = 30):
        super().__init__()
        self.timeout = timeout

    def _headers(self, token: str) -> dict:
        return {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json',
            'Notion-Version': NOTION_VERSION,
        }

    def _post(self, path: str, token: str, body: dict) -> dict:
        response = requests.post(
            f"{NOTION_API_URL}{path}",
            headers=self._headers(token),
            json=body,
            timeout=self.timeout,
        )
        if not response.ok:
            error = self._json_object(response)
            code = error.get('code')
            message = error.get('message') or f"Notion API returned HTTP {response.status_code}"
            self.logger.error(f"Notion API error {response.status_code} ({code}): {message}")
            raise UpstreamError(message, status=response.status_code, code=code)

        data = response.json()
        if not isinstance(data, dict):
            raise UpstreamError("Unexpected response from Notion API", status=response.status_code)
        return data

    @handle_service_exceptions(logger)
    def create_page(self, page: PageRequest, token: str, database_id: str) -> CreatedPage:
        data = self._post('/pages', token, build_create_page_request(page, database_id))
        self.logger.info(f"Created Notion page {data['id']}")
        return CreatedPage(id=data['id'], url=data.get('url', ''))

    @handle_service_exceptions(logger)
    def query_database(self, database_id: str, query: dict, token: str) -> dict:
        return self._post(f'/databases/{database_id}/query', token, query or {})
