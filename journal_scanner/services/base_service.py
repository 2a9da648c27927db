"""
Base service class providing common functionality for all services
"""
from journal_scanner.shared.logging_config import get_project_logger


class BaseService:
    """Base class for all services providing common functionality"""

    def __init__(self):
        self.logger = get_project_logger(self.__class__.__module__)

    def _json_object(self, response) -> dict:
        """Response body as a dict; empty when the body is not a JSON object"""
        try:
            data = response.json()
        except ValueError:
            self.logger.warning(f"Non-JSON response body (HTTP {response.status_code})")
            return {}
        return data if isinstance(data, dict) else {}
