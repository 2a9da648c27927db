"""
API response formatting utilities for consistent API responses across blueprints
"""

from typing import Any

from flask import jsonify

from journal_scanner.services.exceptions import ServiceError, error_details


class APIResponseFormatter:
    """Utility class for formatting consistent API responses"""

    @staticmethod
    def success(data: Any = None, message: str = "", status_code: int = 200) -> tuple:
        """Format a successful API response"""
        response = {
            'success': True,
            'message': message
        }

        if data is not None:
            if isinstance(data, dict):
                response.update(data)
            else:
                response['data'] = data

        return jsonify(response), status_code

    @staticmethod
    def error(error_message: str, status_code: int = 400, details: dict | None = None) -> tuple:
        """Format an error API response"""
        response = {
            'success': False,
            'error': error_message
        }

        if details:
            response['details'] = details

        return jsonify(response), status_code

    @staticmethod
    def service_error(error: ServiceError) -> tuple:
        """Format a service layer exception using its kind and status code"""
        return APIResponseFormatter.error(
            str(error) or error.__class__.__name__,
            status_code=error.status_code,
            details=error_details(error)
        )

    @staticmethod
    def validate_json_request(request_data: dict, required_fields: list) -> tuple | None:
        """Validate JSON request data and return error response if invalid"""
        if not request_data:
            return APIResponseFormatter.error('No data provided')

        missing_fields = [field for field in required_fields if not request_data.get(field)]
        if missing_fields:
            return APIResponseFormatter.error(
                f"Missing required fields: {', '.join(missing_fields)}"
            )

        return None
