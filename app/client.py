"""
HTTP client for the quiz API, as used by frontends and scripts
"""
import logging
from typing import Any, Dict, List, Optional
import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The server answered with an error status"""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendUnreachable(ApiError):
    """No answer from the server at all"""

    def __init__(self, base_url: str):
        super().__init__(
            "Could not connect to the server. Please ensure the backend server is "
            f"running and accessible at {base_url}",
            status_code=0,
        )


class QuizMakerClient:
    """
    Thin wrapper over the quiz REST API

    Server errors surface as ApiError carrying the server's message;
    connection problems surface as BackendUnreachable so callers can show a
    "is the backend running?" hint instead.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.Client] = None
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def get_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/categories", context="getCategories")

    def add_category(self, title: str) -> Dict[str, Any]:
        return self._request("POST", "/categories", json={"title": title}, context="addCategory")

    def get_published_content(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/published-content", context="getPublishedContent")

    def get_quiz_by_id(self, quiz_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/quizzes/{quiz_id}", context="getQuizById")

    def publish_quiz(self, quiz: Dict[str, Any], category_name: str) -> Dict[str, Any]:
        payload = {**quiz, "categoryName": category_name}
        return self._request("POST", "/quizzes", json=payload, context="publishQuiz")

    def generate_quiz(self, category: str, title: str) -> Dict[str, Any]:
        payload = {"category": category, "title": title}
        return self._request("POST", "/quizzes/generate", json=payload, context="generateQuiz")

    def _request(self, method: str, path: str, context: str, json: Any = None) -> Any:
        try:
            response = self._client.request(method, f"{self.base_url}{path}", json=json)
        except httpx.TransportError as e:
            logger.error(f"Network error during {context}: {str(e)}")
            raise BackendUnreachable(self.base_url) from e

        return self._handle_response(response)

    @staticmethod
    def _handle_response(response: httpx.Response) -> Any:
        """Decode a JSON body, turning error statuses into ApiError"""
        text = response.text
        try:
            data = response.json() if text else None
        except ValueError:
            if response.is_success:
                raise ApiError("Received a non-JSON response from the server.", response.status_code)
            raise ApiError(text or f"HTTP error! status: {response.status_code}", response.status_code)

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiError(
                message or f"An unknown API error occurred. Status: {response.status_code}",
                response.status_code,
            )

        return data
