"""
HTTP access to the Postboard API.
"""
from typing import Any, Dict, List, Optional

import httpx


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.status_code = response.status_code
        self.status_text = response.reason_phrase
        self.errors = self._parse_errors(response)
        super().__init__(f"{self.status_code} {self.status_text}")

    @staticmethod
    def _parse_errors(response: httpx.Response) -> List[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return []
        if isinstance(body, dict):
            if isinstance(body.get("errors"), list):
                return body["errors"]
            if "msg" in body:
                return [{"msg": body["msg"]}]
        return []


class ApiClient:
    """Thin wrapper over an httpx client that carries the bearer token."""

    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def set_auth_token(self, token: Optional[str]):
        if token:
            self.http.headers["Authorization"] = f"Bearer {token}"
        else:
            self.http.headers.pop("Authorization", None)

    def request(self, method: str, url: str, **kwargs) -> Any:
        response = self.http.request(method, url, **kwargs)
        if response.is_error:
            raise ApiError(response)
        return response.json()

    def get(self, url: str, **kwargs) -> Any:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> Any:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs) -> Any:
        return self.request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs) -> Any:
        return self.request("DELETE", url, **kwargs)

    def close(self):
        self.http.close()
