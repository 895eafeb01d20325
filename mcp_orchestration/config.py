import json
import os
from typing import Optional, Dict

class Settings:
    """Central configuration for environment variables."""

    @property
    def api_root_path(self) -> Optional[str]:
        return os.getenv("API_ROOT_PATH")

    @property
    def httpx_logging(self) -> bool:
        return os.getenv("HTTPX_LOGGING", "false").lower() == "true"

    @property
    def mcp_auth_headers(self) -> Dict[str, str]:
        return _json_headers(os.getenv("MCP_AUTH_HEADER"))

    @property
    def probe_timeout_sec(self) -> float:
        """Upper bound for a single reachability probe or tool listing."""
        return float(os.getenv("MCP_PROBE_TIMEOUT_SEC", "5"))

    @property
    def tool_call_timeout_sec(self) -> float:
        return float(os.getenv("MCP_TOOL_CALL_TIMEOUT_SEC", "60"))

    @property
    def mcp_transport(self) -> str:
        """``session`` for live MCP sessions, ``configured`` to derive tools from server settings."""
        return os.getenv("MCP_TRANSPORT", "session").lower()

    @property
    def storage_backend(self) -> str:
        return os.getenv("STORAGE_BACKEND", "memory").lower()

    @property
    def storage_prefix(self) -> str:
        return os.getenv("STORAGE_PREFIX", "model-card-app:")

    @property
    def dynamodb_table(self) -> str:
        return os.getenv("DYNAMODB_TABLE", "mcp-orchestration")

    @property
    def aws_region(self) -> str:
        return os.getenv("AWS_REGION", "eu-central-1")

    @property
    def host(self) -> str:
        return os.getenv("HOST", "127.0.0.1")

    @property
    def port(self) -> int:
        return int(os.getenv("PORT", "8080"))


def _json_headers(raw: Optional[str]) -> Dict[str, str]:
    headers = {}
    if raw:
        try:
            headers = json.loads(raw)
        except json.JSONDecodeError:
            headers = {}
    if not isinstance(headers, dict):
        return {}
    return headers

settings = Settings()
