"""
Execution context passed as the first argument to every generation operation.

Mirrors the ctx object the operations are written against:
- get_secret / get_config for configuration lookup
- report_input / report_output for an advisory per-call trace
"""
import os
from typing import Any, Dict, List, Optional

import httpx
import structlog

logger = structlog.get_logger()


class RunContext:
    """
    In-process execution context.

    Secrets are looked up in the explicit mapping first and then in the
    process environment. Reports are kept in memory for inspection by the
    caller; they are never sent anywhere.
    """

    def __init__(
        self,
        secrets: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, Any]] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        use_environment: bool = True,
    ):
        self._secrets = dict(secrets or {})
        self._config = dict(config or {})
        self._use_environment = use_environment
        self.http_transport = http_transport
        self.inputs: List[dict] = []
        self.outputs: List[dict] = []

    def get_secret(self, name: str) -> Optional[str]:
        value = self._secrets.get(name)
        if value is None and self._use_environment:
            value = os.environ.get(name)
        return value or None

    def get_config(self, name: str, default: Any = None) -> Any:
        return self._config.get(name, default)

    def report_input(self, data: dict) -> None:
        self.inputs.append(data)
        logger.debug("operation_input", keys=sorted(data.keys()))

    def report_output(self, data: dict) -> None:
        self.outputs.append(data)
        logger.debug("operation_output", status=data.get("status"))

    @property
    def last_output(self) -> Optional[dict]:
        return self.outputs[-1] if self.outputs else None
