# ordering_client/observability/logging_loki.py

import asyncio
import json
import os
import time
from typing import Any, Dict, Set

import requests


LABEL_FIELDS = {
    "service_type": "service",
    "service": "service",
    "flow": "flow",
    "outcome": "outcome",
    "sync_mode": "mode",
    "io": "io",
    "trace_id": "trace_id",
    "session_id": "session_id",
}


class LokiLogger:
    """
    Structured log push to Grafana Loki.

    Env vars:
      - GRAFANA_LOKI_URL       e.g. https://logs-prod-025.grafana.net/loki/api/v1/push
      - GRAFANA_LOKI_USERNAME  tenant / user ID
      - GRAFANA_LOKI_API_TOKEN token with logs:write
      - ORDERING_APP_LABEL     (optional) app label, default "ordering_client"

    Stream labels: app, level, event, service, flow, outcome, mode, io,
    trace_id, session_id. Everything else only goes into the JSON line.

    Called from inside a running event loop, the HTTP push is handed to the
    loop's default executor and `log` returns at once. Outside a loop (sync
    endpoints run in FastAPI's threadpool) the push happens inline.
    """

    def __init__(self) -> None:
        self.url = os.getenv("GRAFANA_LOKI_URL")
        self.username = os.getenv("GRAFANA_LOKI_USERNAME")
        self.token = os.getenv("GRAFANA_LOKI_API_TOKEN")
        self.app_label = os.getenv("ORDERING_APP_LABEL", "ordering_client")
        self.timeout = 4
        self._pending: Set[asyncio.Future] = set()

        self.enabled = all([self.url, self.username, self.token])
        if not self.enabled:
            print("[LokiLogger] Disabled: missing GRAFANA_LOKI_* env vars")
        else:
            print("[LokiLogger] Enabled, pushing to", self.url)

    def _labels(self, level: str, fields: Dict[str, Any]) -> Dict[str, str]:
        labels = {"app": self.app_label, "level": level}

        event = fields.get("event") or fields.get("event_type")
        if event:
            labels["event"] = str(event)

        for src, dst in LABEL_FIELDS.items():
            val = fields.get(src)
            if val not in (None, "", []):
                labels[dst] = str(val)
        return labels

    def build_body(self, level: str, message, **fields) -> Dict[str, Any]:
        if isinstance(message, dict):
            line = {**fields, **message}
        else:
            line = {**fields, "message": str(message)}

        ts_ns = time.time_ns()
        return {
            "streams": [
                {
                    "stream": self._labels(level, line),
                    "values": [[str(ts_ns), json.dumps(line, ensure_ascii=False, default=str)]],
                }
            ]
        }

    def _push(self, body: Dict[str, Any]) -> None:
        try:
            resp = requests.post(
                self.url,
                auth=(self.username, self.token),
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            print("[LokiLogger] Exception while pushing to Loki:", e)
            return
        if resp.status_code not in (200, 204):
            print("[LokiLogger] Push failed:", resp.status_code, resp.text[:200])

    def log(self, level: str, message, **fields) -> None:
        """
        level   : "info", "warning", "error"
        message : str OR dict
        fields  : extra context such as service_type, sync_mode, io, trace_id

            loki.log(
                "warning",
                {"event_type": "state_inconsistency", "detail": "restaurant_id missing"},
                service_type="cart_store",
                sync_mode="sync",
                io="none",
            )
        """
        if not self.enabled:
            return

        body = self.build_body(level, message, **fields)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._push(body)
            return

        future = loop.run_in_executor(None, self._push, body)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for pushes still running in the executor."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


# Global logger used by the services, the state holders and main.py.
loki = LokiLogger()
