"""Client for the external workflow automation API."""

import logging
from typing import Optional

import requests

from setbuilder.config import settings

logger = logging.getLogger(__name__)

RUN_STATUS_LABELS = {
    "SCHEDULED": "SCHEDULED - flow is scheduled",
    "QUEUED": "QUEUED - flow is queued",
    "NEW": "NEW - flow is running",
    "SKIPPED": "SKIPPED - flow skipped",
    "SUCCESS": "SUCCESS - flow succeeded",
    "ERROR": "ERROR - flow aborted with errors",
    "WARNING": "WARNING - flow finished with warnings",
    "ERROR_SKIP": "ERROR_SKIP - flow not run, limits exceeded",
}


class WorkflowError(Exception):
    """Workflow API request failed."""
    pass


class WorkflowClient:
    """Starts a flow and reads back its run status."""

    def __init__(self, base_url: str, token: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, params: dict) -> dict:
        try:
            response = self.session.get(
                self.base_url,
                params={**params, "t": self.token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise WorkflowError(f"Workflow request failed: {e}") from e

    def start_flow(self, flow_id: str) -> str:
        """Start a flow and return its run ID."""
        data = self._get({"id": flow_id})
        run_id = data.get("runId")
        if not run_id:
            raise WorkflowError(f"Flow {flow_id} returned no runId")
        logger.info(f"Started flow {flow_id} with run ID {run_id}")
        return str(run_id)

    def run_status(self, flow_id: str, run_id: str) -> str:
        """Readable status label of a flow run."""
        data = self._get({"id": flow_id, "action": "status", "runId": run_id})
        status = data.get("status", "")
        return RUN_STATUS_LABELS.get(status, status or "UNKNOWN")

    def trigger(self, flow_id: str) -> str:
        """Start a flow and return the status label of the new run."""
        run_id = self.start_flow(flow_id)
        label = self.run_status(flow_id, run_id)
        logger.info(f"Flow {flow_id} run {run_id}: {label}")
        return label


def get_workflow_client() -> Optional[WorkflowClient]:
    """Configured client, or None when no token is set."""
    if not settings.workflow_token:
        return None
    return WorkflowClient(
        base_url=settings.workflow_base_url,
        token=settings.workflow_token,
        timeout=settings.workflow_timeout_seconds,
    )
