"""Ask the hosted assistant to explain a problem node or suggest solutions."""

from typing import Any

import requests
from loguru import logger

from diagnosis_map.api import ApiError
from diagnosis_map.config import ASSIST_ENDPOINT
from diagnosis_map.core.tree.markdown import render_node_context
from diagnosis_map.core.tree.store import TreeStore
from diagnosis_map.models.search import AssistMode, AssistReply
from diagnosis_map.protocols import ApiProtocol

_TITLES: dict[AssistMode, str] = {
    "explain": "Explaining: {label}",
    "solve": "Solutions for: {label}",
}
_EMPTY: dict[AssistMode, str] = {
    "explain": "Unable to generate explanation.",
    "solve": "Unable to generate solutions.",
}
_FAILED: dict[AssistMode, str] = {
    "explain": "Failed to generate explanation. Please try again.",
    "solve": "Failed to generate solutions. Please try again.",
}


class AssistClient:
    """Explain/solve requests for nodes of one tree."""

    def __init__(self, api: ApiProtocol, store: TreeStore) -> None:
        self.api = api
        self.store = store

    def explain(self, node_id: str) -> AssistReply | None:
        return self.ask(node_id, "explain")

    def solve(self, node_id: str) -> AssistReply | None:
        return self.ask(node_id, "solve")

    def ask(self, node_id: str, mode: AssistMode) -> AssistReply | None:
        """Send a node and its sub-issue breakdown to the assistant.

        Args:
            node_id: ID of the node to ask about.
            mode: "explain" or "solve".

        Returns:
            The reply, or None if the node does not exist.
        """
        node = self.store.find_by_id(node_id)
        if node is None:
            return None

        title = _TITLES[mode].format(label=node.label)
        args: dict[str, Any] = {
            "nodeId": node.id,
            "nodeLabel": node.label,
            "mode": mode,
            "nodeContext": render_node_context(self.store, node.id),
        }

        try:
            result = self.api.call(ASSIST_ENDPOINT, args)
        except (requests.RequestException, ApiError) as e:
            logger.warning("Assist {} failed for {}: {}", mode, node_id, e)
            return AssistReply(
                node_id=node.id, mode=mode, title=title, content=_FAILED[mode], ok=False
            )

        content = result.get("content")
        if not isinstance(content, str) or not content.strip():
            content = _EMPTY[mode]
        return AssistReply(node_id=node.id, mode=mode, title=title, content=content)
