"""대화 턴 라운드 그래프 노드 모음."""

from eurotrip.graph.chat.nodes.collect_tool_results import collect_tool_results
from eurotrip.graph.chat.nodes.prepare_round import prepare_round
from eurotrip.graph.chat.nodes.stream_round import stream_round

__all__ = ["prepare_round", "stream_round", "collect_tool_results"]
