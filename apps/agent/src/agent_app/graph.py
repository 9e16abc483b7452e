from __future__ import annotations

from typing import Any, Callable, Dict

from langgraph.graph import END, START, StateGraph
from loguru import logger

from exit_planner.planner import ExitPlanner


class ExitAdvisorGraph:
    """LangGraph controller for the prompt, generate and synthesize steps."""

    def __init__(self, planner: ExitPlanner, generate: Callable[[str], str]) -> None:
        self.planner = planner
        self.generate = generate
        self.graph = self._build_graph()

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(dict)

        def load_hike(state: Dict[str, Any]) -> Dict[str, Any]:
            user_id = state["user_id"]
            hike = self.planner.get_active_hike(user_id)
            if hike is None:
                raise LookupError(f"No active hike for user: {user_id}")
            state["hike"] = hike
            logger.debug("Loaded active hike", user_id=user_id, hike_id=hike.id)
            return state

        def build_prompt(state: Dict[str, Any]) -> Dict[str, Any]:
            state["prompt"] = self.planner.build_exit_strategy_prompt(state["hike"])
            return state

        def generate(state: Dict[str, Any]) -> Dict[str, Any]:
            logger.info("🤖 Requesting exit strategies from the language model...")
            state["response_text"] = self.generate(state["prompt"])
            logger.info("✅ Received response from the language model")
            return state

        def synthesize(state: Dict[str, Any]) -> Dict[str, Any]:
            result = self.planner.assess_response(state["hike"], state["response_text"])
            state["synthesis"] = result
            logger.debug(
                "Synthesized exit strategies",
                accepted=len(result.strategies),
                issues=len(result.issues),
            )
            return state

        graph.add_node("load_hike", load_hike)
        graph.add_node("build_prompt", build_prompt)
        graph.add_node("generate", generate)
        graph.add_node("synthesize", synthesize)
        graph.add_edge(START, "load_hike")
        graph.add_edge("load_hike", "build_prompt")
        graph.add_edge("build_prompt", "generate")
        graph.add_edge("generate", "synthesize")
        graph.add_edge("synthesize", END)
        return graph.compile()

    def run(self, **kwargs: Any) -> Dict[str, Any]:
        state = dict(kwargs)
        return self.graph.invoke(state)
