"""Agent Orchestrator.

The orchestrator coordinates all stages of the agent pipeline:
- Intent classification
- Target integration resolution
- Parameter matching and context composition
- Bounded tool-calling loop with summarization

Provides:
- Main orchestrator and configuration
- Each pipeline stage as an independently testable component
"""

from .agent import AgentConfig, AgentOrchestrator
from .context_composer import ContextComposer
from .intent_classifier import IntentClassification, IntentClassifier
from .parameter_matcher import ParameterMatcher, RelevantAliases
from .summarizer import ActionSummarizer
from .target_resolver import TargetApps, TargetResolver
from .tool_executor import ToolExecutor
from .tool_loop import ToolCallingLoop

__all__ = [
    # Main orchestrator
    "AgentOrchestrator",
    "AgentConfig",
    # Pipeline stages
    "IntentClassifier",
    "IntentClassification",
    "TargetResolver",
    "TargetApps",
    "ParameterMatcher",
    "RelevantAliases",
    "ContextComposer",
    "ToolCallingLoop",
    "ToolExecutor",
    "ActionSummarizer",
]
