"""Specialized agents.

Each specialized agent is a base ``Agent`` with a default role and
capability set, plus convenience operations that fill a prompt template,
run it through ``think`` and remember the result.
"""

from __future__ import annotations

import re
import time
import zlib
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar, Union

from agent_orchestrator.agents import prompts
from agent_orchestrator.agents.base import Agent, AgentConfig
from agent_orchestrator.llm.base import ReasoningCapability
from agent_orchestrator.memory import MemoryImportance
from agent_orchestrator.tasks.models import TaskLike, ensure_task

E = TypeVar("E", bound="_LenientEnum")

_NUMBERED_LINE = re.compile(r"^\s*\d+[.)]\s*(.+?)\s*$", re.MULTILINE)


class _LenientEnum(str, Enum):
    @classmethod
    def parse(cls: Type[E], value: Union[E, str, None]) -> E:
        """Parse a label leniently; unknown labels become the first member."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return next(iter(cls))

    @property
    def instruction(self) -> str:
        return _INSTRUCTIONS[self]


class ResearchDepth(_LenientEnum):
    STANDARD = "standard"
    SHALLOW = "shallow"
    DEEP = "deep"


class StoryLength(_LenientEnum):
    MEDIUM = "medium"
    SHORT = "short"
    LONG = "long"


class ProblemApproach(_LenientEnum):
    SYSTEMATIC = "systematic"
    CREATIVE = "creative"
    ANALYTICAL = "analytical"


_INSTRUCTIONS: Dict[Enum, str] = {
    ResearchDepth.SHALLOW: "provide a brief overview",
    ResearchDepth.STANDARD: "provide a comprehensive analysis",
    ResearchDepth.DEEP: "provide an in-depth analysis with multiple perspectives",
    StoryLength.SHORT: "write a short story (1-2 pages)",
    StoryLength.MEDIUM: "write a medium-length story (3-5 pages)",
    StoryLength.LONG: "write a longer story (6+ pages)",
    ProblemApproach.SYSTEMATIC: "Use a systematic, step-by-step approach",
    ProblemApproach.CREATIVE: "Think creatively and consider unconventional solutions",
    ProblemApproach.ANALYTICAL: "Focus on data analysis and logical reasoning",
}


def _digest(text: str) -> str:
    return format(zlib.crc32(text.encode("utf-8")), "08x")


def _timestamp() -> int:
    return int(time.time())


class SpecializedAgent(Agent):
    """Base for agents with a default role and capability set."""

    default_name = "Agent"
    default_role = ""
    default_capabilities: Sequence[str] = ()

    def __init__(
        self,
        name: Optional[str] = None,
        reasoner: Optional[ReasoningCapability] = None,
        config: Optional[AgentConfig] = None,
        capabilities: Optional[Iterable[str]] = None,
    ):
        super().__init__(
            name=name or self.default_name,
            role=self.default_role,
            capabilities=(
                self.default_capabilities if capabilities is None else capabilities
            ),
            reasoner=reasoner,
            config=config,
        )

    async def _run_template(
        self,
        label: str,
        template: str,
        context: Dict[str, Any],
        memory_key: str,
        importance: MemoryImportance = MemoryImportance.NORMAL,
    ) -> str:
        """Fill ``template`` from ``context``, think, and remember the result.

        In stub mode returns ``"[stubbed] <label>"`` without reasoning.
        """
        if self.config.stub_responses:
            return f"[stubbed] {label}"

        prompt = template.format(**context)
        result = await self.think(prompt, context)
        self.remember(memory_key, result, importance)
        return result


class ResearchAgent(SpecializedAgent):
    """Gathers and checks information."""

    default_name = "ResearchAgent"
    default_role = "Research Specialist"
    default_capabilities = ("research", "analysis", "data_gathering", "fact_checking")

    async def research_topic(
        self, topic: str, depth: Union[ResearchDepth, str] = ResearchDepth.STANDARD
    ) -> str:
        level = ResearchDepth.parse(depth)
        return await self._run_template(
            f"Research on {topic}",
            prompts.RESEARCH_PROMPT,
            {"topic": topic, "depth": level.instruction},
            memory_key=f"research_{topic}_{_timestamp()}",
            importance=MemoryImportance.HIGH,
        )

    async def fact_check(self, claim: str) -> str:
        return await self._run_template(
            f"Fact check: {claim}",
            prompts.FACT_CHECK_PROMPT,
            {"claim": claim},
            memory_key=f"fact_check_{_digest(claim)}",
        )


class CreativeAgent(SpecializedAgent):
    """Ideation, writing and design."""

    default_name = "CreativeAgent"
    default_role = "Creative Specialist"
    default_capabilities = (
        "creative_writing",
        "ideation",
        "design_thinking",
        "storytelling",
    )

    async def brainstorm(self, topic: str, quantity: int = 10) -> List[str]:
        """Return a list of ideas parsed from a numbered response."""
        if self.config.stub_responses:
            return [f"[stubbed] Creative idea {i + 1}" for i in range(quantity)]

        context = {"topic": topic, "quantity": quantity}
        result = await self.think(prompts.BRAINSTORM_PROMPT.format(**context), context)
        ideas = parse_ideas(result)
        self.remember(
            f"brainstorm_{topic}_{_timestamp()}", ideas, MemoryImportance.HIGH
        )
        return ideas

    async def write_story(
        self,
        prompt: str,
        genre: str = "general",
        length: Union[StoryLength, str] = StoryLength.MEDIUM,
    ) -> str:
        size = StoryLength.parse(length)
        return await self._run_template(
            f"Story: {prompt}",
            prompts.STORY_PROMPT,
            {"prompt": prompt, "genre": genre, "length": size.instruction},
            memory_key=f"story_{_digest(prompt)}",
        )

    async def design_concept(self, description: str, style: str = "modern") -> str:
        return await self._run_template(
            f"Design concept: {description}",
            prompts.DESIGN_CONCEPT_PROMPT,
            {"description": description, "style": style},
            memory_key=f"design_{_digest(description)}",
        )


def parse_ideas(text: str) -> List[str]:
    """Extract the items of a numbered list."""
    return [match.group(1) for match in _NUMBERED_LINE.finditer(text)]


class TechnicalAgent(SpecializedAgent):
    """Programming, debugging and system design."""

    default_name = "TechnicalAgent"
    default_role = "Technical Specialist"
    default_capabilities = (
        "programming",
        "debugging",
        "system_design",
        "troubleshooting",
    )

    async def solve_problem(
        self,
        problem: str,
        approach: Union[ProblemApproach, str] = ProblemApproach.SYSTEMATIC,
    ) -> str:
        style = ProblemApproach.parse(approach)
        return await self._run_template(
            f"Solution for: {problem}",
            prompts.PROBLEM_PROMPT,
            {"problem": problem, "approach": style.instruction},
            memory_key=f"solution_{_digest(problem)}",
            importance=MemoryImportance.HIGH,
        )

    async def code_review(self, code: str, language: str = "python") -> str:
        return await self._run_template(
            f"Code review for {language} code",
            prompts.CODE_REVIEW_PROMPT,
            {"code": code, "language": language},
            memory_key=f"code_review_{_digest(code)}",
        )

    async def design_system(self, requirements: str) -> str:
        return await self._run_template(
            f"System design for: {requirements}",
            prompts.SYSTEM_DESIGN_PROMPT,
            {"requirements": requirements},
            memory_key=f"system_design_{_digest(requirements)}",
            importance=MemoryImportance.HIGH,
        )


class CoordinatorAgent(SpecializedAgent):
    """Plans and mediates work across other agents."""

    default_name = "CoordinatorAgent"
    default_role = "Coordination Specialist"
    default_capabilities = (
        "coordination",
        "project_management",
        "resource_allocation",
        "conflict_resolution",
    )

    async def coordinate_task(self, task: TaskLike, agents: Sequence[Agent]) -> str:
        task = ensure_task(task)
        roster = "\n".join(
            f"{a.name} ({a.role}): {prompts.format_capabilities(a.capabilities)}"
            for a in agents
        )
        return await self._run_template(
            f"Coordination plan for: {task.description}",
            prompts.COORDINATION_PROMPT,
            {"task": task.description, "agents": roster},
            memory_key=f"coordination_{task.id}",
            importance=MemoryImportance.HIGH,
        )

    async def resolve_conflict(self, conflict: str, agents: Sequence[Agent]) -> str:
        involved = ", ".join(f"{a.name} ({a.role})" for a in agents)
        return await self._run_template(
            f"Conflict resolution for: {conflict}",
            prompts.CONFLICT_PROMPT,
            {"conflict": conflict, "agents": involved},
            memory_key=f"conflict_resolution_{_timestamp()}",
            importance=MemoryImportance.HIGH,
        )

    async def optimize_workflow(self, workflow: str, constraints: Any = None) -> str:
        return await self._run_template(
            f"Workflow optimization for: {workflow}",
            prompts.WORKFLOW_PROMPT,
            {"workflow": workflow, "constraints": constraints or "none"},
            memory_key=f"workflow_optimization_{_timestamp()}",
        )
