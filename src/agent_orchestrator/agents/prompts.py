"""Prompt templates used by agents and collaborations."""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def format_context(context: Mapping[str, Any]) -> str:
    return "\n".join(f"{key}: {value}" for key, value in context.items())


def format_capabilities(capabilities: Iterable[str]) -> str:
    return ", ".join(capabilities)


AGENT_PROMPT = """\
You are {name}, a {role} AI agent with the following capabilities: {capabilities}.

Current context:
{context}

Your task: {prompt}

Respond as this agent would, considering your role and capabilities.
"""

DECISION_PROMPT = """\
As {name}, analyze the current situation and decide what to do next.

Current context:
{context}

Available actions:
- wait (no immediate action needed)
- think (more information is needed)
- act (ready to take action)
- collaborate (help from other agents is needed)
- delegate (another agent should handle the task)

Respond with a JSON object: {{"action": "action_name", "reason": "explanation", "details": {{}}}}
"""

COLLABORATION_PROMPT = """\
You are {name} collaborating with {other_name} ({other_role}).

Task: {task}
Other agent's capabilities: {other_capabilities}

Context:
{context}

Provide your contribution to this collaboration.
"""

TEAM_MEETING_PROMPT = """\
Team meeting for {team}.

Agenda: {agenda}

Share your perspective as {role} on each agenda item.
"""

SYNTHESIS_PROMPT = """\
Synthesize the contributions of a multi-agent collaboration into one result.

Task: {task}

Contributions by phase:
{contributions}

Produce a single, coherent final result that integrates these contributions.
"""

# Specialized agents

RESEARCH_PROMPT = """\
As a research specialist, {depth} on the topic: {topic}

Include:
- Key facts and data points
- Multiple perspectives and viewpoints
- Recent developments and trends
- Potential implications
- Sources and references where applicable

Stay accurate and objective.
"""

FACT_CHECK_PROMPT = """\
As a fact-checking specialist, verify the following claim: "{claim}"

Provide:
- Verification status (true, false, partially true, unverifiable)
- Evidence supporting or refuting the claim
- Context and nuances
- Confidence level in the assessment
- Sources used for verification
"""

BRAINSTORM_PROMPT = """\
As a creative specialist, brainstorm {quantity} innovative ideas related to: {topic}

Requirements:
- Ideas should be practical and implementable
- Mix conventional and unconventional approaches
- Make each idea unique and distinct

Format your response as a numbered list of ideas.
"""

STORY_PROMPT = """\
As a creative writer, {length} based on: {prompt}

Genre: {genre}
Requirements:
- Engaging plot and characters
- Clear narrative structure
- Tone and style appropriate for the genre
- Well-developed dialogue and descriptions
"""

DESIGN_CONCEPT_PROMPT = """\
As a design specialist, create a design concept for: {description}

Style: {style}
Requirements:
- Clear visual description
- Functional considerations
- User experience focus
- Innovative elements

Provide the concept with visual descriptions and rationale.
"""

PROBLEM_PROMPT = """\
As a technical specialist, solve this problem: {problem}

Approach: {approach}

Provide:
- Problem analysis and root cause identification
- Solution options with pros and cons
- Recommended solution with implementation steps
- Risk assessment and mitigation
- Testing and validation approach
"""

CODE_REVIEW_PROMPT = """\
As a technical specialist, review this {language} code:

```{language}
{code}
```

Provide:
- Code quality assessment
- Potential bugs or issues
- Performance considerations
- Security considerations
- Suggestions for improvement
"""

SYSTEM_DESIGN_PROMPT = """\
As a technical specialist, design a system based on these requirements: {requirements}

Provide:
- High-level architecture overview
- Component breakdown and responsibilities
- Data flow and interactions
- Scalability, security and reliability measures
- Implementation phases
"""

COORDINATION_PROMPT = """\
As a coordination specialist, create a coordination plan for this task: {task}

Available agents:
{agents}

The plan should:
- Assign roles to each agent
- Define responsibilities and deliverables
- Set timelines and milestones
- Identify dependencies and coordination points
"""

CONFLICT_PROMPT = """\
As a coordination specialist, resolve this conflict: {conflict}

Involved agents: {agents}

Provide:
- Conflict analysis and root causes
- Mediation strategy and resolution approach
- Prevention measures
- Follow-up procedures
"""

WORKFLOW_PROMPT = """\
As a coordination specialist, optimize this workflow: {workflow}

Constraints: {constraints}

Provide:
- Current workflow analysis
- Bottleneck identification
- Improved workflow design
- Implementation strategy
- Performance metrics
"""
