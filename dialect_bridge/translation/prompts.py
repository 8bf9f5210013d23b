# dialect_bridge/translation/prompts.py
"""
System-prompt augmentation with dialect-specific tool-usage instructions.

Pure string composition over the templates in dialect_bridge/prompts/.
"""

from dialect_bridge.capabilities import ModelCapabilities, MultiTurnQuality, PromptStyle
from dialect_bridge.prompts import load_prompt
from dialect_bridge.types import CanonicalTool

from .dialects import sanitize_description
from .tools import has_callable_shape

_LIST_DESCRIPTION_LIMIT = 160


def _numbered(rules: list[str]) -> str:
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))


def _tool_list(tools: list[CanonicalTool]) -> str:
    lines = []
    for tool in tools:
        first_line = (tool.description or "").strip().splitlines()[:1]
        desc = sanitize_description(first_line[0] if first_line else "", _LIST_DESCRIPTION_LIMIT)
        lines.append(f"- **{tool.name}**: {desc}")
    return "\n".join(lines)


class PromptTemplate:
    """Instruction block for one prompt style."""

    template_name = "standard"

    def rules(
        self, capabilities: ModelCapabilities, offered: int, model_id: str
    ) -> list[str]:
        raise NotImplementedError

    def extra_sections(self, capabilities: ModelCapabilities, model_id: str) -> list[str]:
        return []

    def render(
        self,
        capabilities: ModelCapabilities,
        tools: list[CanonicalTool],
        offered: int,
        model_id: str,
    ) -> str:
        body = load_prompt(self.template_name).format(
            tool_list=_tool_list(tools),
            rules=_numbered(self.rules(capabilities, offered, model_id)),
        )
        return "\n\n".join([body, *self.extra_sections(capabilities, model_id)])


class StandardTemplate(PromptTemplate):
    template_name = "standard"

    def rules(self, capabilities, offered, model_id):
        rules = [
            "Only call functions that are listed above",
            "Use proper JSON formatting for function arguments",
            "Do not hallucinate or invent function names",
        ]
        if capabilities.supports_parallel_calls:
            rules.append("You can call multiple functions in parallel when appropriate")
        else:
            rules.append("Call functions one at a time (parallel calls not supported)")
        if capabilities.requires_explicit_tool_choice:
            rules.append("Be explicit about when you need to use tools vs. providing direct responses")
        return rules

    def extra_sections(self, capabilities, model_id):
        sections = []
        model_id = model_id.lower()
        if "deepseek" in model_id:
            sections.append(
                "## DeepSeek-Specific Notes:\n"
                "- Prefer making multiple function calls in a single turn rather than multiple turns\n"
                "- Focus on completing the task efficiently with minimal back-and-forth"
            )
        if "mistral" in model_id:
            sections.append(
                "## Mistral-Specific Notes:\n"
                "- Provide clear reasoning for why you're calling specific functions\n"
                "- Use detailed function descriptions to guide your decisions"
            )
        return sections


class HermesTemplate(PromptTemplate):
    template_name = "hermes"

    def rules(self, capabilities, offered, model_id):
        rules = [
            "**Think Step by Step**: Before calling any tool, think through what you need to accomplish",
            "**Use Tools Strategically**: Only call tools when they are necessary to complete the task",
            "**Validate Tool Existence**: Only call tools that are listed above - do not hallucinate tool names",
            "**Proper Format**: Use the exact tool names and follow the expected parameter format",
        ]
        if capabilities.custom_parser_id == "qwen3coder":
            rules.append("**Clear Reasoning**: Use clear, descriptive reasoning before tool calls")
            rules.append(
                "**Avoid ReAct Patterns**: Do not use action/observation loops that might trigger stop words"
            )
        if not capabilities.supports_parallel_calls:
            rules.append("**Sequential Execution**: Call tools one at a time, not in parallel")
        if offered > capabilities.max_tools:
            rules.append(
                f"**Tool Limit**: You can use up to {capabilities.max_tools} tools per request"
            )
        return rules


class AgenticTemplate(PromptTemplate):
    template_name = "agentic"

    def rules(self, capabilities, offered, model_id):
        rules = [
            "**High-Level Planning**: Break complex tasks into manageable sub-tasks",
            "**Tool Orchestration**: Use multiple tools in sequence to achieve objectives",
            "**Autonomous Decision Making**: Decide which tools to use and when",
            "**Error Recovery**: If a tool call fails, adapt your approach",
            "**Goal-Oriented**: Keep the end objective in mind throughout execution",
        ]
        if capabilities.context_size_hint:
            rules.append(
                f"**Context Awareness**: Leverage the {capabilities.context_size_hint} "
                f"token context window for complex reasoning"
            )
        return rules


TEMPLATES: dict[PromptStyle, PromptTemplate] = {
    PromptStyle.STANDARD: StandardTemplate(),
    PromptStyle.HERMES: HermesTemplate(),
    PromptStyle.AGENTIC: AgenticTemplate(),
}


class PromptAugmenter:
    """Appends tool-usage instructions matched to a model's prompt style."""

    def augment(
        self,
        base_prompt: str,
        capabilities: ModelCapabilities,
        tools: list[CanonicalTool],
        model_id: str = "",
    ) -> str:
        """
        Return `base_prompt` with an instruction block appended.

        No-op (returns `base_prompt` unchanged) when the model cannot call
        tools or no callable tools are offered. Only the tools that fit within
        `max_tools` are listed.
        """
        callable_tools = [t for t in tools if has_callable_shape(t)]
        if not capabilities.supports_tools or not callable_tools or capabilities.max_tools == 0:
            return base_prompt

        listed = callable_tools[: capabilities.max_tools]
        template = TEMPLATES[capabilities.prompt_style]
        instructions = template.render(capabilities, listed, len(callable_tools), model_id)
        if not base_prompt:
            return instructions
        return f"{base_prompt}\n\n{instructions}"

    def augment_user_message(
        self, message: str, capabilities: ModelCapabilities, tools: list[CanonicalTool]
    ) -> str:
        """Reframe the user turn for agentic or poor multi-turn models."""
        if not capabilities.supports_tools or not tools:
            return message
        if capabilities.prompt_style is PromptStyle.AGENTIC:
            return f"Please approach this task autonomously using available tools as needed: {message}"
        if capabilities.multi_turn_quality is MultiTurnQuality.POOR:
            return (
                f"{message}\n\n"
                f"Please complete this task as thoroughly as possible in your response, "
                f"using any necessary tools."
            )
        return message
