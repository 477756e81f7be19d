import logging
from datetime import datetime
from pathlib import Path

from jinja2 import Template

from toolrelay.config.schema import AgentConfig
from toolrelay.core.resource_cache import Resource, ResourceType
from toolrelay.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """\
You are a helpful assistant. Today is {{ date }}.
{% if tools %}
You can call these tools when they help answer the user: {{ tools | join(", ") }}.
Use a tool instead of guessing facts such as the weather or the news.
If a tool returns an error, explain the problem to the user.
{% endif %}
{%- for resource in knowledge %}

## {{ resource.name }}
{{ resource.content }}
{%- endfor %}
{%- for resource in templates %}

Use this template for analysis:
{{ resource.content }}
{%- endfor %}
"""


class PromptLoader:
    @staticmethod
    def load_system_prompt(
        config: AgentConfig,
        tool_registry: ToolRegistry,
        resources: list[Resource] | None = None,
    ) -> str:
        if config.system_prompt:
            return config.system_prompt

        path = Path(config.prompt_path)
        if path.exists():
            source = path.read_text()
        else:
            logger.debug(f"Prompt template not found at {path}, using built-in default")
            source = DEFAULT_TEMPLATE

        resources = resources or []
        tool_names = [tool.name for tool in tool_registry.list_tools()]
        return Template(source).render(
            date=datetime.now().strftime("%B %d, %Y"),
            tools=tool_names,
            knowledge=[r for r in resources if r.type is ResourceType.KNOWLEDGE_BASE],
            templates=[r for r in resources if r.type is ResourceType.PROMPT_TEMPLATE],
        ).strip()
