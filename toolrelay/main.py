import argparse
import asyncio
import json
import logging
import sys

from toolrelay.config.loader import load_config
from toolrelay.config.secrets import MissingCredentialError, load_secrets
from toolrelay.core.resource_cache import Resource, ResourceCache, ResourceCacheSweeper
from toolrelay.core.session import Session
from toolrelay.services.agent import AgentService, ToolCallRecord
from toolrelay.services.http_client import HttpClientService
from toolrelay.tools.catalog import build_registry
from toolrelay.tools.errors import ToolError
from toolrelay.tools.registry import ToolRegistry
from toolrelay.util.logging import setup_logging
from toolrelay.util.prompt_loader import PromptLoader

logger = logging.getLogger(__name__)


def print_tools(registry: ToolRegistry) -> None:
    for defn in registry.list_tools():
        print(f"{defn.name}: {defn.description}")
        for param in defn.parameters:
            flag = "required" if param.required else "optional"
            print(f"  - {param.name} ({param.type.value}, {flag}): {param.description}")


async def main(args: argparse.Namespace) -> int:
    config = load_config()
    setup_logging(config.logging)
    secrets = load_secrets()

    async with HttpClientService(config.http) as http:
        try:
            registry = build_registry(config, secrets, http, include_upstream=not args.local_only)
        except MissingCredentialError as e:
            logger.error(str(e))
            return 1

        if args.list_tools:
            print_tools(registry)
            return 0

        if args.invoke:
            try:
                tool_args = json.loads(args.args)
            except json.JSONDecodeError as e:
                logger.error(f"--args is not valid JSON: {e}")
                return 2
            if not isinstance(tool_args, dict):
                logger.error("--args must be a JSON object")
                return 2
            try:
                result = await registry.invoke(args.invoke, tool_args)
            except ToolError as e:
                print(f"{e.kind}: {e.message}", file=sys.stderr)
                return 1
            print(result.display)
            return 0

        if args.print:
            cache = ResourceCache.from_config(config.cache)
            for entry in config.resources:
                cache.put(Resource.from_config(entry))
            sweeper = ResourceCacheSweeper(cache, config.cache.sweep_interval_seconds)
            await sweeper.start()

            session = Session(config.session)
            session.start(PromptLoader.load_system_prompt(config.agent, registry, cache.resources()))
            agent = AgentService(config.agent, registry)
            try:
                await agent.start()
                records: list[ToolCallRecord] = []
                async for chunk in agent.run(args.print, session, records):
                    print(chunk, end="", flush=True)
                print()
                for record in records:
                    logger.info(f"Tool call {record.name}({record.arguments}) -> {len(record.observation)} chars")
            finally:
                await agent.stop()
                await sweeper.stop()
            return 0

    logger.error("Nothing to do. Use --list-tools, --invoke or --print.")
    return 2


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="LLM tool registry runner")
    parser.add_argument("--list-tools", action="store_true", help="List the registered tools")
    parser.add_argument("--invoke", action="store", help="Invoke one tool by name")
    parser.add_argument("--args", action="store", default="{}", help="JSON arguments for --invoke")
    parser.add_argument("--print", action="store", help="Get a single headless response from the agent")
    parser.add_argument("--local-only", action="store_true", help="Skip the weather and news tools")
    sys.exit(asyncio.run(main(parser.parse_args())))
