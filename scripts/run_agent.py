#!/usr/bin/env python3
"""Run an agent over a list of task descriptions."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from agentcore.agent.orchestrator import Agent, AgentConfig
from agentcore.tools.builtin import get_default_tools
from agentcore.utils.config import AppConfig, get_settings, load_config
from agentcore.utils.logging import configure_logging

logger = structlog.get_logger()


def build_agent(config: AppConfig, name: str, api_key: str, search_api_url: str | None) -> Agent:
    """Construct an agent with the default tools registered."""
    agent = Agent(
        name=name,
        description=config.agent.description,
        config=AgentConfig(
            result_separator=config.agent.result_separator,
            allow_tool_overwrite=config.agent.allow_tool_overwrite,
            record_results_in_memory=config.agent.record_results_in_memory,
            memory_max_entries=config.agent.memory_max_entries,
        ),
    )
    agent.tools.register_many(
        get_default_tools(
            corpus=config.tools.search_corpus,
            search_api_url=config.tools.search_api_url or search_api_url,
            api_key=api_key,
        )
    )
    return agent


async def run(config_path: str, inputs: list[str]) -> int:
    """Run each input as a task; returns the number of failed tasks."""
    settings = get_settings()
    config = load_config(config_path)

    level = settings.log_level if "log_level" in settings.model_fields_set else config.logging.level
    configure_logging(level, config.logging.format)

    # An explicit AGENT_NAME wins over the config file
    if "agent_name" in settings.model_fields_set:
        name = settings.agent_name
    else:
        name = config.agent.name

    try:
        agent = build_agent(config, name, settings.api_key, settings.search_api_url)
    except Exception as e:
        logger.error("Failed to initialize agent", error=str(e))
        return 1

    logger.info("Agent initialized", name=agent.name, tools=agent.tools.tool_names)

    descriptions = inputs or config.inputs
    failures = 0

    for i, description in enumerate(descriptions, start=1):
        task = await agent.process(description)
        if task is None:
            continue
        if task.error is not None:
            failures += 1
            print(f"[{i}] {task.id} failed: {task.error}")
        else:
            print(f"[{i}] {task.id}: {task.result}")

    logger.info("Run finished", **agent.stats["tasks"])
    return failures


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run task descriptions through an agent")
    parser.add_argument(
        "inputs",
        nargs="*",
        help="Task descriptions (defaults to the config file inputs)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/default.yaml",
        help="Path to configuration file",
    )
    args = parser.parse_args()

    if not Path(args.config).exists():
        parser.error(f"config file not found: {args.config}")

    try:
        failures = asyncio.run(run(args.config, args.inputs))
    except Exception as e:
        logger.critical("Unhandled error", error=str(e))
        sys.exit(1)

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
