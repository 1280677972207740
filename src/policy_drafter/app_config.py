from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from policy_drafter.prompts import DEFAULT_REGULATION, DEFAULT_SCOPE

DEFAULT_AGENT_ID = "699409dfcb4f20e1f49e194e"
DEFAULT_KNOWLEDGE_BASE_ID = "699409c3869797813b09f696"


@dataclass
class RuntimeEnv:
    agent_api_key: str
    agent_env_var: str
    knowledge_base_api_key: str


@dataclass
class AppConfig:
    transport_name: str
    agent_base_url: str
    knowledge_base_url: str
    agent_id: str
    knowledge_base_id: str
    model: str
    max_tokens: int
    request_timeout_seconds: float
    store_path: str
    default_regulation: str
    default_scope: str
    upload_status_clear_seconds: float
    log_level: str
    log_consumers: list | None


def load_json_config() -> dict:
    config_path = Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def parse_app_config(config: dict) -> AppConfig:
    agent_base_url = str(config.get("AgentBaseUrl", "http://localhost:3000")).strip()
    return AppConfig(
        transport_name=str(config.get("Transport", "http")).strip().lower(),
        agent_base_url=agent_base_url,
        knowledge_base_url=str(config.get("KnowledgeBaseUrl", agent_base_url)).strip(),
        agent_id=str(config.get("AgentId", DEFAULT_AGENT_ID)).strip() or DEFAULT_AGENT_ID,
        knowledge_base_id=str(config.get("KnowledgeBaseId", DEFAULT_KNOWLEDGE_BASE_ID)).strip()
        or DEFAULT_KNOWLEDGE_BASE_ID,
        model=config.get("Model", "claude-sonnet-4-5-20250929"),
        max_tokens=int(config.get("MaxTokens", 8192)),
        request_timeout_seconds=float(config.get("RequestTimeoutSeconds", 120)),
        store_path=str(config.get("StorePath", ".policy_drafter/sessions.db")),
        default_regulation=config.get("DefaultRegulation", DEFAULT_REGULATION),
        default_scope=config.get("DefaultScope", DEFAULT_SCOPE),
        upload_status_clear_seconds=float(config.get("UploadStatusClearSeconds", 4)),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env(transport_name: str) -> RuntimeEnv:
    if transport_name == "anthropic":
        agent_api_key = os.environ.get("ANTHROPIC_API_KEY", "")
        agent_env_var = "ANTHROPIC_API_KEY"
    else:
        agent_api_key = os.environ.get("AGENT_API_KEY", "")
        agent_env_var = "AGENT_API_KEY"

    return RuntimeEnv(
        agent_api_key=agent_api_key,
        agent_env_var=agent_env_var,
        knowledge_base_api_key=os.environ.get("KNOWLEDGE_BASE_API_KEY", os.environ.get("AGENT_API_KEY", "")),
    )
