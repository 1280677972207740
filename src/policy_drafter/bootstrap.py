from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from policy_drafter.activity import ActivityMonitor
from policy_drafter.app_config import AppConfig, RuntimeEnv
from policy_drafter.console import DraftingConsole
from policy_drafter.drafting_controller import DraftingController, ViewState
from policy_drafter.knowledge.client import KnowledgeBaseClient
from policy_drafter.knowledge.service import KnowledgeBaseService
from policy_drafter.logging_config import setup_logging
from policy_drafter.sessions import SessionStore, SqliteKeyValueStore
from policy_drafter.transport import AgentTransport, create_transport


@dataclass
class AppRuntime:
    controller: DraftingController
    console: DraftingConsole
    store: SessionStore
    kv_store: SqliteKeyValueStore
    transport: AgentTransport
    knowledge_client: KnowledgeBaseClient
    knowledge: KnowledgeBaseService
    log_descriptions: list[str]

    async def close(self) -> None:
        aclose = getattr(self.transport, "aclose", None)
        if aclose is not None:
            await aclose()
        await self.knowledge_client.aclose()
        self.kv_store.close()


async def bootstrap_runtime(app: AppConfig, env: RuntimeEnv) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers)

    store_path = Path(app.store_path)
    if not store_path.is_absolute():
        store_path = Path.cwd() / store_path
    kv_store = SqliteKeyValueStore(str(store_path))
    store = SessionStore(kv_store)
    store.initialize()

    transport = create_transport(
        app.transport_name,
        base_url=app.agent_base_url,
        api_key=env.agent_api_key,
        model=app.model,
        max_tokens=app.max_tokens,
        timeout_seconds=app.request_timeout_seconds,
    )
    activity = ActivityMonitor()
    controller = DraftingController(
        store,
        transport,
        activity,
        agent_id=app.agent_id,
        view=ViewState(regulation=app.default_regulation, scope=app.default_scope),
    )

    knowledge_client = KnowledgeBaseClient(
        app.knowledge_base_url,
        api_key=env.knowledge_base_api_key,
        timeout_seconds=app.request_timeout_seconds,
    )
    knowledge = KnowledgeBaseService(
        knowledge_client,
        app.knowledge_base_id,
        status_clear_seconds=app.upload_status_clear_seconds,
    )
    if not await knowledge.refresh():
        logger.info("Knowledge base unavailable at startup; documents can be listed later with /docs")

    console = DraftingConsole(controller, activity=activity, knowledge=knowledge)
    return AppRuntime(
        controller=controller,
        console=console,
        store=store,
        kv_store=kv_store,
        transport=transport,
        knowledge_client=knowledge_client,
        knowledge=knowledge,
        log_descriptions=log_descriptions,
    )
