import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from policy_drafter.app_config import load_json_config, parse_app_config, resolve_runtime_env
from policy_drafter.bootstrap import bootstrap_runtime


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    env = resolve_runtime_env(app.transport_name)
    if app.transport_name == "anthropic" and not env.agent_api_key:
        print(f"{env.agent_env_var} environment variable is required.", file=sys.stderr)
        sys.exit(1)

    runtime = await bootstrap_runtime(app, env)
    console = runtime.console
    session = runtime.controller.current_session()

    print("policy-drafter (type 'exit' to quit, '/help' for commands)")
    print(f"Agent: {app.transport_name} ({app.agent_id})")
    print(f"Session: {session.title} [{session.id}], {len(runtime.store.sessions)} stored")
    docs = runtime.knowledge.documents
    print(f"Knowledge base: {len(docs)} document(s)")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()

    try:
        while True:
            try:
                user_input = input(console.prompt)
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            try:
                await console.handle(trimmed)
                print()
            except Exception as ex:
                logger.error(f"Unhandled error: {ex}")
    finally:
        await runtime.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
