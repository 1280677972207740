from __future__ import annotations

from collections.abc import Awaitable, Callable


class CommandRouter:
    def __init__(
        self,
        *,
        on_help: Callable[[], Awaitable[None]],
        on_session: Callable[[str, str], Awaitable[None]],
        on_revise: Callable[[str], Awaitable[None]],
        on_setting: Callable[[str, str], Awaitable[None]],
        on_draft: Callable[[str, str], Awaitable[None]],
        on_knowledge: Callable[[str, str], Awaitable[None]],
        on_unknown: Callable[[str], None],
    ) -> None:
        self._on_help = on_help
        self._on_session = on_session
        self._on_revise = on_revise
        self._on_setting = on_setting
        self._on_draft = on_draft
        self._on_knowledge = on_knowledge
        self._on_unknown = on_unknown

    async def try_handle(self, user_message: str) -> bool:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return False

        command, _, argument = trimmed.partition(" ")
        argument = argument.strip()

        if command == "/help":
            await self._on_help()
            return True
        if command in ("/new", "/sessions", "/select"):
            await self._on_session(command[1:], argument)
            return True
        if command == "/revise":
            await self._on_revise(argument)
            return True
        if command in ("/regulation", "/scope"):
            await self._on_setting(command[1:], argument)
            return True
        if command in ("/show", "/history", "/export", "/activity", "/sample"):
            await self._on_draft(command[1:], argument)
            return True
        if command in ("/docs", "/upload", "/delete"):
            await self._on_knowledge(command[1:], argument)
            return True

        self._on_unknown(trimmed)
        return True
