"""
会话级工具状态存储：session_id → {tool_id → 任意状态值}

- 进程内共享，启动时创建一次，通过引用传给网关与路由
- 所有变更（写入 / 删除 / 重置）在同一把 asyncio.Lock 下执行，
  批量重置与单会话重置不会交错出半清空状态
- 无 TTL，条目存活到显式重置或进程重启
"""

import asyncio
from typing import Any

import structlog

log = structlog.get_logger()


class SessionStateStore:
    """会话级工具状态（内存）"""

    def __init__(self):
        self._sessions: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str, tool_id: str, default: Any = None) -> Any:
        """读取状态，会话或工具条目不存在时返回 default"""
        async with self._lock:
            return self._sessions.get(session_id, {}).get(tool_id, default)

    async def set(self, session_id: str, tool_id: str, value: Any) -> None:
        """写入状态（不存在则创建会话条目）"""
        async with self._lock:
            self._sessions.setdefault(session_id, {})[tool_id] = value

    async def delete(self, session_id: str, tool_id: str) -> bool:
        """删除单个工具的状态，返回是否确实删除了条目"""
        async with self._lock:
            tools = self._sessions.get(session_id)
            if tools is None or tool_id not in tools:
                return False
            del tools[tool_id]
            if not tools:
                del self._sessions[session_id]
            return True

    async def reset(self, session_id: str | None = None) -> dict[str, bool]:
        """
        重置状态，幂等：
        - 指定 session_id：只清除该会话，不存在也视为成功
        - 不指定：清空全部会话
        """
        async with self._lock:
            if session_id is not None:
                removed = self._sessions.pop(session_id, None) is not None
                log.info("会话工具状态已重置", session_id=session_id, removed=removed)
            else:
                count = len(self._sessions)
                self._sessions.clear()
                log.info("全部会话工具状态已重置", session_count=count)
        return {"success": True}

    def session_ids(self) -> list[str]:
        """当前持有状态的会话 id 快照"""
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
