"""
/mcp 工具网关接口

端点：
- POST   /mcp — 执行工具（manageMcp）
- GET    /mcp — 列出全部工具及其 Schema（getMcp）
- DELETE /mcp — 重置会话工具状态，可选 session_id 只清单个会话（manageMcp）

路由只做鉴权与参数解析，校验 / 分发 / 错误分类全部交给 ToolGateway。
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from app.security.auth import AuthenticatedUser, require_rights
from app.security.roles import GET_MCP, MANAGE_MCP
from app.tools.runtime import ToolRuntime, get_tool_runtime

router = APIRouter(prefix="/mcp", tags=["MCP 工具"])
log = structlog.get_logger()


# ── 请求/响应模型 ──

class ExecuteToolRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tool: str = Field(min_length=1, description="要执行的工具 ID")
    inputs: dict[str, Any] | None = Field(default=None, description="工具入参")
    session_id: str | None = Field(default=None, description="会话 ID，工具跨调用状态按此隔离")


class ToolListResponse(BaseModel):
    tools: list[dict[str, Any]]


class ResetResponse(BaseModel):
    success: bool


# ── 接口 ──

@router.post("")
async def execute_tool(
    body: ExecuteToolRequest,
    user: AuthenticatedUser = Depends(require_rights(MANAGE_MCP)),
    runtime: ToolRuntime = Depends(get_tool_runtime),
):
    """执行工具，返回 {"result": ...}"""
    log.info("MCP 工具调用", tool=body.tool, session_id=body.session_id)
    return await runtime.gateway.execute(
        body.tool,
        body.inputs,
        session_id=body.session_id,
        user_id=user.id,
    )


@router.get("", response_model=ToolListResponse)
async def list_tools(
    user: AuthenticatedUser = Depends(require_rights(GET_MCP)),
    runtime: ToolRuntime = Depends(get_tool_runtime),
):
    """列出可用工具及其输入 / 输出 Schema"""
    return ToolListResponse(tools=runtime.introspection.list_tools())


@router.delete("", response_model=ResetResponse)
async def reset_tools(
    session_id: str | None = Query(default=None, description="只重置该会话；不传则全部重置"),
    user: AuthenticatedUser = Depends(require_rights(MANAGE_MCP)),
    runtime: ToolRuntime = Depends(get_tool_runtime),
):
    """重置工具会话状态（幂等）"""
    return await runtime.state.reset(session_id)
