"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "mcp_backend_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "mcp_backend_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[50, 100, 200, 500, 1000, 2000, 5000, 10000],
)

# ── 工具网关指标 ──

TOOL_CALL_TOTAL = Counter(
    "mcp_backend_tool_call_total",
    "工具调用总数",
    ["tool_id", "status"],  # status: success/invalid_input/failed/internal
)

TOOL_CALL_DURATION = Histogram(
    "mcp_backend_tool_call_duration_ms",
    "工具执行耗时（毫秒）",
    ["tool_id"],
    buckets=[5, 10, 50, 100, 200, 500, 1000, 5000],
)

# ── 错误指标 ──

ERROR_TOTAL = Counter(
    "mcp_backend_error_total",
    "错误总数",
    ["error_type"],  # invalid_tool/invalid_input/tool_error/internal/unknown
)
