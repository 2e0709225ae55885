"""
请求上下文：通过 contextvars 在协程间传播 trace_id / user_id
"""

import contextvars

trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")
user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="anonymous")


def get_trace_id() -> str:
    return trace_id_var.get()


def get_user_id() -> str:
    return user_id_var.get()
