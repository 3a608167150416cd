from .system import FINANCE_SYSTEM_PROMPT, build_finance_system_prompt  # noqa: F401
