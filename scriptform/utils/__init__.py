"""ScriptForm - 通用工具."""
