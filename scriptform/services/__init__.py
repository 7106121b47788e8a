"""ScriptForm 服务层."""
