"""基础设施: 持久化后端."""
