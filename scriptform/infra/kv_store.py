"""表单配置使用的 key-value 持久化后端.

store 只依赖同步的 ``get(key)`` / ``set(key, value)`` 语义, 值是整份 JSON 文本.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Protocol

from scriptform.constants import STORAGE_KEY_PATTERN
from scriptform.utils.structlog_config import get_system_logger

logger = get_system_logger()


class KeyValueStore(Protocol):
    """按固定 key 读写整块文本的存储协议."""

    def get(self, key: str) -> str | None:
        """返回 key 对应的文本, 不存在时返回 None."""
        ...

    def set(self, key: str, value: str) -> None:
        """整体覆盖 key 对应的文本, 失败时抛出 OSError."""
        ...


class InMemoryKeyValueStore:
    """进程内存储, 用于测试与 ``FORM_CONFIG_BACKEND=memory``."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """每个 key 对应目录下的一个 ``<key>.json`` 文件.

    写入先落到同目录的临时文件, 再通过 ``os.replace`` 原子替换, 读者不会看到写了一半的文档.
    """

    def __init__(self, directory: str | Path) -> None:
        """初始化文件存储, 目录在首次写入时创建."""
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        """返回存储目录.

        Returns:
            Path: 所有 key 文件所在的目录.

        """
        return self._directory

    def path_for(self, key: str) -> Path:
        """返回 key 对应的文件路径, key 只允许字母数字与 ``_.-``."""
        if not STORAGE_KEY_PATTERN.match(key):
            msg = f"非法的存储 key: {key!r}"
            raise ValueError(msg)
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as buffer:
                buffer.write(value)
                buffer.flush()
                os.fsync(buffer.fileno())
            os.replace(tmp_name, path)
        except OSError:
            with suppress(OSError):
                os.unlink(tmp_name)
            raise
        logger.debug("kv_store_written", path=str(path), size=len(value))


__all__ = ["InMemoryKeyValueStore", "JsonFileKeyValueStore", "KeyValueStore"]
