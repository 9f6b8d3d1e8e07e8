"""In-memory key-value store (dry runs, no persistence)."""

from typing import Dict, Optional

class MemoryKVStore:
    """프로세스 메모리 기반 키-값 저장소"""
    
    def __init__(self):
        self.data: Dict[str, str] = {}
    
    async def init(self) -> None:
        return None
    
    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)
    
    async def set(self, key: str, value: str) -> None:
        self.data[key] = value
