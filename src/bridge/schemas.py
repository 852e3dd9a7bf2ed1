from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any, List, Literal

class JsonRpcRequest(BaseModel):
    jsonrpc: str = "2.0"
    id: int = 1
    method: str
    params: Optional[Dict[str, Any]] = None

    def to_line(self) -> str:
        return self.model_dump_json(exclude_none=True) + "\n"

class ToolDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str = ""

class ToolListing(BaseModel):
    tools: List[ToolDescriptor]
    source: Literal["server", "fallback"] = "server"

class ProcessOutcome(BaseModel):
    stdout: str
    stderr: str
    exit_code: int
    duration_ms: int
