from pydantic import BaseModel
from typing import List, Optional, Dict, Any

from src.bridge.schemas import ToolDescriptor

class ExecuteRequest(BaseModel):
    tool: Optional[str] = None
    arguments: Dict[str, Any] = {}

class ExecuteResponse(BaseModel):
    success: bool = True
    tool: str
    arguments: Dict[str, Any]
    data: Any = None
    timestamp: str

class ToolsResponse(BaseModel):
    success: bool = True
    tools: List[ToolDescriptor]
    source: str
    timestamp: str

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    timestamp: str
    tool: Optional[str] = None
    arguments: Optional[Dict[str, Any]] = None

class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
    environment: str
