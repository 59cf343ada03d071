from pydantic import BaseModel
from typing import List

class UsageError(BaseModel):
    error: str = "Missing query parameter"
    usage: str = "/api/cheat?q=tar"
    examples: List[str] = ["?q=tar", "?q=python/list", "?q=go/:learn"]

class UpstreamFailure(BaseModel):
    error: str = "Failed to fetch from cheat.sh"
    message: str

class UpstreamResponse(BaseModel):
    status_code: int
    text: str
