from .tools import AgentTools
from .schemas import AgentResult
from .client import AgentClient

__all__ = [
    'AgentTools',
    'AgentClient',
    'AgentResult',
]
