"""Engine — граница внешнего движка исполнения команд."""

from .interfaces import DelegateCallDenied, DelegateCallPolicy, EngineError, ScriptEngine
from .scripted import CallType, Command, ScriptedEngine

__all__ = [
    "ScriptEngine",
    "EngineError",
    "DelegateCallDenied",
    "DelegateCallPolicy",
    "CallType",
    "Command",
    "ScriptedEngine",
]
