# sqliradar/modules.py - Module contract and name-keyed registry

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .options import OptionPairs
from .utils.logger import setup_logger

logger = setup_logger("modules")


@dataclass
class ModuleResult:
    """What a module hands back to the console: a message and the findings behind it."""

    success: bool
    message: str
    findings: List[Any] = field(default_factory=list)


class BaseModule(abc.ABC):
    """Behaviour shared by every runnable module."""

    name: str = ""
    description: str = ""
    author: str = ""
    version: str = ""

    @abc.abstractmethod
    async def run(self, options: Optional[OptionPairs] = None) -> ModuleResult:
        """
        Execute the module.

        Args:
            options: Flat key/value option set, keys matched case-insensitively

        Returns:
            ModuleResult: Success summary or error message
        """
        pass

    def describe(self) -> str:
        return f"{self.name} (v{self.version}) by {self.author}\n    {self.description}"


class ModuleRegistry:
    """Maps module names to module instances. Built explicitly and passed around."""

    def __init__(self):
        self._modules: Dict[str, BaseModule] = {}

    def register(self, module: BaseModule, name: Optional[str] = None) -> None:
        key = name or module.name
        if not key:
            raise ValueError("Module must have a name to be registered")
        if key in self._modules:
            raise ValueError(f"Module '{key}' is already registered")
        self._modules[key] = module
        logger.debug(f"Module registered: {key}")

    def get(self, name: str) -> Optional[BaseModule]:
        return self._modules.get(name)

    def names(self) -> List[str]:
        return sorted(self._modules)

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[BaseModule]:
        return (self._modules[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._modules)


def build_registry() -> ModuleRegistry:
    """Registry holding every module shipped with SQLiRadar."""
    from .auxiliary import HttpHeaderInjectionModule, PortScannerModule
    from .core import SQLInjectionModule

    registry = ModuleRegistry()
    registry.register(SQLInjectionModule())
    registry.register(HttpHeaderInjectionModule())
    registry.register(PortScannerModule())
    return registry
