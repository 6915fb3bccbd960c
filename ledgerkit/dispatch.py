"""Routing of instructions to interfaces and handlers, and client-side builders for them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from .address import Pubkey
from .builder import InstructionBuilder

__all__ = ["DispatchError", "DispatchContext", "Interface", "Program", "Client"]

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


class DispatchError(Exception):
    """Raised when a handler or interface cannot be resolved."""


class DispatchContext(Protocol):
    """What dispatch needs from an execution context."""

    interface_id: int
    handler_id: int


def _position(items: Sequence[Any], matches: Callable[[Any], bool]) -> int | None:
    return next((index for index, item in enumerate(items) if matches(item)), None)


class Interface:
    """A named, ordered set of handler functions; a handler's position is its id."""

    def __init__(self, name: str, handlers: Sequence[Handler]) -> None:
        self.name = name
        self.handlers: tuple[Handler, ...] = tuple(handlers)

    def handler_id(self, handler_fn: Handler) -> int:
        index = _position(self.handlers, lambda handler: handler == handler_fn)
        if index is None:
            raise DispatchError(f"invalid primitive handler for interface {self.name}")
        return index

    def program(self, ctx: DispatchContext) -> Any:
        """Run the handler selected by ``ctx.handler_id``."""
        handler_id = ctx.handler_id
        if not 0 <= handler_id < len(self.handlers):
            logger.error("invalid handler id %s for interface %s", handler_id, self.name)
            raise DispatchError(f"invalid handler id {handler_id} for interface {self.name}")
        return self.handlers[handler_id](ctx)

    def __len__(self) -> int:
        return len(self.handlers)

    def __repr__(self) -> str:
        return f"Interface({self.name!r}, handlers={len(self.handlers)})"


class Program:
    """A program: an id, a name and its interfaces; an interface's position is its id."""

    def __init__(self, name: str, program_id: Pubkey, interfaces: Sequence[Interface]) -> None:
        self.name = name
        self.program_id = program_id
        self.interfaces: tuple[Interface, ...] = tuple(interfaces)

    def interface_id(self, interface: Interface | Handler) -> int:
        """Position of an interface, given as the interface or its ``program`` method."""
        index = _position(
            self.interfaces,
            lambda entry: entry is interface or entry.program == interface,
        )
        if index is None:
            raise DispatchError("Unknown interface handler! (check the program declaration)")
        return index

    def program(self, ctx: DispatchContext) -> Any:
        """Route ``ctx`` to the interface selected by ``ctx.interface_id``."""
        interface_id = ctx.interface_id
        if not 0 <= interface_id < len(self.interfaces):
            logger.error("invalid interface id %s for program %s", interface_id, self.name)
            raise DispatchError(f"invalid interface id {interface_id}")
        return self.interfaces[interface_id].program(ctx)

    def __repr__(self) -> str:
        return f"Program({self.name!r}, {self.program_id}, interfaces={len(self.interfaces)})"


class Client:
    """Creates instruction builders aimed at one interface of a program."""

    def __init__(self, name: str, program: Program, interface: Interface) -> None:
        self.name = name
        self.program = program
        self.interface = interface

    def handler_id(self, handler_fn: Handler) -> int:
        return self.interface.handler_id(handler_fn)

    def execution_context_for(self, handler_fn: Handler) -> InstructionBuilder:
        """A builder addressed to ``handler_fn`` within this client's interface."""
        interface_id = self.program.interface_id(self.interface)
        handler_id = self.handler_id(handler_fn)
        return InstructionBuilder(self.program.program_id, interface_id, handler_id)

    def __repr__(self) -> str:
        return f"Client({self.name!r}, interface={self.interface.name!r})"