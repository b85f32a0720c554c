from __future__ import annotations

import builtins
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar, get_type_hints

from dependency_arguments.arguments import Arguments
from dependency_arguments.model.keys import ArgumentKeyKind, argument_key_kind

T = TypeVar("T")


class ArgumentResolutionError(RuntimeError):
    """
    Raised when a callable's parameters cannot be satisfied from an Arguments
    container.
    """

    def __init__(
        self,
        message: str,
        *,
        target: Callable[..., Any],
        missing: Sequence[str] = (),
    ):
        super().__init__(message)
        self.target = target
        self.missing = tuple(missing)


class ParameterSource(Enum):
    NAME = "name"
    TYPE = "type"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ResolvedParameter:
    name: str
    value: Any
    source: ParameterSource


def _target_name(target: Callable[..., Any]) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


def _annotation_type(annotation: Any, namespace: Mapping[str, Any]) -> Any:
    # bare names only; anything more involved stays unresolved
    if isinstance(annotation, str):
        annotation = namespace.get(annotation, getattr(builtins, annotation, None))
    if argument_key_kind(annotation) is ArgumentKeyKind.TYPE:
        return annotation
    return None


def _type_hints(target: Callable[..., Any]) -> Mapping[str, Any]:
    hinted: Any = target.__init__ if inspect.isclass(target) else target
    try:
        return get_type_hints(hinted)
    except (NameError, TypeError) as e:
        logging.debug(f"type hints unavailable for {_target_name(target)}: {e}")
        namespace: Mapping[str, Any] = getattr(hinted, "__globals__", {})
        resolved = {
            name: _annotation_type(annotation, namespace)
            for name, annotation in getattr(hinted, "__annotations__", {}).items()
        }
        return {name: hint for name, hint in resolved.items() if hint is not None}


def plan_parameters(
    target: Callable[..., Any], arguments: Arguments | None = None
) -> list[ResolvedParameter]:
    """
    Work out where each parameter of ``target`` gets its value from.

    Lookup order per parameter:
      1. a named argument matching the parameter name (case-insensitive)
      2. a typed argument keyed by exactly the annotated type
      3. the parameter's own default

    ``*args`` and ``**kwargs`` are skipped. ``arguments`` is only read, never
    mutated; None stands for ``Arguments.EMPTY``.

    Raises:
        ArgumentResolutionError: if a required parameter is positional-only, or
            one or more parameters have no value. ``missing`` lists all of them.
    """
    args = Arguments.EMPTY if arguments is None else arguments
    sig = inspect.signature(target)
    hints = _type_hints(target)
    target_name = _target_name(target)

    planned: list[ResolvedParameter] = []
    missing: list[str] = []

    for param in sig.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        if param.kind is param.POSITIONAL_ONLY:
            if param.default is param.empty:
                raise ArgumentResolutionError(
                    f"{target_name}: positional-only parameter {param.name!r} cannot be supplied by keyword",
                    target=target,
                    missing=(param.name,),
                )
            continue

        annotation = hints.get(param.name)

        if param.name in args:
            planned.append(
                ResolvedParameter(param.name, args[param.name], ParameterSource.NAME)
            )
        elif (
            argument_key_kind(annotation) is ArgumentKeyKind.TYPE
            and annotation in args
        ):
            planned.append(
                ResolvedParameter(param.name, args[annotation], ParameterSource.TYPE)
            )
        elif param.default is not param.empty:
            planned.append(
                ResolvedParameter(param.name, param.default, ParameterSource.DEFAULT)
            )
        else:
            missing.append(param.name)
            continue

        logging.debug(
            f"parameter resolved: {target_name}.{param.name} source={planned[-1].source.value}"
        )

    if missing:
        raise ArgumentResolutionError(
            f"{target_name}: no argument available for parameters {missing}",
            target=target,
            missing=missing,
        )

    return planned


def resolve_parameters(
    target: Callable[..., Any], arguments: Arguments | None = None
) -> dict[str, Any]:
    """
    Keyword arguments for calling ``target``. Parameters satisfied by their own
    default are left out so the callable applies the default itself.
    """
    return {
        p.name: p.value
        for p in plan_parameters(target, arguments)
        if p.source is not ParameterSource.DEFAULT
    }


def invoke(target: Callable[..., T], arguments: Arguments | None = None) -> T:
    return target(**resolve_parameters(target, arguments))
