"""
Request rewriter compilation.

Turns the authored ``request_rewriters`` section into immutable instruction
sequences that origins and paths refer to by name. ``chain exec <name>``
instructions are expanded inline so consumers never resolve names at
request time.

Usage:
    from proxyconf.rewriter import compile_rewriters, build_rewriter_options

    options = build_rewriter_options({"strip": {"instructions": [["header", "delete", "Cookie"]]}})
    compiled = compile_rewriters(options)
    compiled["strip"]   # (Instruction(scope='header', verb='delete', args=('Cookie',)),)
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .errors import RewriterCompileError
from .options.rewriter import RewriterOptions

log = logging.getLogger(__name__)

# (scope, verb) -> number of arguments after the verb
INSTRUCTION_ARITY: Dict[Tuple[str, str], int] = {
    ("method", "set"): 1,
    ("host", "set"): 1,
    ("host", "replace"): 2,
    ("hostname", "set"): 1,
    ("hostname", "replace"): 2,
    ("port", "set"): 1,
    ("port", "replace"): 2,
    ("port", "delete"): 0,
    ("path", "set"): 1,
    ("path", "replace"): 2,
    ("param", "set"): 2,
    ("param", "append"): 2,
    ("param", "replace"): 3,
    ("param", "delete"): 1,
    ("params", "set"): 1,
    ("params", "replace"): 2,
    ("header", "set"): 2,
    ("header", "append"): 2,
    ("header", "replace"): 3,
    ("header", "delete"): 1,
    ("chain", "exec"): 1,
}

_HTTP_METHODS = {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "CONNECT", "TRACE"}


@dataclass(frozen=True)
class Instruction:
    """One compiled request mutation."""
    scope: str
    verb: str
    args: Tuple[str, ...] = ()


RewriteInstructions = Tuple[Instruction, ...]
RewriterCompiler = Callable[[Mapping[str, RewriterOptions]], Dict[str, RewriteInstructions]]


def build_rewriter_options(raw: Optional[Mapping[str, Any]]) -> Dict[str, RewriterOptions]:
    """Validate the raw ``request_rewriters`` section into RewriterOptions."""
    options: Dict[str, RewriterOptions] = {}
    for name, body in (raw or {}).items():
        if body is None:
            body = {}
        if not isinstance(body, Mapping):
            raise RewriterCompileError(
                f"invalid rewriter config [{name}]: expected a mapping", rewriter=name)
        try:
            opts = RewriterOptions.model_validate(dict(body))
        except ValidationError as e:
            raise RewriterCompileError(f"invalid rewriter config [{name}]: {e}", rewriter=name) from e
        opts.name = name
        options[name] = opts
    return options


def _parse_instruction(rewriter: str, index: int, raw: List[str]) -> Instruction:
    scope, verb = raw[0].lower(), raw[1].lower()
    args = tuple(raw[2:])
    arity = INSTRUCTION_ARITY.get((scope, verb))
    if arity is None:
        raise RewriterCompileError(
            f"unknown instruction [{scope} {verb}] at index {index} in rewriter [{rewriter}]",
            rewriter=rewriter)
    if len(args) != arity:
        raise RewriterCompileError(
            f"instruction [{scope} {verb}] at index {index} in rewriter [{rewriter}] "
            f"expects {arity} argument(s), got {len(args)}", rewriter=rewriter)
    if scope == "method":
        args = (args[0].upper(),)
        if args[0] not in _HTTP_METHODS:
            raise RewriterCompileError(
                f"invalid method [{args[0]}] in rewriter [{rewriter}]", rewriter=rewriter)
    elif scope == "port" and verb == "set" and not args[0].isdigit():
        raise RewriterCompileError(
            f"invalid port [{args[0]}] in rewriter [{rewriter}]", rewriter=rewriter)
    return Instruction(scope=scope, verb=verb, args=args)


def compile_rewriters(options: Mapping[str, RewriterOptions]) -> Dict[str, RewriteInstructions]:
    """
    Compile every declared rewriter.

    Args:
        options: Rewriter options keyed by name

    Returns:
        Compiled instruction sequences keyed by rewriter name

    Raises:
        RewriterCompileError: naming the first rewriter that cannot be compiled
    """
    parsed: Dict[str, List[Instruction]] = {}
    for name, opts in options.items():
        parsed[name] = [_parse_instruction(name, i, raw) for i, raw in enumerate(opts.instructions)]

    compiled: Dict[str, RewriteInstructions] = {}

    def expand(name: str, stack: Tuple[str, ...]) -> RewriteInstructions:
        if name in compiled:
            return compiled[name]
        if name in stack:
            chain = " -> ".join(stack + (name,))
            raise RewriterCompileError(f"rewriter chain loop detected: {chain}", rewriter=stack[0])
        out: List[Instruction] = []
        for instruction in parsed[name]:
            if instruction.scope == "chain":
                target = instruction.args[0]
                if target not in parsed:
                    raise RewriterCompileError(
                        f"rewriter [{name}] chains to unknown rewriter [{target}]", rewriter=name)
                out.extend(expand(target, stack + (name,)))
            else:
                out.append(instruction)
        compiled[name] = tuple(out)
        return compiled[name]

    for name in parsed:
        expand(name, ())

    log.debug("rewriter.compiled count=%d", len(compiled))
    return compiled
