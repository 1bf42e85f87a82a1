"""Steps and procedures.

A :class:`StatsStep` wraps one function together with the names of the
arguments it reads from a specification.  A :class:`StatsProcedure` is a
fixed, ordered tuple of steps.  Both are plain values: two steps are the
same step when they share name, function and sharing mode, and two
procedures are the same procedure when they share type, name and steps.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

ArgsTransform = Callable[[Mapping[str, Any]], Sequence[Any]]
ArgsCombiner = Callable[[Sequence[Mapping[str, Any]]], Sequence[Any]]


class StatsStep:
    """One named computation inside a procedure.

    Parameters
    ----------
    name : str
        Name used when printing the step.
    func : callable
        Function called with the grouped arguments followed by the
        combined arguments.  It must return a mapping of named results.
    by_id : bool
        Whether arguments from several specifications are grouped by
        object identity (``True``) or by value equality (``False``).
    required : sequence of str, optional
        Names of arguments without defaults.
    default : mapping, optional
        Arguments with default values; a value found in the argument
        mapping takes precedence.
    transformed : callable, optional
        ``transformed(args) -> tuple`` deriving extra positional arguments
        from the full argument mapping.
    combined : callable, optional
        ``combined(list_of_args) -> tuple`` combining arguments that may
        differ across specifications sharing one call.
    copy_args : sequence of int, optional
        Positions (in the grouped arguments) of objects that ``func``
        modifies in place.

    Calling a step runs it for a single specification and returns the
    argument mapping merged with the results of ``func``.
    """

    __slots__ = ("name", "func", "by_id", "required", "default", "_transformed", "_combined", "copy_args")

    def __init__(
        self,
        name: str,
        func: Callable[..., Mapping[str, Any]],
        by_id: bool,
        *,
        required: Sequence[str] = (),
        default: Optional[Mapping[str, Any]] = None,
        transformed: Optional[ArgsTransform] = None,
        combined: Optional[ArgsCombiner] = None,
        copy_args: Sequence[int] = (),
    ) -> None:
        set_ = object.__setattr__
        set_(self, "name", str(name))
        set_(self, "func", func)
        set_(self, "by_id", bool(by_id))
        set_(self, "required", tuple(required))
        set_(self, "default", dict(default or {}))
        set_(self, "_transformed", transformed)
        set_(self, "_combined", combined)
        set_(self, "copy_args", tuple(int(i) for i in copy_args))

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    # ---------- argument extraction
    def transformed(self, args: Mapping[str, Any]) -> Tuple[Any, ...]:
        if self._transformed is None:
            return ()
        return tuple(self._transformed(args))

    def combined_args(self, allargs: Sequence[Mapping[str, Any]]) -> Tuple[Any, ...]:
        if self._combined is None:
            return ()
        return tuple(self._combined(allargs))

    def group_args(self, args: Mapping[str, Any]) -> Tuple[Any, ...]:
        """Return the arguments that decide whether two specifications can share a call.

        The tuple holds the required values, then the defaulted values and
        finally the transformed values, in that order.
        """
        out: List[Any] = []
        for key in self.required:
            if key not in args:
                raise KeyError(f"step {self.name} requires argument '{key}'")
            out.append(args[key])
        for key, val in self.default.items():
            out.append(args[key] if key in args else val)
        out.extend(self.transformed(args))
        return tuple(out)

    # ---------- execution
    def run(self, gargs: Sequence[Any], cargs: Sequence[Any] = ()) -> Dict[str, Any]:
        ret = self.func(*gargs, *cargs)
        if not isinstance(ret, Mapping):
            raise TypeError(
                f"step {self.name} must return a mapping of named results, "
                f"got {type(ret).__name__}"
            )
        return dict(ret)

    def __call__(self, args: Optional[Mapping[str, Any]] = None, verbose: bool = False) -> Dict[str, Any]:
        args = {} if args is None else args
        if "verbose" in args:
            verbose = bool(args["verbose"])
        if verbose:
            print(f"[STEP] Running {self.name}")
        ret = self.run(self.group_args(args), self.combined_args((args,)))
        return {**args, **ret}

    def __copy__(self) -> "StatsStep":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "StatsStep":
        return self

    # ---------- value semantics
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsStep):
            return NotImplemented
        return (
            self.name == other.name
            and self.func is other.func
            and self.by_id == other.by_id
        )

    def __hash__(self) -> int:
        return hash((self.name, id(self.func), self.by_id))

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        mod = getattr(self.func, "__module__", None)
        fname = getattr(self.func, "__qualname__", None) or getattr(self.func, "__name__", repr(self.func))
        target = fname if mod in (None, "__main__") else f"{mod}.{fname}"
        return f"{self.name} ({type(self).__name__} that calls {target})"


class StatsProcedure:
    """An ordered, fixed sequence of :class:`StatsStep` objects.

    Subclasses represent families of procedures and may override
    :meth:`result` to turn the final trace into a dedicated result object.
    """

    def __init__(self, name: str, steps: Iterable[StatsStep]) -> None:
        steps = tuple(steps)
        for s in steps:
            if not isinstance(s, StatsStep):
                raise TypeError(f"expect StatsStep, got {type(s).__name__}")
        seen = set()
        for s in steps:
            if s in seen:
                raise ValueError(f"step {s} appears more than once in procedure {name}")
            seen.add(s)
        self._name = str(name)
        self._steps = steps

    @property
    def name(self) -> str:
        return self._name

    @property
    def steps(self) -> Tuple[StatsStep, ...]:
        return self._steps

    def result(self, trace: Dict[str, Any]) -> Dict[str, Any]:
        return trace

    # ---------- container protocol
    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, i: Union[int, slice]) -> Union[StatsStep, List[StatsStep]]:
        if isinstance(i, slice):
            return list(self._steps[i])
        return self._steps[i]

    def __iter__(self) -> Iterator[StatsStep]:
        return iter(self._steps)

    # ---------- value semantics
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsProcedure):
            return NotImplemented
        return type(self) is type(other) and self._name == other._name and self._steps == other._steps

    def __hash__(self) -> int:
        return hash((type(self), self._name, self._steps))

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        n = len(self._steps)
        head = f"{self._name} ({type(self).__name__} with {n} step"
        if n == 0:
            return head + ")"
        head += "s):" if n > 1 else "):"
        return head + "\n  " + " |> ".join(str(s) for s in self._steps)


__all__ = ["StatsStep", "StatsProcedure"]
