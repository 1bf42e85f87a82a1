# did_base/specset.py
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .helpers.config import ProceedOptions
from .procedures import StatsProcedure, StatsSpec, proceed

Formatter = Callable[[Dict[str, Any]], Tuple[str, StatsProcedure, Dict[str, Any]]]


def default_formatter(args: Dict[str, Any]) -> Tuple[str, StatsProcedure, Dict[str, Any]]:
    """Split a merged argument dict into ``(name, procedure, args)``.

    The keys ``"name"`` and ``"procedure"`` are removed from the arguments;
    everything else is passed on to the steps.
    """
    args = dict(args)
    name = args.pop("name", "")
    if "procedure" not in args:
        raise ValueError("no procedure is specified for the specification")
    procedure = args.pop("procedure")
    return name, procedure, args


def specset(
    entries: Iterable[Mapping[str, Any]],
    *,
    defaults: Optional[Mapping[str, Any]] = None,
    formatter: Optional[Formatter] = None,
    **options: Any,
):
    """Build a batch of :class:`StatsSpec` sharing default arguments and run it.

    Parameters
    ----------
    entries : iterable of mapping
        Arguments of each specification.
    defaults : mapping, optional
        Arguments shared by all specifications.  A value given in an entry
        takes precedence, and these values supersede the defaults attached
        to the steps themselves.
    formatter : callable, optional
        Turns a merged argument dict into ``(name, procedure, args)``.
        Defaults to :func:`default_formatter`.
    **options
        Fields of :class:`~did_base.helpers.config.ProceedOptions`.

    Returns
    -------
    list of StatsSpec, or (list of StatsSpec, list)
        The specifications alone when ``noproceed=True``, otherwise the
        specifications together with the output of :func:`proceed`.
    """
    opts = ProceedOptions(**options)
    opts.keep_names()
    fmt = formatter or default_formatter
    base = dict(defaults or {})

    specs: List[StatsSpec] = []
    for entry in entries:
        name, procedure, args = fmt({**base, **entry})
        specs.append(StatsSpec(name, procedure, args))
    if not specs:
        raise ValueError("no specification is found for specset")

    if opts.noproceed:
        return specs
    results = proceed(
        specs,
        verbose=opts.verbose,
        keep=opts.keep,
        keepall=opts.keepall,
        pause=opts.pause,
    )
    return specs, results


__all__ = ["specset", "default_formatter"]
