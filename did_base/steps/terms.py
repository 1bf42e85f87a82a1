# did_base/steps/terms.py
from __future__ import annotations

from typing import Dict, Sequence

from ..procedures import StatsStep


def group_terms(treatintterms: Sequence[str], xterms: Sequence[str]) -> Dict[str, Sequence[str]]:
    """Return the arguments unchanged.

    Because :data:`GroupTerms` groups specifications by value, every
    specification in a group receives the same object back, which lets the
    following steps group by object identity.
    """
    return {"treatintterms": treatintterms, "xterms": xterms}


GroupTerms = StatsStep(
    "GroupTerms",
    group_terms,
    False,
    required=("treatintterms", "xterms"),
)


__all__ = ["group_terms", "GroupTerms"]
