"""
Hand-off of expanded requests to the create collaborator.

The collaborator is any callable that stores one record (a database
insert, an HTTP call, a list.append in tests). Requests are handed over
one at a time, in list order, so every failure can be attributed to a
specific (date, class) pair. There is no rollback: records created before
a failure stay created, and the result list says exactly which ones.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from schoolcal.model import ConcreteRequest, PersistResult


def persist_requests(
    requests: Sequence[ConcreteRequest],
    create: Callable[[dict[str, Any]], Any],
    stop_on_error: bool = False,
    tz_offset: Optional[str] = None,
) -> list[PersistResult]:
    """
    Call `create(record)` once per request. Returns one result per request.

    With stop_on_error=True the remaining requests are reported as skipped
    after the first failure.
    """
    results: list[PersistResult] = []
    failed = False

    for req in requests:
        if failed and stop_on_error:
            results.append(PersistResult(request=req, ok=False, skipped=True))
            continue
        try:
            created = create(req.to_record(tz_offset=tz_offset))
        except Exception as e:
            failed = True
            results.append(PersistResult(request=req, ok=False, error=str(e) or type(e).__name__))
            continue
        results.append(PersistResult(request=req, ok=True, record=created))

    return results


def summarize(results: Sequence[PersistResult]) -> dict[str, int]:
    return {
        "created": sum(1 for r in results if r.ok),
        "failed": sum(1 for r in results if not r.ok and not r.skipped),
        "skipped": sum(1 for r in results if r.skipped),
    }
