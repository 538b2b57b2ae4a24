from __future__ import annotations

import logging
from typing import Any, Callable


class SideEffectRunner:
    """
    Runs post-commit side effects best-effort.
    Failures are logged and swallowed; with a submit callable (e.g. an executor's
    submit) they run off the caller's path.
    """

    def __init__(self, submit: Callable[..., Any] | None = None) -> None:
        self._submit = submit
        self._logger = logging.getLogger(__name__)

    def run(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        if self._submit is not None:
            self._submit(self._guarded, name, fn, args, kwargs)
            return
        self._guarded(name, fn, args, kwargs)

    def run_now(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run inline and return the result, or None if it failed."""
        return self._guarded(name, fn, args, kwargs)

    def _guarded(self, name: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            self._logger.exception("Side effect failed", extra={"side_effect": name, "error": str(e)})
            return None
